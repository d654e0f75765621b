"""Service configuration, built once at startup and passed to every component."""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

DEFAULT_TEXT_MODEL = "gpt-4o-mini"
DEFAULT_IMAGE_MODEL = "gpt-image-1"


@dataclass(frozen=True)
class SubmissionPolicy:
    max_retries: int = 2
    veto_below: float = 5.0
    min_quality: float = 7.0


@dataclass(frozen=True)
class ServiceConfig:
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    text_model: str = DEFAULT_TEXT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    temperature: float = 0.2
    max_tokens: Optional[int] = None
    request_timeout: float = 60.0
    max_attempts: int = 3
    active_policies: List[str] = field(default_factory=lambda: ["neutral"])
    policy_file: Optional[str] = None
    parallel_agents: bool = False
    submission: SubmissionPolicy = field(default_factory=SubmissionPolicy)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServiceConfig":
        env = os.environ if environ is None else environ
        max_tokens = env.get("GIGQA_MAX_TOKENS")
        policies = env.get("GIGQA_ACTIVE_POLICIES", "neutral")
        return cls(
            api_key=env.get("LLM_API_KEY") or env.get("OPENAI_API_KEY"),
            base_url=env.get("LLM_BASE_URL") or None,
            text_model=env.get("GIGQA_TEXT_MODEL", DEFAULT_TEXT_MODEL),
            image_model=env.get("GIGQA_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            temperature=float(env.get("GIGQA_TEMPERATURE", "0.2")),
            max_tokens=int(max_tokens) if max_tokens else None,
            request_timeout=float(env.get("GIGQA_REQUEST_TIMEOUT", "60")),
            max_attempts=int(env.get("GIGQA_MAX_ATTEMPTS", "3")),
            active_policies=[p.strip() for p in policies.split(",") if p.strip()],
            policy_file=env.get("GIGQA_POLICY_FILE") or None,
            parallel_agents=env.get("GIGQA_PARALLEL_AGENTS", "").lower() in ("1", "true", "yes"),
        )
