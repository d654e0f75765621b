"""Evaluator agent set: named personas that score the same work independently."""

import json
import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from .config import ServiceConfig
from .errors import AgentOutputError
from .json_extract import extract_json
from .llm_client import LLMClient
from .models import JobSpec, PolicyName, QualityOpinion, ReviewOpinion, WorkArtifact
from .prompts import (
    LENIENT_QUALITY,
    LENIENT_REVIEW,
    NEUTRAL_QUALITY,
    NEUTRAL_REVIEW,
    STRICT_QUALITY,
    STRICT_REVIEW,
    VERY_LENIENT_QUALITY,
    VERY_LENIENT_REVIEW,
    VERY_STRICT_QUALITY,
    VERY_STRICT_REVIEW,
    build_quality_agent_prompt,
    build_review_agent_prompt,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_SCORE = 1.0
MAX_SCORE = 10.0


@dataclass(frozen=True)
class AgentPolicy:
    name: PolicyName
    display_name: str
    quality_prompt: str
    review_prefix: str


def default_policies() -> List[AgentPolicy]:
    return [
        AgentPolicy("very_lenient", "Very lenient", VERY_LENIENT_QUALITY, VERY_LENIENT_REVIEW),
        AgentPolicy("lenient", "Lenient", LENIENT_QUALITY, LENIENT_REVIEW),
        AgentPolicy("neutral", "Neutral", NEUTRAL_QUALITY, NEUTRAL_REVIEW),
        AgentPolicy("strict", "Strict", STRICT_QUALITY, STRICT_REVIEW),
        AgentPolicy("very_strict", "Very strict", VERY_STRICT_QUALITY, VERY_STRICT_REVIEW),
    ]


def load_policies(path: str) -> List[AgentPolicy]:
    """Read an ordered JSON list of policy definitions."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON list of policy definitions")
    policies = []
    for entry in raw:
        try:
            policies.append(
                AgentPolicy(
                    name=str(entry["name"]),
                    display_name=str(entry.get("display_name", entry["name"])),
                    quality_prompt=str(entry["quality_prompt"]),
                    review_prefix=str(entry["review_prefix"]),
                )
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"{path}: invalid policy definition {entry!r}") from e
    return policies


def select_policies(policies: List[AgentPolicy], names: Iterable[str]) -> List[AgentPolicy]:
    """Pick the active policies, in the order they are named."""
    by_name = {p.name: p for p in policies}
    selected: List[AgentPolicy] = []
    for name in names:
        if name not in by_name:
            raise ValueError(f"Unknown agent policy: {name}")
        if by_name[name] not in selected:
            selected.append(by_name[name])
    if not selected:
        raise ValueError("At least one agent policy must be active")
    return selected


def policies_from_config(config: ServiceConfig) -> List[AgentPolicy]:
    available = load_policies(config.policy_file) if config.policy_file else default_policies()
    return select_policies(available, config.active_policies)


def require_object(policy: str, resp: Any) -> Dict[str, Any]:
    if not isinstance(resp, dict) or not resp:
        raise AgentOutputError(policy, "response", "no JSON object could be recovered", resp)
    return resp


def require_score(policy: str, resp: Dict[str, Any], key: str) -> float:
    value = resp.get(key)
    if value is None:
        raise AgentOutputError(policy, key, "missing", resp)
    if isinstance(value, bool):
        raise AgentOutputError(policy, key, f"not a number: {value!r}", resp)
    try:
        score = float(value)
    except (TypeError, ValueError):
        raise AgentOutputError(policy, key, f"not a number: {value!r}", resp) from None
    if math.isnan(score) or not MIN_SCORE <= score <= MAX_SCORE:
        raise AgentOutputError(policy, key, f"outside {MIN_SCORE:g}-{MAX_SCORE:g}: {score}", resp)
    return score


def string_list(policy: str, resp: Dict[str, Any], key: str, required: bool = False) -> List[str]:
    value = resp.get(key)
    if value is None:
        if required:
            raise AgentOutputError(policy, key, "missing", resp)
        logger.warning("Agent %s returned no %s", policy, key)
        return []
    if not isinstance(value, list):
        value = [value]
    return [str(v) for v in value]


def call_quality_agent(client: LLMClient,
                       policy: AgentPolicy,
                       work: WorkArtifact,
                       job: JobSpec) -> QualityOpinion:
    prompt = build_quality_agent_prompt(policy.quality_prompt, job)
    resp = require_object(policy.name, extract_json(work.ask(client, prompt)))
    opinion = QualityOpinion(
        policy=policy.name,
        quality=require_score(policy.name, resp, "quality"),
        positive_feedback=string_list(policy.name, resp, "positiveFeedback"),
        negative_feedback=string_list(policy.name, resp, "negativeFeedback"),
    )
    logger.info("Evaluation by %s agent: quality=%s", policy.name, opinion.quality)
    return opinion


def call_review_agent(client: LLMClient,
                      policy: AgentPolicy,
                      work: WorkArtifact,
                      context: str) -> ReviewOpinion:
    prompt = build_review_agent_prompt(policy.review_prefix, context)
    resp = require_object(policy.name, extract_json(work.ask(client, prompt)))
    opinion = ReviewOpinion(
        policy=policy.name,
        review_score=require_score(policy.name, resp, "reviewScore"),
        critical_consideration=string_list(policy.name, resp, "criticalConsideration"),
        fixable_score=require_score(policy.name, resp, "fixableScore"),
        reassign_score=require_score(policy.name, resp, "reassignScore"),
    )
    logger.info(
        "Review by %s agent: review=%s fixable=%s reassign=%s",
        policy.name, opinion.review_score, opinion.fixable_score, opinion.reassign_score,
    )
    return opinion


def run_agents(policies: List[AgentPolicy],
               call: Callable[[AgentPolicy], T],
               parallel: bool = False,
               max_workers: Optional[int] = None) -> List[T]:
    """Run ``call`` once per policy and return results in policy order.

    Any failure aborts the whole run; no partial result is returned.
    """
    if not policies:
        raise ValueError("no agent policies to run")
    if not parallel or len(policies) < 2:
        return [call(p) for p in policies]

    executor = ThreadPoolExecutor(max_workers=max_workers or len(policies))
    try:
        futures = {executor.submit(call, p): p for p in policies}
        results: Dict[str, T] = {}
        for future in as_completed(futures):
            results[futures[future].name] = future.result()
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return [results[p.name] for p in policies]
