"""LLM client wrapper used by every agent, the aggregator and the job helpers."""

import base64
import logging
from typing import Any, Callable, Dict, List, Optional

import openai
import requests
from openai import OpenAI
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from .config import ServiceConfig
from .errors import ModelInvocationError
from .models import ImageWork

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({408, 409, 429, 500, 502, 503, 504})
IMAGE_SIZE = "1024x1024"


def is_transient(exc: BaseException) -> bool:
    """Connection problems, timeouts, rate limits and upstream 5xx are worth retrying."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError):
        return exc.response is not None and exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError))


class LLMClient:
    """Thin wrapper around an OpenAI-compatible chat and image API.

    Uses the official SDK unless ``config.base_url`` points at a generic
    OpenAI-compatible endpoint, in which case plain HTTP is used.
    """

    def __init__(self, config: ServiceConfig, retry_wait: Optional[Any] = None):
        self.config = config
        self.retry_wait = retry_wait or wait_exponential_jitter(initial=1, max=20)
        self._sdk: Optional[OpenAI] = None

    @property
    def sdk(self) -> OpenAI:
        if self._sdk is None:
            # tenacity owns retries, so the SDK's own retry loop is disabled.
            self._sdk = OpenAI(
                api_key=self.config.api_key,
                timeout=self.config.request_timeout,
                max_retries=0,
            )
        return self._sdk

    def complete(self, prompt: str) -> str:
        """Send a text prompt and return the raw model text."""
        return self._chat([{"type": "text", "text": prompt}])

    def complete_with_image(self, prompt: str, image: ImageWork) -> str:
        """Send a prompt together with an inline image and return the raw model text."""
        encoded = base64.b64encode(image.data).decode("ascii")
        parts = [
            {"type": "image_url", "image_url": {"url": f"data:{image.mime_type};base64,{encoded}"}},
            {"type": "text", "text": prompt},
        ]
        return self._chat(parts)

    def generate_image(self, prompt: str) -> bytes:
        """Generate a single image and return its PNG bytes."""
        params: Dict[str, Any] = dict(
            model=self.config.image_model,
            prompt=prompt,
            n=1,
            size=IMAGE_SIZE,
        )
        if self.config.image_model.startswith("dall-e"):
            params["response_format"] = "b64_json"

        if self.config.base_url:
            data = self._invoke(self._post, "images/generations", params)["data"]
            b64 = data[0].get("b64_json") if data else None
        else:
            result = self._invoke(lambda: self.sdk.images.generate(**params))
            b64 = result.data[0].b64_json if result.data else None

        if not b64:
            raise ModelInvocationError("No image generated in the response")
        return base64.b64decode(b64)

    def _build_payload(self, content: List[Dict[str, Any]]) -> Dict[str, Any]:
        params: Dict[str, Any] = dict(
            model=self.config.text_model,
            messages=[{"role": "user", "content": content}],
            temperature=self.config.temperature,
        )
        if self.config.max_tokens is not None:
            params["max_tokens"] = self.config.max_tokens
        return params

    def _chat(self, content: List[Dict[str, Any]]) -> str:
        params = self._build_payload(content)

        if self.config.base_url:
            completion = self._invoke(self._post, "chat/completions", params)
            text = (completion.get("choices") or [{}])[0].get("message", {}).get("content")
        else:
            completion = self._invoke(lambda: self.sdk.chat.completions.create(**params))
            text = completion.choices[0].message.content if completion.choices else None

        if not isinstance(text, str) or not text.strip():
            raise ModelInvocationError("No text in the response", {"model": self.config.text_model})
        return text

    def _post(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.config.base_url.rstrip('/')}/{path}"
        headers = {"Authorization": f"Bearer {self.config.api_key}"} if self.config.api_key else {}
        resp = requests.post(url, json=params, headers=headers, timeout=self.config.request_timeout)
        resp.raise_for_status()
        return resp.json()

    def _invoke(self, fn: Callable[..., Any], *args: Any) -> Any:
        retrying = Retrying(
            reraise=True,
            stop=stop_after_attempt(self.config.max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception(is_transient),
        )
        try:
            return retrying(fn, *args)
        except (requests.RequestException, openai.APIError) as e:
            logger.error("Generative service call failed: %s", e)
            raise ModelInvocationError(f"Generative service call failed: {e}") from e
