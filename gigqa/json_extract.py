"""
Best-effort recovery of a JSON value from raw model text.

Model output is supposed to be exactly one JSON object, but in practice it may
be wrapped in Markdown fences, preceded by conversational preamble, followed by
prose, or cut off mid-structure. ``extract_json`` tries progressively more
tolerant strategies and never raises: when nothing usable is found it returns
an empty dict, and callers treat missing fields as "no usable signal".
"""

import json
import logging
from typing import Any, Union

from partial_json_parser import Allow
from partial_json_parser import loads as loads_partial

logger = logging.getLogger(__name__)

JsonValue = Union[dict, list]

_FENCE_JSON = "```json"
_FENCE = "```"
_decoder = json.JSONDecoder()


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith(_FENCE_JSON):
        text = text.replace(_FENCE_JSON, "", 1)
    if text.startswith("`") or text.endswith("`"):
        text = text.replace(_FENCE, "")
    return text.strip()


def _parse_partial(text: str) -> Any:
    """Parse a JSON value that may be followed by prose or cut off mid-structure."""
    try:
        value, _ = _decoder.raw_decode(text)
        return value
    except json.JSONDecodeError:
        pass
    return loads_partial(text, Allow.ALL)


def extract_json(raw_text: str) -> JsonValue:
    """Extract one JSON object or array from raw model text.

    Returns an empty dict when nothing can be recovered.
    """
    text = raw_text.replace("\n", "")
    text = _strip_fences(text)

    try:
        parsed = json.loads(text)
        if isinstance(parsed, (dict, list)):
            return parsed
        if isinstance(parsed, str):
            # double-encoded payload
            text = parsed
    except json.JSONDecodeError as e:
        logger.debug("Strict JSON parse failed: %s", e)

    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        logger.warning("No JSON found in model output: %.80r", raw_text)
        return {}
    text = _strip_fences(text[min(starts):])
    text = text.replace("{\\n", "{").replace("\\n}", "}")

    for _ in range(2):
        try:
            parsed = _parse_partial(text)
        except ValueError as e:
            logger.debug("Partial JSON parse failed: %s", e)
            break
        if isinstance(parsed, (dict, list)):
            return parsed
        if not isinstance(parsed, str):
            break
        text = parsed

    logger.warning("Could not recover JSON from model output: %.80r", raw_text)
    return {}
