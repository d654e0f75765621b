"""Turn a stored work reference into a WorkArtifact.

HTTP(S) references are fetched and classified by content type; anything else,
including a reference whose fetch fails, is passed through as text.
"""

import logging
import posixpath
from typing import Optional
from urllib.parse import urlparse

import requests

from .models import ImageWork, TextWork, WorkArtifact

logger = logging.getLogger(__name__)


def is_http_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _file_name(url: str) -> str:
    return posixpath.basename(urlparse(url).path) or "image"


def resolve_work(reference: str,
                 timeout: float = 30.0,
                 session: Optional[requests.Session] = None) -> WorkArtifact:
    if not is_http_url(reference):
        return TextWork(reference)

    http = session or requests
    try:
        resp = http.get(reference, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Error fetching work URL %s: %s", reference, e)
        return TextWork(reference)

    content_type = resp.headers.get("content-type", "")
    if content_type.startswith("image/"):
        mime_type = content_type.split(";", 1)[0].strip()
        return ImageWork(data=resp.content, mime_type=mime_type, name=_file_name(reference))
    return TextWork(resp.text)
