from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from core.config import HTTP_TIMEOUT_SEC, USER_AGENT
from core.errors import UpstreamError

logger = logging.getLogger(__name__)


def default_headers() -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }


def safe_json(resp: requests.Response) -> Dict[str, Any]:
    try:
        return resp.json()
    except Exception:
        return {"text": (resp.text or "")[:2000]}


def _send(method: str, url: str, **kwargs) -> requests.Response:
    headers = default_headers()
    headers.update(kwargs.pop("headers", None) or {})
    return requests.request(method, url, headers=headers, timeout=HTTP_TIMEOUT_SEC, **kwargs)


async def send(method: str, url: str, **kwargs) -> requests.Response:
    """Run a blocking ``requests`` call off the event loop.

    Transport failures (DNS, refused, timeout) surface as ``UpstreamError``;
    HTTP error statuses are returned as-is for the caller to judge.
    """
    try:
        return await asyncio.to_thread(_send, method, url, **kwargs)
    except requests.RequestException as e:
        logger.warning(f"{method} {url} failed: {e}")
        raise UpstreamError(str(e)) from e


async def get_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    *,
    headers: Optional[Dict[str, str]] = None,
    label: str = "Request",
) -> Any:
    r = await send("GET", url, params=params, headers=headers)
    if not r.ok:
        raise UpstreamError(
            f"{label} failed with status {r.status_code}: {r.reason or 'error'}",
            code=r.status_code,
        )
    try:
        return r.json()
    except ValueError as e:
        raise UpstreamError(f"{label} returned malformed JSON") from e
