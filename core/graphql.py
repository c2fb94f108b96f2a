from __future__ import annotations

from typing import Any, Dict, Optional

from core import http
from core.config import wxflows_apikey, wxflows_endpoint
from core.errors import ConfigError, UpstreamError


async def execute_graphql(query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """POST a query to the hosted tool-flow endpoint and return its ``data``."""
    endpoint = wxflows_endpoint()
    if not endpoint:
        raise ConfigError("WXFLOWS_ENDPOINT is not configured")
    apikey = wxflows_apikey()
    if not apikey:
        raise ConfigError("WXFLOWS_APIKEY is not configured")

    r = await http.send(
        "POST",
        endpoint,
        json={"query": query, "variables": variables or {}},
        headers={"Authorization": f"apikey {apikey}", "Content-Type": "application/json"},
    )
    if not r.ok:
        raise UpstreamError(
            f"GraphQL request failed with status {r.status_code}: {r.reason or 'error'}",
            code=r.status_code,
        )

    body = http.safe_json(r)
    errors = body.get("errors") or []
    if errors:
        first = errors[0] if isinstance(errors[0], dict) else {"message": str(errors[0])}
        raise UpstreamError(first.get("message") or "GraphQL query failed")

    data = body.get("data")
    if not isinstance(data, dict):
        raise UpstreamError("GraphQL response had no data")
    return data
