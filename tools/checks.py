from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.results import Failure

from . import default_registry, dispatch
from .registry import HandlerRegistry

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


async def run_tool_checks(registry: Optional[HandlerRegistry] = None) -> Dict[str, Dict[str, Any]]:
    """
    Call every registered tool once with its sample parameters.

    Returns {tool_name: {"ok": bool, "error"?: str, "checked_at": iso}}.
    """
    if registry is None:
        registry = default_registry()
    results: Dict[str, Dict[str, Any]] = {}

    for spec in registry.specs():
        name = spec.name.value
        outcome = await dispatch(name, dict(spec.sample), registry=registry)
        row: Dict[str, Any] = {"ok": outcome.ok, "checked_at": _utc_now_iso()}
        if isinstance(outcome, Failure):
            row["error"] = outcome.error
            row["kind"] = outcome.kind
        results[name] = row

    passed = sum(1 for r in results.values() if r["ok"])
    logger.info(f"Tool checks: {passed}/{len(results)} passed")
    return results
