from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Mapping, Optional

from core.errors import ToolError
from core.results import Failure, Success, ToolRequest, ToolResult

from .registry import HandlerRegistry, ToolName, ToolSpec, build_registry

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def default_registry() -> HandlerRegistry:
    return build_registry()


def _normalize(out: Any) -> ToolResult:
    if isinstance(out, (Success, Failure)):
        return out

    if isinstance(out, dict):
        status = out.get("status")
        if out.get("error") or status == "error":
            code = out.get("code")
            if not isinstance(code, int):
                code = status if isinstance(status, int) else None
            message = str(out.get("error") or "Tool returned an error")
            return Failure(message, code=code, kind=str(out.get("kind") or "upstream"))

        data = dict(out)
        hint = data.pop("sourceHint", None)
        data.pop("status", None)
        return Success(data=data, source_hint=hint)

    return Success(data=out)


async def dispatch(
    tool_name: Optional[str],
    args: Optional[Mapping[str, Any]] = None,
    registry: Optional[HandlerRegistry] = None,
) -> ToolResult:
    """Run one tool and always hand back a ``ToolResult``; never raises."""
    if not isinstance(tool_name, str) or not tool_name.strip():
        return Failure("Tool name is required", code=400, kind="input")

    if registry is None:
        registry = default_registry()

    spec = registry.resolve(tool_name)
    if spec is None:
        logger.warning(f"Unknown tool requested: {tool_name}")
        return Failure(f"Unknown tool: {tool_name}", code=400, kind="input")

    params = dict(args or {})
    handler = spec.handler
    method = params.get("method")
    if isinstance(method, str) and method in spec.methods:
        handler = spec.methods[method]
        params.pop("method")

    request = ToolRequest(tool_name=spec.name.value, parameters=params)
    target = request.tool_name if handler is spec.handler else f"{request.tool_name}.{method}"
    logger.info(f"Executing tool {tool_name} -> {target}")

    try:
        result = _normalize(await handler(request.parameters))
    except ToolError as e:
        result = Failure(e.message, code=e.code, kind=e.kind)
    except Exception as e:
        logger.exception(f"Tool {request.tool_name} crashed")
        result = Failure(str(e) or e.__class__.__name__, code=500, kind="internal")

    if isinstance(result, Failure):
        logger.warning(f"Tool {request.tool_name} failed ({result.kind}): {result.error}")
    return result


__all__ = [
    "HandlerRegistry",
    "ToolName",
    "ToolSpec",
    "build_registry",
    "default_registry",
    "dispatch",
]
