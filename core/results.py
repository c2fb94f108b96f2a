from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union


@dataclass(frozen=True)
class ToolRequest:
    tool_name: str
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # frozen: kopier og lås parameterne
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters or {})))

    @staticmethod
    def from_body(body: Dict[str, Any]) -> "ToolRequest":
        """Build a request from a ``POST /tools`` body.

        ``parameters`` wins over its alias ``params`` when it is an object.
        """
        params = body.get("parameters")
        if not isinstance(params, dict):
            params = body.get("params")
        if not isinstance(params, dict):
            params = {}
        tool = body.get("tool")
        return ToolRequest(tool_name=tool if isinstance(tool, str) else "", parameters=params)


@dataclass(frozen=True)
class Success:
    data: Any
    source_hint: Optional[str] = None

    ok = True

    def to_dict(self) -> Dict[str, Any]:
        if isinstance(self.data, dict):
            out = dict(self.data)
        else:
            out = {"result": self.data}
        if self.source_hint:
            out["sourceHint"] = self.source_hint
        out["status"] = "success"
        return out


@dataclass(frozen=True)
class Failure:
    error: str
    code: Optional[int] = None
    kind: str = "internal"

    ok = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.error, "status": "error", "kind": self.kind}
        if self.code is not None:
            out["code"] = self.code
        return out


ToolResult = Union[Success, Failure]
