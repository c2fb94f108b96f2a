from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

Handler = Callable[[Mapping[str, Any]], Awaitable[Any]]


class ToolName(str, Enum):
    MATH = "math"
    WEB_SEARCH = "web_search"
    WEATHER = "open_meteo_weather"
    NEWS = "news"
    NEWS_HEADLINES = "news_headlines"
    EXCHANGE = "exchange"
    WIKIPEDIA = "wikipedia"
    GOOGLE_BOOKS = "google_books"


@dataclass(frozen=True)
class ToolSpec:
    name: ToolName
    description: str
    input_schema: Dict[str, Any]
    handler: Handler
    methods: Mapping[str, Handler] = field(default_factory=dict)
    aliases: Tuple[str, ...] = ()
    # canned parameters for the self-check run
    sample: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name.value,
            "description": self.description,
            "inputSchema": self.input_schema,
            "aliases": list(self.aliases),
            "methods": sorted(self.methods),
        }


def normalize_tool_name(name: str) -> str:
    return re.sub(r"[-\s]", "_", (name or "").strip().lower())


@dataclass(frozen=True)
class HandlerRegistry:
    tools: Mapping[ToolName, ToolSpec]
    aliases: Mapping[str, ToolName]

    def resolve(self, tool_name: str) -> Optional[ToolSpec]:
        key = normalize_tool_name(tool_name)
        try:
            name = ToolName(key)
        except ValueError:
            name = self.aliases.get(key)
        if name is None:
            return None
        return self.tools.get(name)

    def specs(self) -> List[ToolSpec]:
        return list(self.tools.values())

    def __contains__(self, tool_name: object) -> bool:
        return isinstance(tool_name, str) and self.resolve(tool_name) is not None

    def __iter__(self) -> Iterator[ToolName]:
        return iter(self.tools)

    def __len__(self) -> int:
        return len(self.tools)


def _tool_modules():
    from . import exchange, google_books, math_calc, news, weather, web_search, wikipedia

    return (math_calc, web_search, weather, news, exchange, wikipedia, google_books)


def build_registry(specs: Optional[List[ToolSpec]] = None) -> HandlerRegistry:
    """
    Build the read-only tool table.

    Each tool module exposes ``TOOLS``: a tuple of ``ToolSpec``. Pass ``specs``
    to build a registry over a custom set (tests do).
    """
    if specs is None:
        specs = [spec for mod in _tool_modules() for spec in mod.TOOLS]

    tools: Dict[ToolName, ToolSpec] = {}
    aliases: Dict[str, ToolName] = {}
    for spec in specs:
        if spec.name in tools:
            raise ValueError(f"Duplicate tool: {spec.name.value}")
        tools[spec.name] = spec
        for alias in spec.aliases:
            key = normalize_tool_name(alias)
            if key in aliases or key in {n.value for n in ToolName}:
                raise ValueError(f"Alias {alias!r} is already taken")
            aliases[key] = spec.name

    return HandlerRegistry(tools=MappingProxyType(tools), aliases=MappingProxyType(aliases))
