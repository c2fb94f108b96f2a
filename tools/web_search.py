from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from core import http
from core.config import DEFAULT_RESULTS_LIMIT, DUCKDUCKGO_ENDPOINT
from core.errors import InputError

from .registry import ToolName, ToolSpec

logger = logging.getLogger(__name__)


def utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _topic_ok(topic: Any) -> bool:
    return isinstance(topic, dict) and bool(topic.get("Text")) and bool(topic.get("FirstURL"))


def _title_from_text(text: str) -> str:
    return text.split(" - ")[0] or text


def format_results(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Flatten DuckDuckGo's RelatedTopics (and nested Topics) into result rows."""
    results: List[Dict[str, Any]] = []

    for topic in data.get("RelatedTopics") or []:
        if not isinstance(topic, dict):
            continue
        subtopics = topic.get("Topics")
        if isinstance(subtopics, list):
            for sub in subtopics:
                if not _topic_ok(sub):
                    continue
                results.append({
                    "title": sub.get("Title") or _title_from_text(sub["Text"]),
                    "url": sub["FirstURL"],
                    "snippet": sub["Text"],
                })
        elif _topic_ok(topic):
            results.append({
                "title": topic.get("Title") or _title_from_text(topic["Text"]),
                "url": topic["FirstURL"],
                "snippet": topic["Text"],
            })

    if data.get("Abstract") and data.get("AbstractURL"):
        results.insert(0, {
            "title": data.get("Heading") or "Top Result",
            "url": data["AbstractURL"],
            "snippet": data["Abstract"],
            "isTopResult": True,
        })

    return results


def _limit(value: Any) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return DEFAULT_RESULTS_LIMIT
    return max(n, 1)


async def search(params: Mapping[str, Any]) -> dict:
    query = params.get("query")
    if not isinstance(query, str) or not query.strip():
        raise InputError("Missing required parameter: query")

    region = params.get("region") or "us-en"
    num_results = _limit(params.get("num_results", DEFAULT_RESULTS_LIMIT))

    logger.info(f"Performing web search for: {query!r}")
    data = await http.get_json(
        DUCKDUCKGO_ENDPOINT,
        {"q": query, "format": "json", "no_html": 1, "skip_disambig": 1, "kl": region},
        label="Search request",
    )
    results = format_results(data if isinstance(data, dict) else {})

    return {
        "query": query,
        "results": results[:num_results],
        "total_results": len(results),
        "timestamp": utc_iso(),
    }


TOOLS = (
    ToolSpec(
        name=ToolName.WEB_SEARCH,
        description="Search the web (DuckDuckGo instant answers) and return titles, links and snippets.",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search terms"},
                "region": {"type": "string", "default": "us-en"},
                "time": {"type": "string", "default": "month"},
                "num_results": {"type": "integer", "default": DEFAULT_RESULTS_LIMIT},
            },
            "required": ["query"],
            "additionalProperties": False,
        },
        handler=search,
        aliases=("web", "search"),
        sample={"query": "python programming language", "num_results": 3},
    ),
)
