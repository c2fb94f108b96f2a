from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from bs4 import BeautifulSoup

from core import http
from core.config import WIKIPEDIA_ENDPOINT
from core.errors import InputError, UpstreamError
from core.graphql import execute_graphql

from .registry import ToolName, ToolSpec

logger = logging.getLogger(__name__)

WIKIPEDIA_QUERY = """
query SearchWikipedia($query: String!, $limit: Int) {
  wikipedia(query: $query, limit: $limit) {
    search { title pageid snippet wordcount }
    pages { pageid title extract url thumbnail { source } }
  }
}
"""


def html_to_text(html: str | None) -> str:
    if not html:
        return ""
    return BeautifulSoup(html, "lxml").get_text(" ", strip=True)


def _clean_search(rows: Any) -> List[Dict[str, Any]]:
    return [
        {
            "title": row.get("title"),
            "pageid": row.get("pageid"),
            "snippet": html_to_text(row.get("snippet")),
            "wordcount": row.get("wordcount"),
        }
        for row in rows or []
    ]


async def fallback_wikipedia_search(query: str, limit: int) -> dict:
    found = await http.get_json(
        WIKIPEDIA_ENDPOINT,
        {"action": "query", "list": "search", "srsearch": query, "format": "json", "srlimit": limit},
        label="Wikipedia search API",
    )
    search_rows = (found.get("query") or {}).get("search") or []
    if not search_rows:
        return {"result": {"search": [], "pages": [], "query": query, "source": "fallback"}, "status": "success"}

    page_ids = "|".join(str(row["pageid"]) for row in search_rows if "pageid" in row)
    detail = await http.get_json(
        WIKIPEDIA_ENDPOINT,
        {
            "action": "query",
            "pageids": page_ids,
            "prop": "extracts|info|pageimages",
            "exintro": 1,
            "explaintext": 1,
            "inprop": "url",
            "pithumbsize": 300,
            "format": "json",
        },
        label="Wikipedia page API",
    )
    pages = [
        {
            "pageid": page.get("pageid"),
            "title": page.get("title"),
            "extract": page.get("extract"),
            "url": page.get("fullurl"),
            "thumbnail": {"source": page["thumbnail"]["source"]} if page.get("thumbnail") else None,
        }
        for page in ((detail.get("query") or {}).get("pages") or {}).values()
    ]

    return {
        "result": {"search": _clean_search(search_rows), "pages": pages, "query": query, "source": "fallback"},
        "status": "success",
    }


async def search(params: Mapping[str, Any]) -> dict:
    query = params.get("query")
    if not isinstance(query, str) or not query.strip():
        raise InputError("Missing required parameter: query")
    try:
        limit = max(int(params.get("limit", 3)), 1)
    except (TypeError, ValueError):
        limit = 3

    try:
        data = await execute_graphql(WIKIPEDIA_QUERY, {"query": query, "limit": limit})
        wiki = data.get("wikipedia")
        if not wiki:
            raise UpstreamError("Failed to get Wikipedia search results")
        return {
            "result": {"search": _clean_search(wiki.get("search")), "pages": wiki.get("pages") or [], "query": query},
            "status": "success",
        }
    except Exception as e:
        logger.info(f"Wikipedia GraphQL search failed ({e}); using public API")
        return await fallback_wikipedia_search(query, limit)


TOOLS = (
    ToolSpec(
        name=ToolName.WIKIPEDIA,
        description="Search Wikipedia and return matching articles with intro extracts.",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string"},
                "limit": {"type": "integer", "default": 3},
            },
            "required": ["query"],
        },
        handler=search,
        aliases=("wiki",),
        sample={"query": "Quantum computing"},
    ),
)
