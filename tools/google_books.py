from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from core import http
from core.config import DEFAULT_RESULTS_LIMIT, GOOGLE_BOOKS_ENDPOINT
from core.errors import InputError, UpstreamError
from core.graphql import execute_graphql

from .registry import ToolName, ToolSpec

logger = logging.getLogger(__name__)

BOOKS_QUERY = """
query SearchBooks($query: String!, $limit: Int) {
  googleBooks(query: $query, limit: $limit) {
    items {
      id
      volumeInfo {
        title subtitle authors publisher publishedDate description pageCount
        categories imageLinks { thumbnail } language previewLink infoLink
      }
      searchInfo { textSnippet }
    }
    totalItems
  }
}
"""


def build_search_query(params: Mapping[str, Any]) -> str:
    if params.get("query"):
        return str(params["query"])

    terms = []
    if params.get("title"):
        terms.append(f"intitle:{params['title']}")
    if params.get("author"):
        terms.append(f"inauthor:{params['author']}")
    if params.get("isbn"):
        terms.append(f"isbn:{params['isbn']}")
    if not terms:
        raise InputError("Missing search criteria: Please provide a query, title, author, or ISBN")
    return " ".join(terms)


def format_book(item: Dict[str, Any]) -> Dict[str, Any]:
    info = item.get("volumeInfo") or {}
    return {
        "id": item.get("id"),
        "title": info.get("title"),
        "subtitle": info.get("subtitle"),
        "authors": info.get("authors") or [],
        "publisher": info.get("publisher"),
        "publishedDate": info.get("publishedDate"),
        "description": info.get("description"),
        "pageCount": info.get("pageCount"),
        "categories": info.get("categories") or [],
        "thumbnail": (info.get("imageLinks") or {}).get("thumbnail"),
        "language": info.get("language"),
        "previewLink": info.get("previewLink"),
        "infoLink": info.get("infoLink"),
        "textSnippet": (item.get("searchInfo") or {}).get("textSnippet"),
    }


async def search(params: Mapping[str, Any]) -> dict:
    search_query = build_search_query(params)
    try:
        limit = max(int(params.get("limit", DEFAULT_RESULTS_LIMIT)), 1)
    except (TypeError, ValueError):
        limit = DEFAULT_RESULTS_LIMIT

    try:
        data = await execute_graphql(BOOKS_QUERY, {"query": search_query, "limit": limit})
        books = data.get("googleBooks")
        if not books:
            raise UpstreamError("Failed to get book search results")
        source = None
    except Exception as e:
        logger.info(f"Google Books GraphQL search failed ({e}); using public API")
        books = await http.get_json(
            GOOGLE_BOOKS_ENDPOINT,
            {"q": search_query, "maxResults": min(limit, 40)},
            label="Google Books API",
        )
        source = "fallback"

    result: Dict[str, Any] = {
        "books": [format_book(item) for item in books.get("items") or []],
        "query": search_query,
        "totalItems": books.get("totalItems", 0),
    }
    if source:
        result["source"] = source
    return {"result": result, "status": "success"}


TOOLS = (
    ToolSpec(
        name=ToolName.GOOGLE_BOOKS,
        description="Search Google Books by free text, title, author or ISBN.",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string"},
                "title": {"type": "string"},
                "author": {"type": "string"},
                "isbn": {"type": "string"},
                "limit": {"type": "integer", "default": DEFAULT_RESULTS_LIMIT},
            },
            "required": [],
        },
        handler=search,
        aliases=("books", "google_book"),
        sample={"query": "Harry Potter"},
    ),
)
