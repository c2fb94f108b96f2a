from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from core import http
from core.config import (
    DEFAULT_COUNTRY,
    DEFAULT_LANGUAGE,
    DEFAULT_NEWS_SORT,
    DEFAULT_RESULTS_LIMIT,
    NEWS_API_ENDPOINT,
    news_api_key,
)
from core.errors import ConfigError, InputError, UpstreamError

from .registry import ToolName, ToolSpec

logger = logging.getLogger(__name__)

SUMMARY_CHARS = 200


def format_articles(articles: Any) -> List[Dict[str, Any]]:
    if not isinstance(articles, list):
        return []

    out = []
    for article in articles[:DEFAULT_RESULTS_LIMIT]:
        source = article.get("source") or {}
        description = article.get("description") or ""
        content = article.get("content")
        out.append({
            "title": article.get("title"),
            "url": article.get("url"),
            "source": source.get("name") or "Unknown",
            "publishedAt": article.get("publishedAt"),
            "description": description,
            "summary": content[:SUMMARY_CHARS] + "..." if content else description,
        })
    return out


def _require_key() -> str:
    key = news_api_key()
    if not key:
        raise ConfigError("NEWS_API_KEY is not configured")
    return key


async def _call(path: str, params: Dict[str, Any], fallback_error: str) -> Dict[str, Any]:
    key = _require_key()
    r = await http.send(
        "GET",
        f"{NEWS_API_ENDPOINT}/{path}",
        params=params,
        headers={"X-Api-Key": key},
    )
    data = http.safe_json(r)
    if data.get("status") != "ok":
        logger.error(f"[News API] Error: {data.get('code')} - {data.get('message')}")
        raise UpstreamError(data.get("message") or fallback_error, code=None if r.ok else r.status_code)
    return data


async def search(params: Mapping[str, Any]) -> dict:
    topic = params.get("topic")
    # key first: a missing key must never reach the network
    _require_key()
    if not isinstance(topic, str) or not topic.strip():
        raise InputError("Missing required parameter: topic")

    logger.info(f"[News API] Searching for news about: {topic}")
    data = await _call(
        "everything",
        {
            "q": topic,
            "language": params.get("language") or DEFAULT_LANGUAGE,
            "sortBy": params.get("sortBy") or DEFAULT_NEWS_SORT,
            "pageSize": DEFAULT_RESULTS_LIMIT,
        },
        "Failed to fetch news",
    )
    return {
        "headlines": format_articles(data.get("articles")),
        "totalResults": data.get("totalResults", 0),
        "query": topic,
        "status": "success",
    }


def _headlines_label(country: str, category: Optional[str], query: Optional[str]) -> str:
    label = f"Top headlines for {country}"
    if category:
        label += f" in {category}"
    if query:
        label += f" about {query}"
    return label


async def headlines(params: Mapping[str, Any]) -> dict:
    country = params.get("country") or DEFAULT_COUNTRY
    category = params.get("category") or ""
    query = params.get("query") or ""

    logger.info(f"[News API] Fetching headlines for country: {country} category={category!r} query={query!r}")
    request_params: Dict[str, Any] = {"country": country, "pageSize": DEFAULT_RESULTS_LIMIT}
    if category:
        request_params["category"] = category
    if query:
        request_params["q"] = query

    data = await _call("top-headlines", request_params, "Failed to fetch headlines")
    return {
        "headlines": format_articles(data.get("articles")),
        "totalResults": data.get("totalResults", 0),
        "query": _headlines_label(country, category, query),
        "status": "success",
    }


TOOLS = (
    ToolSpec(
        name=ToolName.NEWS,
        description="Search recent news articles about a topic (NewsAPI).",
        input_schema={
            "type": "object",
            "properties": {
                "topic": {"type": "string"},
                "language": {"type": "string", "default": DEFAULT_LANGUAGE},
                "sortBy": {"type": "string", "default": DEFAULT_NEWS_SORT},
            },
            "required": ["topic"],
        },
        handler=search,
        methods={"search": search, "headlines": headlines},
        aliases=("news_search",),
        sample={"topic": "technology"},
    ),
    ToolSpec(
        name=ToolName.NEWS_HEADLINES,
        description="Top news headlines by country, optional category and keyword (NewsAPI).",
        input_schema={
            "type": "object",
            "properties": {
                "country": {"type": "string", "default": DEFAULT_COUNTRY, "description": "Two-letter country code"},
                "category": {"type": "string", "description": "e.g. business, technology"},
                "query": {"type": "string"},
            },
            "required": [],
        },
        handler=headlines,
        aliases=("headlines",),
        sample={"country": DEFAULT_COUNTRY},
    ),
)
