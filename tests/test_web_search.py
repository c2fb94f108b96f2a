from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from core.errors import UpstreamError
from core.results import Failure, Success
from tools import dispatch
from tools.web_search import format_results


def _topic(i: int) -> dict:
    return {"Text": f"Topic {i} - more about topic {i}", "FirstURL": f"https://duckduckgo.com/Topic_{i}"}


def test_format_flattens_subtopics_and_derives_titles():
    data = {
        "RelatedTopics": [
            _topic(1),
            {"Name": "Group", "Topics": [_topic(2), _topic(3), {"Text": "no url"}]},
            {"Text": "missing url"},
        ]
    }
    rows = format_results(data)
    assert [r["title"] for r in rows] == ["Topic 1", "Topic 2", "Topic 3"]
    assert rows[0]["snippet"] == "Topic 1 - more about topic 1"
    assert rows[1]["url"] == "https://duckduckgo.com/Topic_2"


def test_abstract_is_prepended_as_top_result():
    data = {
        "Heading": "Python",
        "Abstract": "Python is a programming language.",
        "AbstractURL": "https://en.wikipedia.org/wiki/Python",
        "RelatedTopics": [_topic(1)],
    }
    rows = format_results(data)
    assert rows[0] == {
        "title": "Python",
        "url": "https://en.wikipedia.org/wiki/Python",
        "snippet": "Python is a programming language.",
        "isTopResult": True,
    }
    assert len(rows) == 2


@pytest.mark.asyncio
async def test_truncates_and_reports_total(monkeypatch):
    payload = {"RelatedTopics": [_topic(i) for i in range(8)]}
    get_json = AsyncMock(return_value=payload)
    monkeypatch.setattr("core.http.get_json", get_json)

    result = await dispatch("web_search", {"query": "python", "num_results": 3})
    assert isinstance(result, Success)
    out = result.to_dict()
    assert len(out["results"]) == 3
    assert out["total_results"] == 8
    assert out["query"] == "python"
    assert out["timestamp"].endswith("Z")

    url, params = get_json.call_args.args
    assert params["q"] == "python"
    assert params["format"] == "json"


@pytest.mark.asyncio
async def test_defaults_to_five_results(monkeypatch):
    monkeypatch.setattr("core.http.get_json", AsyncMock(return_value={"RelatedTopics": [_topic(i) for i in range(8)]}))
    out = (await dispatch("search", {"query": "python", "num_results": "lots"})).to_dict()
    assert len(out["results"]) == 5


@pytest.mark.asyncio
async def test_http_error_is_failure(monkeypatch):
    monkeypatch.setattr(
        "core.http.get_json",
        AsyncMock(side_effect=UpstreamError("Search request failed with status 503: Service Unavailable", code=503)),
    )
    result = await dispatch("web_search", {"query": "python"})
    assert isinstance(result, Failure)
    assert "Service Unavailable" in result.error
    assert result.code == 503


@pytest.mark.asyncio
async def test_missing_query_is_input_error():
    result = await dispatch("web_search", {})
    assert isinstance(result, Failure)
    assert result.kind == "input"
