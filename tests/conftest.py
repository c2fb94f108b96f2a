from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from core.errors import ConfigError


class FakeResponse:
    """Just enough of ``requests.Response`` for the handlers."""

    def __init__(self, status_code: int = 200, json_data: Any = None, reason: str = "OK", text: Optional[str] = None):
        self.status_code = status_code
        self._json = json_data
        self.reason = reason
        self.text = text if text is not None else ("" if json_data is None else str(json_data))

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("NEWS_API_KEY", "WXFLOWS_ENDPOINT", "WXFLOWS_APIKEY"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def graphql_down(monkeypatch):
    """Make every GraphQL-backed tool see an unconfigured endpoint."""

    async def fail(query: str, variables: Optional[Dict[str, Any]] = None):
        raise ConfigError("WXFLOWS_ENDPOINT is not configured")

    for module in ("tools.math_calc", "tools.exchange", "tools.wikipedia", "tools.google_books"):
        monkeypatch.setattr(f"{module}.execute_graphql", fail)
    return fail
