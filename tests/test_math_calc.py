from __future__ import annotations

import json
import time
from unittest.mock import AsyncMock

import pytest

from core.errors import InputError, UpstreamError
from core.results import Failure, Success
from tools import dispatch
from tools.math_calc import calculate, is_simple_calculation, local_calculate


@pytest.mark.parametrize("text,expected", [
    ("2+2", 4),
    ("2^10", 1024),
    ("(1 + 2) * 3", 9),
    ("7/2", 3.5),
    ("10 % 3", 1),
    ("-3 + 5", 2),
    ("1.5 * 2", 3),
])
def test_local_calculate(text, expected):
    assert local_calculate(text) == expected


@pytest.mark.parametrize("text", ["2+x", "__import__('os')", "2**3; 1", "abs(-1)"])
def test_whitelist_rejects_non_arithmetic(text):
    assert not is_simple_calculation(text)
    with pytest.raises(ValueError):
        local_calculate(text)


def test_comma_is_rejected():
    with pytest.raises(ValueError, match="Invalid input"):
        local_calculate("1,2")


def test_huge_exponent_refused():
    with pytest.raises(ValueError, match="Exponent"):
        local_calculate("9^99999")


@pytest.mark.parametrize("text", ["(9^999)^5", "((9^999)^999)^99", "(9^999) * (9^999)", "2^1000 * 2^1000 * 2^1000 * 2^1000 * 2^1000"])
def test_runaway_results_refused(text):
    started = time.monotonic()
    with pytest.raises(ValueError, match="too large"):
        local_calculate(text)
    assert time.monotonic() - started < 1


@pytest.mark.parametrize("text", ["(-8)^0.5", "(-1)^0.5 * 2"])
def test_complex_results_refused(text):
    with pytest.raises(ValueError, match="Invalid input"):
        local_calculate(text)


def test_large_but_bounded_power_is_allowed():
    assert local_calculate("9^999") == 9 ** 999
    assert local_calculate("0.5^-10") == 1024


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["(-8)^0.5", "(9^999)^5", "((9^999)^999)^3"])
async def test_unrepresentable_results_are_failures(graphql_down, text):
    result = await dispatch("math", {"input": text})
    assert isinstance(result, Failure)
    assert result.kind == "input"
    json.dumps(result.to_dict())


@pytest.mark.asyncio
async def test_remote_answer_is_returned(monkeypatch):
    remote = AsyncMock(return_value={"wolframAlpha": {"result": "x = 2"}})
    monkeypatch.setattr("tools.math_calc.execute_graphql", remote)

    out = await calculate({"input": "solve x+2=4"})
    assert out == {"result": "x = 2", "status": "success"}
    remote.assert_awaited_once()


@pytest.mark.asyncio
async def test_local_fallback_when_remote_fails(graphql_down):
    result = await dispatch("math", {"input": "2+2"})
    assert isinstance(result, Success)
    assert result.to_dict() == {"result": 4, "status": "success", "sourceHint": "local"}


@pytest.mark.asyncio
async def test_empty_remote_answer_falls_back(monkeypatch):
    monkeypatch.setattr("tools.math_calc.execute_graphql", AsyncMock(return_value={"wolframAlpha": None}))
    out = await calculate({"input": "3*3"})
    assert out["result"] == 9
    assert out["sourceHint"] == "local"


@pytest.mark.asyncio
async def test_non_arithmetic_propagates_remote_error(monkeypatch):
    monkeypatch.setattr(
        "tools.math_calc.execute_graphql",
        AsyncMock(side_effect=UpstreamError("WolframAlpha unavailable", code=503)),
    )
    result = await dispatch("math", {"input": "integrate x^2 dx"})
    assert isinstance(result, Failure)
    assert result.error == "WolframAlpha unavailable"
    assert result.code == 503


@pytest.mark.asyncio
async def test_division_by_zero_is_failure_not_fallback(graphql_down):
    result = await dispatch("math", {"input": "1/0"})
    assert isinstance(result, Failure)
    assert "zero" in result.error
    assert "sourceHint" not in result.to_dict()


@pytest.mark.asyncio
async def test_malformed_expression_is_failure(graphql_down):
    result = await dispatch("math", {"input": "2 +* (3"})
    assert isinstance(result, Failure)
    assert result.kind == "input"


@pytest.mark.asyncio
async def test_missing_input():
    with pytest.raises(InputError):
        await calculate({})
