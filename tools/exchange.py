from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from core import http
from core.config import EXCHANGE_RATE_ENDPOINT
from core.errors import InputError, UpstreamError
from core.graphql import execute_graphql

from .registry import ToolName, ToolSpec

logger = logging.getLogger(__name__)

EXCHANGE_QUERY = """
query ConvertCurrency($from: String!, $to: String!, $amount: Float) {
  exchangeRate(from: $from, to: $to, amount: $amount) {
    from
    to
    rate
    result
    timestamp
  }
}
"""


async def _via_graphql(src: str, dst: str, amount: float) -> dict:
    data = await execute_graphql(EXCHANGE_QUERY, {"from": src, "to": dst, "amount": amount})
    rate = data.get("exchangeRate")
    if not rate:
        raise UpstreamError("Failed to get exchange rate")

    date = None
    if rate.get("timestamp"):
        date = datetime.fromtimestamp(float(rate["timestamp"]), tz=timezone.utc).isoformat()
    return {
        "result": {
            "from": rate.get("from") or src,
            "to": rate.get("to") or dst,
            "amount": amount,
            "rate": rate.get("rate"),
            "converted": rate.get("result"),
            "date": date,
        },
        "status": "success",
    }


async def fallback_exchange_rate(src: str, dst: str, amount: float) -> dict:
    data = await http.get_json(f"{EXCHANGE_RATE_ENDPOINT}/{src}", label="Exchange rate API")
    if data.get("result") != "success":
        raise UpstreamError(f"Exchange rate API returned error: {data.get('error-type') or data.get('error') or 'Unknown error'}")

    rates = data.get("rates") or {}
    if dst not in rates:
        raise InputError(f"Currency not found: {dst}", code=404)

    rate = rates[dst]
    return {
        "result": {
            "from": src,
            "to": dst,
            "amount": amount,
            "rate": rate,
            "converted": amount * rate,
            "date": data.get("time_last_update_utc"),
            "source": "fallback",
        },
        "status": "success",
    }


async def convert(params: Mapping[str, Any]) -> dict:
    src, dst = params.get("from"), params.get("to")
    if not src or not dst:
        raise InputError("Missing required parameters: 'from' and 'to' currencies are required")

    src, dst = str(src).strip().upper(), str(dst).strip().upper()
    try:
        amount = float(params.get("amount", 1))
    except (TypeError, ValueError):
        raise InputError("Invalid amount specified")

    try:
        return await _via_graphql(src, dst, amount)
    except Exception as e:
        logger.info(f"Using fallback exchange rate API ({e})")
        return await fallback_exchange_rate(src, dst, amount)


TOOLS = (
    ToolSpec(
        name=ToolName.EXCHANGE,
        description="Convert an amount between two currencies using current exchange rates.",
        input_schema={
            "type": "object",
            "properties": {
                "from": {"type": "string", "description": "Source currency code, e.g. USD"},
                "to": {"type": "string", "description": "Target currency code, e.g. EUR"},
                "amount": {"type": "number", "default": 1},
            },
            "required": ["from", "to"],
        },
        handler=convert,
        aliases=("currency", "exchange_rates", "currency_exchange"),
        sample={"from": "USD", "to": "EUR"},
    ),
)
