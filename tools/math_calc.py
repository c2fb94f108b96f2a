from __future__ import annotations

import ast
import asyncio
import logging
import math
import operator
import re
from typing import Any, Mapping

from core.errors import InputError, UpstreamError
from core.graphql import execute_graphql

from .registry import ToolName, ToolSpec

logger = logging.getLogger(__name__)

SIMPLE_EXPRESSION = re.compile(r"[0-9\s+\-*/().,%^]+")
MAX_EXPONENT = 1000
# ~1200 decimal digits, well under the int-to-str limit
MAX_RESULT_BITS = 4096

WOLFRAM_QUERY = """
query CalculateMath($input: String!) {
  wolframAlpha(input: $input) {
    result
  }
}
"""

_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}
_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def is_simple_calculation(text: str) -> bool:
    return bool(SIMPLE_EXPRESSION.fullmatch(text or ""))


def _check_size(op: ast.operator, left: Any, right: Any) -> None:
    if isinstance(op, ast.Pow):
        if abs(right) > MAX_EXPONENT:
            raise ValueError("Exponent too large for local calculation")
        if abs(left) > 1 and abs(right) * math.log2(abs(left)) > MAX_RESULT_BITS:
            raise ValueError("Result too large for local calculation")
    elif isinstance(op, ast.Mult) and isinstance(left, int) and isinstance(right, int):
        if left.bit_length() + right.bit_length() > MAX_RESULT_BITS:
            raise ValueError("Result too large for local calculation")


def _eval_node(node: ast.AST) -> float:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    if isinstance(node, ast.BinOp) and type(node.op) in _BIN_OPS:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        _check_size(node.op, left, right)
        value = _BIN_OPS[type(node.op)](left, right)
        # (-8)^0.5 and friends
        if isinstance(value, complex):
            raise ValueError("Invalid input for local calculation")
        return value
    # tuples from "," and anything else the whitelist let through
    raise ValueError("Invalid input for local calculation")


def local_calculate(text: str) -> float:
    """Evaluate a plain arithmetic expression in-process.

    Only digits, whitespace and ``+ - * / ( ) . , % ^`` are accepted; ``^``
    means exponentiation and ``%`` is modulo. The result is always a finite
    real number small enough to serialize.
    """
    if not is_simple_calculation(text):
        raise ValueError("Invalid input for local calculation")

    sanitized = text.replace("^", "**").strip()
    try:
        tree = ast.parse(sanitized, mode="eval")
    except SyntaxError as e:
        raise ValueError(f"Malformed expression: {e.msg}") from e

    value = _eval_node(tree)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("Invalid input for local calculation")
        if value.is_integer():
            value = int(value)
    if isinstance(value, int) and value.bit_length() > MAX_RESULT_BITS:
        raise ValueError("Result too large for local calculation")
    return value


async def calculate(params: Mapping[str, Any]) -> dict:
    text = params.get("input")
    if not isinstance(text, str) or not text.strip():
        raise InputError("Missing required parameter: input")

    try:
        data = await execute_graphql(WOLFRAM_QUERY, {"input": text})
        answer = (data.get("wolframAlpha") or {}).get("result")
        if answer in (None, ""):
            raise UpstreamError("Failed to get calculation result")
        return {"result": answer, "status": "success"}
    except Exception as remote_error:
        if not is_simple_calculation(text):
            raise

        logger.info(f"Remote math failed ({remote_error}); using local calculation fallback")
        try:
            value = await asyncio.to_thread(local_calculate, text)
        except (ValueError, ArithmeticError) as local_error:
            logger.error(f"Local calculation also failed: {local_error}")
            raise InputError(str(local_error) or "Local calculation failed") from local_error

        return {"result": value, "status": "success", "sourceHint": "local"}


TOOLS = (
    ToolSpec(
        name=ToolName.MATH,
        description="Calculate a math expression or answer a math question (WolframAlpha, local fallback for plain arithmetic).",
        input_schema={
            "type": "object",
            "properties": {"input": {"type": "string", "description": "Expression or question, e.g. '2+2' or 'integrate x^2'"}},
            "required": ["input"],
            "additionalProperties": False,
        },
        handler=calculate,
        aliases=("calculator", "calc"),
        sample={"input": "2+2"},
    ),
)
