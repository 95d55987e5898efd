"""
External tools agent: weather, crypto prices, calculator, date/time, exchange rates.
"""

from __future__ import annotations

import ast
import logging
import operator
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List
from urllib.parse import quote

import httpx
import pytz

from agent_dashboard.config import settings

logger = logging.getLogger(__name__)

WEATHER_URL = "https://wttr.in/{location}?format=j1"
CRYPTO_URL = "https://api.coinbase.com/v2/prices/{symbol}-USD/spot"
EXCHANGE_URL = "https://api.exchangerate-api.com/v4/latest/{base}"

TOOL_DESCRIPTIONS: Dict[str, Dict[str, Any]] = {
    "weather": {
        "name": "Weather",
        "description": "Get current weather information for any location",
        "params": ["location"],
    },
    "crypto": {
        "name": "Cryptocurrency Price",
        "description": "Get current price of a cryptocurrency",
        "params": ["symbol"],
    },
    "calculator": {
        "name": "Calculator",
        "description": "Evaluate mathematical expressions",
        "params": ["expression"],
    },
    "datetime": {
        "name": "Date & Time",
        "description": "Get current date and time for any timezone",
        "params": ["timezone (optional)"],
    },
    "exchange": {
        "name": "Exchange Rate",
        "description": "Get exchange rate between two currencies",
        "params": ["from", "to"],
    },
}

_EXPRESSION_CHARS = re.compile(r"[^0-9+\-*/().\s]")
_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: operator.pow,
}
_UNARY_OPS = {ast.UAdd: operator.pos, ast.USub: operator.neg}
MAX_EXPONENT = 100
MAX_POWER_BITS = 4096


@dataclass
class ToolResponse:
    success: bool
    data: Dict[str, Any] | None = None
    error: str | None = None


class ToolError(Exception):
    """A tool could not produce a result; the message is user facing."""


class ToolAgent:
    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = settings.request_timeout_sec,
    ) -> None:
        self.http_client = http_client
        self.timeout = timeout

    @staticmethod
    def list_tools() -> List[str]:
        return list(TOOL_DESCRIPTIONS)

    @staticmethod
    def describe_tool(tool_name: str) -> Dict[str, Any] | None:
        return TOOL_DESCRIPTIONS.get(tool_name)

    async def run(self, tool_name: str, params: Dict[str, Any]) -> ToolResponse:
        try:
            if tool_name == "weather":
                data = await self.get_weather(params.get("location", ""))
            elif tool_name == "crypto":
                data = await self.get_crypto_price(params.get("symbol", ""))
            elif tool_name == "calculator":
                data = calculate(params.get("expression", ""))
            elif tool_name == "datetime":
                data = get_datetime(params.get("timezone"))
            elif tool_name == "exchange":
                data = await self.get_exchange_rate(params.get("from", ""), params.get("to", ""))
            else:
                return ToolResponse(success=False, error=f"Unknown tool: {tool_name}")
        except ToolError as exc:
            logger.warning("Tool %s failed: %s", tool_name, exc)
            return ToolResponse(success=False, error=str(exc))
        return ToolResponse(success=True, data=data)

    # --- HTTP tools ---
    async def get_weather(self, location: str) -> Dict[str, Any]:
        if not location:
            raise ToolError("Location is required")
        payload = await self._get_json(WEATHER_URL.format(location=quote(location)), "Failed to fetch weather data")
        try:
            current = payload["current_condition"][0]
            return {
                "location": location,
                "temperature": f"{current['temp_C']}°C",
                "condition": current["weatherDesc"][0]["value"],
                "humidity": f"{current['humidity']}%",
                "windSpeed": f"{current['windspeedKmph']} km/h",
                "feelsLike": f"{current['FeelsLikeC']}°C",
            }
        except (KeyError, IndexError, TypeError) as exc:
            raise ToolError("Unexpected weather data format") from exc

    async def get_crypto_price(self, symbol: str) -> Dict[str, Any]:
        if not symbol:
            raise ToolError("Cryptocurrency symbol is required")
        symbol = symbol.upper()
        payload = await self._get_json(CRYPTO_URL.format(symbol=symbol), "Failed to fetch cryptocurrency price")
        try:
            amount = float(payload["data"]["amount"])
            currency = payload["data"]["currency"]
        except (KeyError, TypeError, ValueError) as exc:
            raise ToolError("Unexpected cryptocurrency data format") from exc
        return {"symbol": symbol, "price": f"${amount:.2f}", "currency": currency}

    async def get_exchange_rate(self, source: str, target: str) -> Dict[str, Any]:
        if not source or not target:
            raise ToolError("Both from and to currencies are required")
        source, target = source.upper(), target.upper()
        payload = await self._get_json(EXCHANGE_URL.format(base=source), "Failed to fetch exchange rate")
        rates = payload.get("rates") or {}
        if target not in rates:
            raise ToolError(f"Invalid currency code: {target}")
        rate = float(rates[target])
        return {"from": source, "to": target, "rate": rate, "example": f"1 {source} = {rate:.4f} {target}"}

    async def _get_json(self, url: str, failure_message: str) -> Dict[str, Any]:
        try:
            if self.http_client is not None:
                response = await self.http_client.get(url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.error("Tool request to %s failed: %s", url, exc)
            raise ToolError(failure_message) from exc
        if response.status_code >= 300:
            raise ToolError(failure_message)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ToolError(failure_message) from exc
        if not isinstance(payload, dict):
            raise ToolError(failure_message)
        return payload


def calculate(expression: str) -> Dict[str, Any]:
    """Evaluate plain arithmetic. Anything besides numbers, operators and parentheses is stripped first."""
    if not expression:
        raise ToolError("Expression is required")
    sanitized = _EXPRESSION_CHARS.sub("", expression).strip()
    try:
        tree = ast.parse(sanitized, mode="eval")
        result = _evaluate(tree.body)
    except (SyntaxError, ValueError, ZeroDivisionError, OverflowError) as exc:
        raise ToolError("Invalid mathematical expression") from exc
    if isinstance(result, float) and result.is_integer():
        result = int(result)
    return {"expression": sanitized, "result": result}


def _evaluate(node: ast.AST) -> float:
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left, right = _evaluate(node.left), _evaluate(node.right)
        if isinstance(node.op, ast.Pow) and abs(right) > MAX_EXPONENT:
            raise ValueError("exponent too large")
        if isinstance(node.op, ast.Pow) and _power_bits(left, right) > MAX_POWER_BITS:
            raise ValueError("result too large")
        value = _BINARY_OPS[type(node.op)](left, right)
        if isinstance(value, complex):
            raise ValueError("complex result")
        return value
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_evaluate(node.operand))
    raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def _power_bits(base: float, exponent: float) -> int:
    # bit length of an exact integer power, 0 when floats are involved
    if isinstance(base, int) and isinstance(exponent, int) and exponent > 0:
        return abs(base).bit_length() * exponent
    return 0


def get_datetime(timezone_name: str | None = None) -> Dict[str, Any]:
    if timezone_name:
        try:
            now = datetime.now(pytz.timezone(timezone_name))
        except pytz.UnknownTimeZoneError as exc:
            raise ToolError(f"Unknown timezone: {timezone_name}") from exc
    else:
        now = datetime.now().astimezone()
    return {
        "timestamp": now.isoformat(),
        "formatted": now.strftime("%A, %B %d, %Y, %I:%M:%S %p %Z"),
        "timezone": timezone_name or "Local",
    }


__all__ = ["ToolAgent", "ToolResponse", "ToolError", "TOOL_DESCRIPTIONS", "calculate", "get_datetime"]
