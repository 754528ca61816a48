"""Parsing of trade events received from the market-data stream."""

from __future__ import annotations

import json
from dataclasses import dataclass


class TradeParseError(ValueError):
    """Raised when a message cannot be read as a trade event."""


def _format_price(price: float) -> str:
    text = repr(price)
    return text[:-2] if text.endswith(".0") else text


@dataclass(frozen=True)
class Trade:
    """A single trade event: event type, symbol and optional price."""

    event_type: str
    symbol: str
    price: float | None = None

    def log_lines(self) -> list[str]:
        """Return the lines written to the trace log for this trade."""
        lines = [
            "Parsed Message:",
            f"  Event Type: {self.event_type}",
            f"  Symbol: {self.symbol}",
        ]
        if self.price is not None:
            lines.append(f"  Price: {_format_price(self.price)}")
        return lines


def _string_field(document: dict, key: str) -> str:
    try:
        value = document[key]
    except KeyError:
        raise TradeParseError(f"missing field {key!r}") from None
    if not isinstance(value, str):
        raise TradeParseError(f"field {key!r} is not a string")
    return value


def parse_trade(payload: str | bytes | bytearray) -> Trade:
    """Parse a JSON trade message into a :class:`Trade`.

    The fields ``e`` (event type) and ``s`` (symbol) are required strings;
    ``p`` (price) is an optional decimal string.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TradeParseError(f"payload is not UTF-8: {exc}") from exc
    if not payload.strip():
        raise TradeParseError("empty message")
    try:
        document = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise TradeParseError(f"invalid JSON: {exc.msg}") from exc
    if not isinstance(document, dict):
        raise TradeParseError("message is not a JSON object")

    event_type = _string_field(document, "e")
    symbol = _string_field(document, "s")

    price = None
    if "p" in document:
        raw_price = _string_field(document, "p")
        try:
            price = float(raw_price)
        except ValueError:
            raise TradeParseError(f"invalid price {raw_price!r}") from None

    return Trade(event_type=event_type, symbol=symbol, price=price)