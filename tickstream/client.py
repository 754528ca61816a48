"""Streaming client for trade events over a TLS WebSocket."""

from __future__ import annotations

import argparse
import asyncio
import logging
import ssl
import sys
from dataclasses import dataclass
from typing import TextIO

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from tickstream.logsetup import TRACE, configure_logging
from tickstream.trades import Trade, TradeParseError, parse_trade

DEFAULT_HOST = "stream.binance.com"
DEFAULT_PORT = 9443
DEFAULT_TARGET = "/ws/btcusdt@trade"
DEFAULT_LOG = "./boost_client.log"


@dataclass(frozen=True)
class StreamConfig:
    """Where to connect: host, port, request target and whether to use TLS."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    target: str = DEFAULT_TARGET
    secure: bool = True

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("host must not be empty")
        if not 0 < self.port < 65536:
            raise ValueError(f"port out of range: {self.port}")
        if not self.target.startswith("/"):
            raise ValueError(f"target must start with '/': {self.target!r}")

    def url(self) -> str:
        """Return the WebSocket URL for this configuration."""
        scheme = "wss" if self.secure else "ws"
        return f"{scheme}://{self.host}:{self.port}{self.target}"


def make_ssl_context(verify: bool = False) -> ssl.SSLContext:
    """Build a TLS 1.2 client context, verifying the peer only if asked."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.maximum_version = ssl.TLSVersion.TLSv1_2
    if verify:
        context.load_default_certs()
        context.verify_mode = ssl.CERT_REQUIRED
    else:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def handle_message(
    payload: str | bytes | bytearray,
    logger: logging.Logger,
    out: TextIO | None = None,
) -> Trade | None:
    """Echo one message to ``out``, parse it and trace its fields.

    Returns the trade, or None when the message is empty or not a trade.
    """
    out = sys.stdout if out is None else out
    if isinstance(payload, (bytes, bytearray)):
        text = bytes(payload).decode("utf-8", errors="replace")
    else:
        text = payload
    if not text:
        logger.warning("Empty buffer received, skipping parsing...")
        return None

    print(f"Received message: {text}", file=out)
    try:
        trade = parse_trade(payload)
    except TradeParseError as exc:
        logger.error("JSON Parsing Error: %s", exc)
        return None

    for line in trade.log_lines():
        logger.log(TRACE, line)
    return trade


async def consume(
    config: StreamConfig | None = None,
    ssl_context: ssl.SSLContext | None = None,
    logger: logging.Logger | None = None,
    out: TextIO | None = None,
    limit: int | None = None,
) -> list[Trade]:
    """Read up to ``limit`` messages (all, if None) and return the trades.

    A normal close by the server ends the stream; any other failure is
    logged and raised.
    """
    config = StreamConfig() if config is None else config
    logger = logging.getLogger(__name__) if logger is None else logger
    logger.info(
        "Defined server information: host=%s, port=%s, target=%s",
        config.host,
        config.port,
        config.target,
    )

    options = {}
    if config.secure:
        options["ssl"] = make_ssl_context() if ssl_context is None else ssl_context

    try:
        connection = await websockets.connect(config.url(), **options)
    except (OSError, WebSocketException) as exc:
        logger.error("WebSocket connection failed: %s", exc)
        raise
    logger.info("Connected to WebSocket at %s", config.host)

    trades: list[Trade] = []
    received = 0
    try:
        while limit is None or received < limit:
            try:
                message = await connection.recv()
            except ConnectionClosedOK:
                break
            except ConnectionClosed as exc:
                logger.error("WebSocket read failed: %s", exc)
                raise
            received += 1
            trade = handle_message(message, logger, out)
            if trade is not None:
                trades.append(trade)
    finally:
        await connection.close()
    logger.info("WebSocket connection closed successfully")
    return trades


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Stream trade events from a WebSocket feed.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--target", default=DEFAULT_TARGET)
    parser.add_argument("--plain", action="store_true", help="connect without TLS")
    parser.add_argument("--verify", action="store_true", help="verify the server certificate")
    parser.add_argument("--log", default=DEFAULT_LOG, help="log file path")
    parser.add_argument("--limit", type=int, default=None, help="stop after this many messages")
    args = parser.parse_args(argv)

    try:
        config = StreamConfig(args.host, args.port, args.target, secure=not args.plain)
    except ValueError as exc:
        parser.error(str(exc))

    logger = configure_logging(args.log, "tickstream")
    logger.info("Starting WebSocket client...")
    context = make_ssl_context(args.verify) if config.secure else None
    try:
        asyncio.run(consume(config, context, logger, sys.stdout, args.limit))
    except (OSError, WebSocketException):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())