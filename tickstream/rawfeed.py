"""Raw feed readers: fixed-size buffer dumps and plain depth printing."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import AsyncIterator, Iterator
from contextlib import aclosing
from typing import TextIO

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from tickstream.client import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TARGET, StreamConfig, make_ssl_context

TRADE_BUFFER_SIZE = 256
DEPTH_TARGET = "/ws/btcusdt@depth"

_log = logging.getLogger(__name__)


def fixed_chunks(data: bytes | bytearray, size: int = TRADE_BUFFER_SIZE) -> Iterator[bytes]:
    """Split ``data`` into successive pieces of at most ``size`` bytes."""
    if size <= 0:
        raise ValueError(f"chunk size must be positive: {size}")
    data = bytes(data)
    for start in range(0, len(data), size):
        yield data[start : start + size]


def format_chunk(chunk: bytes | bytearray, size: int = TRADE_BUFFER_SIZE) -> str:
    """Render a chunk as the whole fixed-size buffer, NUL-padded to ``size``."""
    if len(chunk) > size:
        raise ValueError(f"chunk of {len(chunk)} bytes exceeds buffer of {size}")
    padded = bytes(chunk).ljust(size, b"\0")
    return "Received message: " + padded.decode("utf-8", errors="replace")


def format_depth(payload: str | bytes | bytearray) -> str:
    """Render one depth update for printing."""
    if isinstance(payload, (bytes, bytearray)):
        payload = bytes(payload).decode("utf-8", errors="replace")
    return f"[Feed] Received Data: {payload}"


async def _messages(config: StreamConfig, limit: int | None) -> AsyncIterator[str | bytes]:
    options = {"ssl": make_ssl_context()} if config.secure else {}
    try:
        connection = await websockets.connect(config.url(), **options)
    except (OSError, WebSocketException) as exc:
        _log.error("TCP connection failed: %s", exc)
        raise
    _log.info("Connected to WebSocket at %s", config.host)
    received = 0
    try:
        while limit is None or received < limit:
            try:
                message = await connection.recv()
            except ConnectionClosedOK:
                return
            except ConnectionClosed as exc:
                _log.error("WebSocket read failed: %s", exc)
                raise
            received += 1
            yield message
    finally:
        await connection.close()


async def consume_raw(
    config: StreamConfig | None = None,
    out: TextIO | None = None,
    limit: int | None = None,
    size: int = TRADE_BUFFER_SIZE,
) -> list[bytes]:
    """Read messages and print them as fixed-size buffers; return the chunks."""
    if size <= 0:
        raise ValueError(f"chunk size must be positive: {size}")
    config = StreamConfig(secure=False) if config is None else config
    out = sys.stdout if out is None else out
    chunks: list[bytes] = []
    async with aclosing(_messages(config, limit)) as messages:
        async for message in messages:
            data = message.encode("utf-8") if isinstance(message, str) else bytes(message)
            for chunk in fixed_chunks(data, size):
                print(format_chunk(chunk, size), file=out)
                chunks.append(chunk)
    return chunks


async def consume_depth(
    config: StreamConfig | None = None,
    out: TextIO | None = None,
    limit: int | None = None,
) -> list[str]:
    """Read depth updates, print each one and return them as text."""
    config = StreamConfig(target=DEPTH_TARGET, secure=False) if config is None else config
    out = sys.stdout if out is None else out
    updates: list[str] = []
    async with aclosing(_messages(config, limit)) as messages:
        async for message in messages:
            text = message if isinstance(message, str) else message.decode("utf-8", errors="replace")
            print(format_depth(text), file=out)
            updates.append(text)
    return updates


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dump a WebSocket feed without parsing it.")
    parser.add_argument("mode", choices=("raw", "depth"))
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--target", default=None)
    parser.add_argument("--tls", action="store_true", help="connect over TLS")
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--size", type=int, default=TRADE_BUFFER_SIZE)
    args = parser.parse_args(argv)

    target = args.target or (DEFAULT_TARGET if args.mode == "raw" else DEPTH_TARGET)
    try:
        config = StreamConfig(args.host, args.port, target, secure=args.tls)
    except ValueError as exc:
        parser.error(str(exc))
    if args.size <= 0:
        parser.error(f"size must be positive: {args.size}")

    logging.basicConfig(level=logging.INFO)
    _log.info("Starting WebSocket client...")
    try:
        if args.mode == "raw":
            asyncio.run(consume_raw(config, sys.stdout, args.limit, args.size))
        else:
            asyncio.run(consume_depth(config, sys.stdout, args.limit))
    except (OSError, WebSocketException):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())