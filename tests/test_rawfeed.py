import io
import socket
from contextlib import asynccontextmanager

import pytest
import websockets

from tickstream.client import StreamConfig
from tickstream.rawfeed import (
    consume_depth,
    consume_raw,
    fixed_chunks,
    format_chunk,
    format_depth,
    main,
)

PREFIX = "Received message: "


@asynccontextmanager
async def _server(messages):
    async def handler(connection, *_):
        for message in messages:
            await connection.send(message)
        await connection.close()

    server = await websockets.serve(handler, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield StreamConfig(host="127.0.0.1", port=port, target="/ws", secure=False)
    finally:
        server.close()
        await server.wait_closed()


def _free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_fixed_chunks_splits_in_order():
    assert list(fixed_chunks(b"abcdefg", 3)) == [b"abc", b"def", b"g"]


@pytest.mark.parametrize("length", [0, 1, 255, 256, 257, 1000])
def test_fixed_chunks_round_trip(length):
    data = bytes(n % 251 for n in range(length))
    chunks = list(fixed_chunks(data))
    assert b"".join(chunks) == data
    assert all(len(chunk) == 256 for chunk in chunks[:-1])
    assert all(0 < len(chunk) <= 256 for chunk in chunks)


def test_fixed_chunks_rejects_non_positive_size():
    with pytest.raises(ValueError):
        list(fixed_chunks(b"abc", 0))


def test_format_chunk_pads_to_buffer_size():
    assert format_chunk(b"hi", 4) == PREFIX + "hi\x00\x00"


def test_format_chunk_default_length():
    text = format_chunk(b'{"e":"trade"}')
    assert len(text) == len(PREFIX) + 256
    assert text.startswith(PREFIX + '{"e":"trade"}')


def test_format_chunk_rejects_oversized_chunk():
    with pytest.raises(ValueError):
        format_chunk(b"x" * 5, 4)


def test_format_depth_text_and_bytes_agree():
    payload = '{"e":"depthUpdate"}'
    assert format_depth(payload) == "[Feed] Received Data: " + payload
    assert format_depth(payload.encode()) == format_depth(payload)


@pytest.mark.asyncio
async def test_consume_raw_chunks_messages():
    message = "x" * 600
    out = io.StringIO()
    async with _server([message]) as config:
        chunks = await consume_raw(config, out, 1, 256)
    assert [len(c) for c in chunks] == [256, 256, 88]
    assert b"".join(chunks) == message.encode()
    assert out.getvalue().count(PREFIX) == len(chunks)


@pytest.mark.asyncio
async def test_consume_raw_respects_limit():
    async with _server(["one", "two", "three"]) as config:
        chunks = await consume_raw(config, io.StringIO(), 2)
    assert chunks == [b"one", b"two"]


@pytest.mark.asyncio
async def test_consume_depth_returns_updates():
    updates = ['{"u":1}', '{"u":2}']
    out = io.StringIO()
    async with _server(updates) as config:
        received = await consume_depth(config, out, None)
    assert received == updates
    assert out.getvalue().splitlines() == [format_depth(u) for u in updates]


@pytest.mark.asyncio
async def test_consume_depth_connection_refused():
    config = StreamConfig(host="127.0.0.1", port=_free_port(), target="/ws", secure=False)
    with pytest.raises((OSError, websockets.exceptions.WebSocketException)):
        await consume_depth(config, io.StringIO(), 1)


def test_main_fails_when_unreachable():
    assert main(["depth", "--host", "127.0.0.1", "--port", str(_free_port())]) == 1


def test_main_rejects_bad_size():
    with pytest.raises(SystemExit) as info:
        main(["raw", "--size", "0"])
    assert info.value.code == 2