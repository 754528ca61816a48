import io
import json
import logging
import socket
import ssl
from contextlib import asynccontextmanager

import pytest
import websockets
from websockets.exceptions import WebSocketException

from tickstream.client import (
    StreamConfig,
    consume,
    handle_message,
    main,
    make_ssl_context,
)
from tickstream.logsetup import TRACE
from tickstream.trades import parse_trade


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=1)
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    logger = logging.getLogger("tests.client")
    logger.handlers.clear()
    logger.setLevel(1)
    logger.propagate = False
    handler = _ListHandler()
    logger.addHandler(handler)
    yield logger, handler
    logger.removeHandler(handler)


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


def _trade(symbol, price):
    return json.dumps({"e": "trade", "s": symbol, "p": price})


def test_default_url():
    assert StreamConfig().url() == "wss://stream.binance.com:9443/ws/btcusdt@trade"


def test_plain_url_uses_ws_scheme():
    config = StreamConfig(host="localhost", port=8080, target="/feed", secure=False)
    assert config.url() == "ws://localhost:8080/feed"


@pytest.mark.parametrize(
    "kwargs",
    [{"target": "ws/btcusdt@trade"}, {"port": 0}, {"port": 70000}, {"host": ""}],
)
def test_invalid_config_raises(kwargs):
    with pytest.raises(ValueError):
        StreamConfig(**kwargs)


def test_insecure_context_skips_verification():
    context = make_ssl_context(False)
    assert context.verify_mode == ssl.CERT_NONE
    assert context.check_hostname is False
    assert context.minimum_version == ssl.TLSVersion.TLSv1_2
    assert context.maximum_version == ssl.TLSVersion.TLSv1_2


def test_verifying_context_requires_certificate():
    context = make_ssl_context(True)
    assert context.verify_mode == ssl.CERT_REQUIRED
    assert context.check_hostname is True


def test_handle_message_parses_and_traces(captured):
    logger, handler = captured
    out = io.StringIO()
    payload = _trade("BTCUSDT", "97000.5")
    trade = handle_message(payload, logger, out)
    assert trade == parse_trade(payload)
    assert out.getvalue() == f"Received message: {payload}\n"
    traced = [r.getMessage() for r in handler.records if r.levelno == TRACE]
    assert traced == trade.log_lines()


def test_handle_message_accepts_bytes(captured):
    logger, _ = captured
    payload = _trade("ETHUSDT", "3000")
    assert handle_message(payload.encode(), logger, io.StringIO()) == parse_trade(payload)


def test_handle_message_reports_bad_json(captured):
    logger, handler = captured
    out = io.StringIO()
    assert handle_message("{not json", logger, out) is None
    errors = [r.getMessage() for r in handler.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert errors[0].startswith("JSON Parsing Error")


def test_handle_message_skips_empty(captured):
    logger, handler = captured
    out = io.StringIO()
    assert handle_message(b"", logger, out) is None
    assert out.getvalue() == ""
    assert [r.levelno for r in handler.records] == [logging.WARNING]


@pytest.mark.asyncio
async def test_consume_collects_trades(captured):
    logger, handler = captured
    messages = [_trade("BTCUSDT", "1.5"), "garbage", _trade("ETHUSDT", "2")]
    out = io.StringIO()
    async with _server(messages) as config:
        trades = await consume(config, None, logger, out, 3)
    assert [t.symbol for t in trades] == ["BTCUSDT", "ETHUSDT"]
    assert out.getvalue().count("Received message: ") == 3
    assert any(r.levelno == logging.ERROR for r in handler.records)


@pytest.mark.asyncio
async def test_consume_stops_at_limit(captured):
    logger, _ = captured
    messages = [_trade(f"SYM{n}", "1") for n in range(5)]
    async with _server(messages) as config:
        trades = await consume(config, None, logger, io.StringIO(), 2)
    assert [t.symbol for t in trades] == ["SYM0", "SYM1"]


@pytest.mark.asyncio
async def test_consume_ends_on_normal_close(captured):
    logger, handler = captured
    messages = [_trade("BTCUSDT", "1"), _trade("BTCUSDT", "2")]
    async with _server(messages) as config:
        trades = await consume(config, None, logger, io.StringIO(), None)
    assert [t.price for t in trades] == [1.0, 2.0]
    assert "WebSocket connection closed successfully" in [
        r.getMessage() for r in handler.records
    ]


@pytest.mark.asyncio
async def test_consume_connection_refused(captured):
    logger, handler = captured
    config = StreamConfig(host="127.0.0.1", port=_free_port(), target="/ws", secure=False)
    with pytest.raises((OSError, WebSocketException)):
        await consume(config, None, logger, io.StringIO(), 1)
    assert any(
        r.getMessage().startswith("WebSocket connection failed") for r in handler.records
    )


def test_main_rejects_bad_target():
    with pytest.raises(SystemExit) as info:
        main(["--target", "no-slash"])
    assert info.value.code == 2


def test_main_fails_when_unreachable(tmp_path):
    log_path = tmp_path / "client.log"
    code = main(
        ["--host", "127.0.0.1", "--port", str(_free_port()), "--plain", "--log", str(log_path)]
    )
    assert code == 1
    assert "Starting WebSocket client..." in log_path.read_text(encoding="utf-8")