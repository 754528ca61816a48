# tickstream

`tickstream` connects to an exchange's trade stream over a WebSocket, using
TLS by default. It prints each message it receives and parses it as a trade
event. It also includes a few companion tools:

- a raw reader that prints the stream in fixed-size chunks, or prints order
  book depth updates as they arrive;
- a demo in which several threads increment one shared counter;
- a helper that works out a C or C++ compiler's identity, its target platform
  and architecture, and its default language standard from a set of
  predefined macros.

## Installation

```
pip install .
```

To run the test suite, install the test extra and run pytest:

```
pip install .[test]
pytest
```

## Command-line tools

| Command                 | What it does                                                   |
|-------------------------|----------------------------------------------------------------|
| `tickstream-client`     | Streams trades, prints each message and parses it              |
| `tickstream-raw`        | Prints the raw stream in fixed-size chunks, or depth updates   |
| `tickstream-counter`    | Runs several threads that increment one shared counter         |
| `tickstream-compilerid` | Prints the `INFO:` strings that identify a compiler            |

### `tickstream-client`

With no arguments it connects to `wss://stream.binance.com:9443/ws/btcusdt@trade`
and logs to `./boost_client.log`. It accepts these options:

- `--host`, `--port`, `--target`: where to connect.
- `--plain`: connect without TLS.
- `--verify`: verify the server certificate. Without this flag the TLS 1.2
  context does not check the certificate.
- `--log PATH`: path of the log file.
- `--limit N`: stop after N messages.

The command exits with status 1 if the connection or a read fails.

### `tickstream-raw`

This command needs a mode. `tickstream-raw raw` prints every message as
NUL-padded buffers of `--size` bytes (256 by default). `tickstream-raw depth`
prints each message with a `[Feed] Received Data:` prefix. The default
targets are `/ws/btcusdt@trade` for raw mode and `/ws/btcusdt@depth` for depth
mode. Connections are plain unless you pass `--tls`. It also accepts
`--host`, `--port`, `--target` and `--limit`.

### `tickstream-counter`

This command starts `--threads` threads (10 by default). Each one adds one to a
shared `AtomicCounter` `--times` times (100000 by default). It then prints
`Final counter value: ...`.

### `tickstream-compilerid`

This command prints the `INFO:` lines for a set of macros. You can give the
macros with `-D NAME[=VALUE]`, or from a file of `#define NAME VALUE` lines with
`--defines FILE`. Select the language with `--language C` or `--language CXX`.

## Library use

### Parsing trades

```python
from tickstream.trades import parse_trade, TradeParseError

try:
    trade = parse_trade(payload)
except TradeParseError as exc:
    print("bad message:", exc)
else:
    for line in trade.log_lines():
        print(line)
```

`parse_trade` expects a JSON object with the string fields `e` (the event type)
and `s` (the symbol). It also reads the optional decimal string `p` (the
price). It returns a frozen `Trade`. `TradeParseError`, a subclass of
`ValueError`, covers empty, malformed or incomplete messages.

### Streaming

```python
import asyncio
import sys

from tickstream.client import StreamConfig, make_ssl_context, consume
from tickstream.logsetup import configure_logging

logger = configure_logging("./tickstream.log", "daily_logger")
config = StreamConfig()
print(config.url())

trades = asyncio.run(consume(config, make_ssl_context(False), logger, sys.stdout, 10))
```

`configure_logging` sets up a file log that rolls over at midnight and records
messages at debug level and above.

`consume` reads up to `limit` messages and returns the trades it parsed. If
the server closes the connection normally, the stream simply ends. Any other
failure is logged and raised.

Each message goes to `handle_message`, which echoes it to `out`. A message that
cannot be parsed is logged as an error and skipped. The fields of a parsed
trade are logged at a `TRACE` level (5). That level is below debug, so a
logger set up by `configure_logging` does not write those lines to its file.

### Raw feed

`tickstream.rawfeed` provides three helpers for formatting data:

- `fixed_chunks` splits bytes into pieces of at most a given size.
- `format_chunk` renders one piece as a full NUL-padded buffer.
- `format_depth` formats one depth update.

`consume_raw` and `consume_depth` read from a live stream and print to `out`.

### Threaded counter

```python
from tickstream.counter import AtomicCounter, increment, run

print(run(10, 100_000))   # 1000000

counter = AtomicCounter()
increment(counter, 5)
print(counter.load())     # 5
```

### Compiler identification

```python
from tickstream.compilerid.compilers import identify_c_compiler
from tickstream.compilerid.info import info_strings, parse_info_strings

macros = {"__clang__": 1, "__clang_major__": 17, "__clang_minor__": 0,
          "__clang_patchlevel__": 0, "__APPLE__": 1, "__STDC__": 1,
          "__STDC_VERSION__": 201710}
print(identify_c_compiler(macros))
for line in info_strings(macros, "C"):
    print(line)
```

`tickstream.compilerid.platforms` provides `identify_platform` and
`identify_architecture`. `parse_info_strings` reads `INFO:key[value]` strings
back into a dict. `encode_dec` and `encode_hex` give the eight-digit version
encodings.

## What it does not do

- The client only reads. It does not place orders or authenticate.
- It does not store trades anywhere except in the list that `consume` returns.
- It includes no demo of cooperative, step-by-step tasks. The only
  concurrency demo is the threaded counter.