# wirestream

wirestream provides non-blocking stream layers and a small WebSocket client. It
is meant for latency-sensitive clients that talk to a server over TCP. It uses
only the standard library.

Each layer has the same small interface: `read(size)`, `write(data)` and
`flush()`. Most layers also have `connected()`, `make_writable()` and
`make_readable()`, and they pass those calls down to the layer beneath. You can
stack the layers on top of each other.

| Module | Layer | What it does |
| --- | --- | --- |
| `wirestream.tcp` | `TcpStream` | A non-blocking TCP socket with `TCP_NODELAY` and keep-alive set. `TcpStream.connect(info, addr)` opens it. If the socket has no data ready, `read` raises `BlockingIOError`. |
| `wirestream.tls` | `TlsStream` | TLS over any stream, built on `ssl.MemoryBIO`. Reads move the handshake forward and raise `BlockingIOError` until it is done. Data you write before then is held and sent afterwards. `TlsConfig` offers `with_no_cert_verification()` and `with_default_cert_paths()`. If the `SSLKEYLOGFILE` environment variable is set, keys are logged to that file. |
| `wirestream.tlsready` | `TlsReadyStream` | Plain or TLS, chosen by its `secure` flag. `into_tls_stream(stream)` wraps a stream in TLS and uses the host from its connection info as the server name. |
| `wirestream.buffered` | `BufferedStream` | Holds writes in a buffer of fixed capacity (1024 bytes by default) until `flush()`. A write that does not fit raises `OSError`. |
| `wirestream.record` | `RecordedStream`, `Recorder` | Passes data through to the stream beneath. It also copies the inbound bytes, the outbound bytes and a sequence index to `.rec` files. |
| `wirestream.replay` | `ReplayStream` | Plays back a recording one read at a time. |
| `wirestream.filestream` | `FileStream` | Reads a file in chunks of at most `chunk_size` bytes and throws writes away. |

`wirestream.connection` holds two things:

- `ConnectionInfo`: host, port, an optional interface to bind to, an optional CPU for `SO_INCOMING_CPU` (Linux only) and an optional socket-configuration callback.
- `bind_and_connect`: creates the socket and starts the connection without blocking.

`wirestream.nonblock` has two small helpers, `read_nonblocking` and
`write_nonblocking`.

## WebSocket client

`wirestream.websocket.Websocket` runs over any of the layers above.

- It performs the HTTP upgrade handshake step by step, as you read.
- Messages you send before the handshake completes are queued. They are sent once the handshake has completed.
- `read_batch()` reads from the network at most once and returns a `Batch`. Iterate over the batch to get every frame that is ready to decode.
- `receive_next()` returns at most one frame. It returns `None` if no frame is ready.
- It answers pings with a pong and does not hand pings to you.
- When the server sends a close frame, it sends a close frame back and raises `ReceivedCloseFrame`.
- Any error marks the websocket closed. After that, every call raises `WebsocketClosed`.

Frames are `wirestream.protocol.WebsocketFrame` objects with these fields:

- `kind`: a `FrameKind`
- `payload`: bytes
- `fin`: whether this frame ends the message

`wirestream.encoder.encode_frame` returns the bytes of a masked client frame.
The masking key is all zeros. `wirestream.decoder.Decoder` decodes server
frames incrementally.

```python
from wirestream.connection import ConnectionInfo
from wirestream.tcp import TcpStream
from wirestream.buffered import BufferedStream
from wirestream.websocket import into_websocket
from wirestream.protocol import FrameKind

info = ConnectionInfo("127.0.0.1", 9002)
stream = BufferedStream(TcpStream.connect(info, None), 1024)
ws = into_websocket(stream, "/")

ws.send_text(True, b"hello")          # queued until the handshake completes

while True:
    for frame in ws.read_batch():
        if frame.kind is FrameKind.TEXT:
            print(frame.fin, frame.payload.decode())
```

To connect from a URL, call `connect_url`. It accepts `ws://` and `wss://`, and
uses TLS for `wss://`. `wirestream.urls.parse_url` splits a URL into three
parts: connection info, endpoint, and whether it is secure.

```python
from wirestream.websocket import connect_url

ws = connect_url("wss://stream.example.com/ws")
```

If the handshake has already been done some other way, use
`Websocket.with_handshake_complete(stream)`.

## Recording and replay

`into_recorded_stream(stream, "session")` writes three files:

- `session_inbound.rec`
- `session_inbound_seq.rec`
- `session_outbound.rec`

A `ReplayStream` opened on `session_inbound` replays the inbound side. It reads
the inbound file and its sequence file together.

```python
from wirestream.record import into_recorded_stream
from wirestream.replay import ReplayStream
from wirestream.websocket import Websocket

recorded = into_recorded_stream(stream, "session")

replay = ReplayStream.from_file("session_inbound")
ws = Websocket.with_handshake_complete(replay)
```

During replay, a sequence number with no recorded data makes the read raise
`BlockingIOError`. Once the recording is used up, reads raise `EOFError`.

## Custom data sources

To supply frames from your own code, subclass `wirestream.datasource.DataSource`
and implement `next_frame()`. Then wrap the subclass in `DataSourceWebsocket`.
Its `receive_next()` returns whatever the source supplies.

## Errors

The WebSocket layer raises subclasses of `wirestream.errors.WebsocketError`:

- `ProtocolError`
- `ReceivedCloseFrame`
- `WebsocketClosed`

Other failures are reported with these exceptions:

- Transport failures surface as `OSError`.
- A refused upgrade raises `ConnectionError`.
- End of stream raises `EOFError`.

Inside the websocket, a read that would block is not an error. That read simply
yields no frames. The lower stream layers, however, do raise `BlockingIOError`
when you call them directly.

## What it does not do

wirestream has no event loop, selector or poller. Your code calls `read_batch()`
or `receive_next()` repeatedly. It is a client only: there is no server side
and no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```