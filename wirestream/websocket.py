"""Websocket client over any non-blocking byte stream."""

from __future__ import annotations

from typing import Any, Iterator, Optional

from . import encoder
from .decoder import Decoder
from .errors import ProtocolError, ReceivedCloseFrame, WebsocketClosed
from .handshake import Handshaker
from .protocol import FrameKind, OpCode, WebsocketFrame
from .tcp import TcpStream
from .tlsready import TlsReadyStream
from .urls import parse_url

_STATUS_CODE_SIZE = 2


class Websocket:
    """Websocket client that owns the stream it runs over.

    A websocket made with :meth:`__init__` first performs the opening
    handshake; messages sent before it completes are held and sent
    afterwards. Any error while reading or sending marks it closed.
    """

    def __init__(self, stream: Any, endpoint: str) -> None:
        self._stream = stream
        self._closed = False
        server_name = stream.connection_info.host
        self._handshaker: Optional[Handshaker] = Handshaker(server_name, endpoint)
        self._decoder: Optional[Decoder] = None

    @classmethod
    def with_handshake_complete(cls, stream: Any) -> "Websocket":
        """Wrap a stream whose handshake the caller has already carried out."""
        ws = cls.__new__(cls)
        ws._stream = stream
        ws._closed = False
        ws._handshaker = None
        ws._decoder = Decoder()
        return ws

    @property
    def stream(self) -> Any:
        return self._stream

    @property
    def closed(self) -> bool:
        """True after an error or after the peer sent a close frame."""
        return self._closed

    @property
    def handshake_complete(self) -> bool:
        return self._handshaker is None

    def read_batch(self) -> "Batch":
        """Read from the network once if needed and return the frames ready to decode."""
        try:
            if self._handshaker is not None:
                self._handshaker.read(self._stream)
            else:
                self._decoder.read(self._stream)
        except Exception:
            self._closed = True
            raise
        return Batch(self)

    def receive_next(self) -> Optional[WebsocketFrame]:
        """Return at most one frame, reading from the network if needed."""
        return self.read_batch().receive_next()

    def send_text(self, fin: bool, body: Optional[bytes] = None) -> None:
        self._send(fin, OpCode.TEXT, body)

    def send_binary(self, fin: bool, body: Optional[bytes] = None) -> None:
        self._send(fin, OpCode.BINARY, body)

    def send_pong(self, body: Optional[bytes] = None) -> None:
        self._send(True, OpCode.PONG, body)

    def send_ping(self, body: Optional[bytes] = None) -> None:
        self._send(True, OpCode.PING, body)

    def connected(self) -> bool:
        return self._stream.connected()

    def make_writable(self) -> None:
        self._stream.make_writable()

    def make_readable(self) -> None:
        self._stream.make_readable()

    def _ensure_not_closed(self) -> None:
        if self._closed:
            raise WebsocketClosed()

    def _next(self) -> Optional[WebsocketFrame]:
        self._ensure_not_closed()
        try:
            return self._advance()
        except Exception:
            self._closed = True
            raise

    def _send(self, fin: bool, op_code: int, body: Optional[bytes]) -> None:
        self._ensure_not_closed()
        try:
            self._dispatch(fin, op_code, body)
        except Exception:
            self._closed = True
            raise

    def _dispatch(self, fin: bool, op_code: int, body: Optional[bytes]) -> None:
        if self._handshaker is not None:
            self._handshaker.buffer_message(fin, op_code, body)
        else:
            encoder.send(self._stream, fin, op_code, body)

    def _advance(self) -> Optional[WebsocketFrame]:
        if self._handshaker is not None:
            if self._handshaker.perform_handshake(self._stream):
                self._handshaker.drain_pending_messages(self._stream, encoder.send)
                self._handshaker = None
                self._decoder = Decoder()
            return None

        frame = self._decoder.decode_next()
        if frame is None:
            return None
        if frame.kind is FrameKind.PING:
            self._dispatch(True, OpCode.PONG, frame.payload)
            return None
        if frame.kind is FrameKind.CLOSE:
            try:
                self._dispatch(True, OpCode.CLOSE, frame.payload)
            except Exception:
                pass
            payload = frame.payload
            if len(payload) < _STATUS_CODE_SIZE:
                raise ProtocolError("close frame without status code")
            status_code = int.from_bytes(payload[:_STATUS_CODE_SIZE], "big")
            body = payload[_STATUS_CODE_SIZE:].decode("utf-8", errors="replace")
            raise ReceivedCloseFrame(status_code, body)
        return frame


class Batch:
    """Frames decodable since the last network read; iterating stops when none are left."""

    def __init__(self, websocket: Websocket) -> None:
        self._websocket = websocket

    def receive_next(self) -> Optional[WebsocketFrame]:
        """Decode the next frame, or return None if the batch is used up."""
        return self._websocket._next()

    def __iter__(self) -> Iterator[WebsocketFrame]:
        while True:
            frame = self.receive_next()
            if frame is None:
                return
            yield frame


def into_websocket(stream: Any, endpoint: str) -> Websocket:
    """Wrap ``stream`` in a websocket that will handshake against ``endpoint``."""
    return Websocket(stream, endpoint)


def connect_url(url: str) -> Websocket:
    """Open a websocket to a ``ws://`` or ``wss://`` URL, with TLS for the latter."""
    connection_info, endpoint, secure = parse_url(url)
    tcp = TcpStream.connect(connection_info)
    try:
        stream = TlsReadyStream(tcp, secure)
    except BaseException:
        tcp.close()
        raise
    return Websocket(stream, endpoint)