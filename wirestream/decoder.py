"""Incremental decoder of server websocket frames."""

from __future__ import annotations

import enum
import struct
from typing import Any, Optional

from .errors import ProtocolError
from .nonblock import read_nonblocking
from .protocol import (
    FIN_MASK,
    MASK_MASK,
    OP_CODE_MASK,
    PAYLOAD_LENGTH_MASK,
    RSV1_MASK,
    RSV2_MASK,
    RSV3_MASK,
    FrameKind,
    OpCode,
    WebsocketFrame,
)

DEFAULT_CAPACITY = 4096

_U16 = struct.Struct(">H")
_U64 = struct.Struct(">Q")

_FRAME_KINDS = {
    OpCode.TEXT: FrameKind.TEXT,
    OpCode.BINARY: FrameKind.BINARY,
    OpCode.CONTINUATION: FrameKind.CONTINUATION,
    OpCode.PING: FrameKind.PING,
    OpCode.CLOSE: FrameKind.CLOSE,
}

_DATA_KINDS = (FrameKind.TEXT, FrameKind.BINARY, FrameKind.CONTINUATION)


class _State(enum.Enum):
    HEADER = enum.auto()
    PAYLOAD_LENGTH = enum.auto()
    EXTENDED_LENGTH_2 = enum.auto()
    EXTENDED_LENGTH_8 = enum.auto()
    PAYLOAD = enum.auto()


class Decoder:
    """Decodes frames from bytes read off a stream, one frame per call.

    ``capacity`` bounds how many bytes a single network read asks for. A new
    read is only made once the bytes already held cannot yield another frame.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._buffer = bytearray()
        self._pos = 0
        self._state = _State.HEADER
        self._fin = False
        self._op_code = 0
        self._payload_length = 0
        self._needs_more_data = True

    @property
    def available(self) -> int:
        """Number of received bytes not yet consumed."""
        return len(self._buffer) - self._pos

    @property
    def needs_more_data(self) -> bool:
        return self._needs_more_data

    def feed(self, data: bytes) -> None:
        """Append received bytes to be decoded."""
        if self._pos:
            del self._buffer[: self._pos]
            self._pos = 0
        self._buffer += data
        self._needs_more_data = False

    def read(self, stream: Any) -> None:
        """Read once from ``stream`` if the held bytes have run out of frames.

        A read that would block adds nothing; end of stream raises EOFError.
        """
        if not self._needs_more_data:
            return
        self.feed(read_nonblocking(stream.read, self.capacity))

    def _consume(self, count: int) -> bytes:
        chunk = bytes(self._buffer[self._pos : self._pos + count])
        self._pos += count
        return chunk

    def decode_next(self) -> Optional[WebsocketFrame]:
        """Return the next complete frame, or None when more data is needed."""
        while True:
            available = self.available
            if self._state is _State.HEADER:
                if available < 1:
                    break
                b = self._consume(1)[0]
                if b & (RSV1_MASK | RSV2_MASK | RSV3_MASK):
                    raise ProtocolError("non zero RSV value received")
                self._fin = bool(b & FIN_MASK)
                self._op_code = b & OP_CODE_MASK
                self._state = _State.PAYLOAD_LENGTH
            elif self._state is _State.PAYLOAD_LENGTH:
                if available < 1:
                    break
                b = self._consume(1)[0]
                if b & MASK_MASK:
                    raise ProtocolError("masking bit set on the server frame")
                length = b & PAYLOAD_LENGTH_MASK
                self._payload_length = length
                if length <= 125:
                    self._state = _State.PAYLOAD
                elif length == 126:
                    self._state = _State.EXTENDED_LENGTH_2
                else:
                    self._state = _State.EXTENDED_LENGTH_8
            elif self._state is _State.EXTENDED_LENGTH_2:
                if available < _U16.size:
                    break
                (self._payload_length,) = _U16.unpack(self._consume(_U16.size))
                self._state = _State.PAYLOAD
            elif self._state is _State.EXTENDED_LENGTH_8:
                if available < _U64.size:
                    break
                (self._payload_length,) = _U64.unpack(self._consume(_U64.size))
                self._state = _State.PAYLOAD
            else:
                if available < self._payload_length:
                    break
                payload = self._consume(self._payload_length)
                kind = _FRAME_KINDS.get(self._op_code)
                if kind is None:
                    raise ProtocolError("unknown op_code")
                self._state = _State.HEADER
                if kind in _DATA_KINDS:
                    return WebsocketFrame(kind, payload, self._fin)
                return WebsocketFrame(kind, payload)

        self._needs_more_data = True
        return None