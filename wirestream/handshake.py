"""Client side of the websocket opening handshake."""

from __future__ import annotations

import base64
import enum
import errno
import os
from collections import deque
from typing import Any, Callable, Deque, Optional, Tuple

from .nonblock import read_nonblocking, write_nonblocking

_MAX_REQUEST_SIZE = 256
_HEADER_END = b"\r\n\r\n"
_SWITCHING_PROTOCOLS = 101

SendFn = Callable[[Any, bool, int, Optional[bytes]], None]


class HandshakeState(enum.Enum):
    NOT_STARTED = enum.auto()
    PENDING_REQUEST = enum.auto()
    PENDING_RESPONSE = enum.auto()
    COMPLETED = enum.auto()


def generate_nonce() -> str:
    """Return a base64 encoded random 16 byte key."""
    return base64.b64encode(os.urandom(16)).decode("ascii")


def _parse_response(response: bytes) -> Tuple[int, str]:
    lines = response[: -len(_HEADER_END)].decode("latin-1").split("\r\n")
    parts = lines[0].split(" ", 2)
    if len(parts) < 2 or not parts[0].startswith("HTTP/") or len(parts[1]) != 3 or not parts[1].isdigit():
        raise ConnectionError("invalid HTTP response status line")
    for line in lines[1:]:
        if ":" not in line:
            raise ConnectionError("invalid HTTP response header")
    reason = parts[2] if len(parts) > 2 else ""
    return int(parts[1]), reason


class Handshaker:
    """Drives the HTTP upgrade request and response over a non-blocking stream.

    Messages sent before the handshake completes are held and can be
    drained to the stream afterwards.
    """

    def __init__(self, server_name: str, endpoint: str) -> None:
        self.server_name = server_name
        self.endpoint = endpoint
        self._state = HandshakeState.NOT_STARTED
        self._request = b""
        self._bytes_sent = 0
        self._inbound = bytearray()
        self._pending: Deque[Tuple[int, bool, Optional[bytes]]] = deque()

    @property
    def state(self) -> HandshakeState:
        return self._state

    @property
    def pending_messages(self) -> int:
        return len(self._pending)

    def read(self, stream: Any) -> None:
        """Read one byte of the response while it is awaited.

        Reading byte by byte stops exactly at the end of the response head,
        leaving any following frames on the stream.
        """
        if self._state is HandshakeState.PENDING_RESPONSE:
            self._inbound += read_nonblocking(stream.read, 1)

    def perform_handshake(self, stream: Any) -> bool:
        """Advance the handshake by one step; True once it has completed.

        Raises ConnectionError if the server refuses the upgrade.
        """
        if self._state is HandshakeState.NOT_STARTED:
            self._prepare_request()
            return False
        if self._state is HandshakeState.PENDING_REQUEST:
            remaining = self._request[self._bytes_sent :]
            if remaining:
                self._bytes_sent += write_nonblocking(stream.write, remaining)
            else:
                stream.flush()
                self._state = HandshakeState.PENDING_RESPONSE
            return False
        if self._state is HandshakeState.PENDING_RESPONSE:
            if len(self._inbound) >= len(_HEADER_END) and self._inbound.endswith(_HEADER_END):
                code, reason = _parse_response(bytes(self._inbound))
                if code != _SWITCHING_PROTOCOLS:
                    raise ConnectionError(f"unable to switch protocols, reason: {reason}")
                self._state = HandshakeState.COMPLETED
            return False
        return True

    def buffer_message(self, fin: bool, op: int, body: Optional[bytes]) -> None:
        """Hold a message until the handshake has completed."""
        self._pending.append((op, fin, None if body is None else bytes(body)))

    def drain_pending_messages(self, stream: Any, send: SendFn) -> None:
        """Send every held message, oldest first, with ``send(stream, fin, op, body)``."""
        while self._pending:
            op, fin, body = self._pending.popleft()
            send(stream, fin, op, body)

    def _prepare_request(self) -> None:
        request = (
            f"GET {self.endpoint} HTTP/1.1\r\n"
            f"Host: {self.server_name}\r\n"
            "Upgrade: websocket\r\n"
            "Connection: upgrade\r\n"
            f"Sec-WebSocket-Key: {generate_nonce()}\r\n"
            "Sec-WebSocket-Version: 13\r\n"
            "\r\n"
        ).encode()
        if len(request) > _MAX_REQUEST_SIZE:
            raise OSError(errno.ENOBUFS, "failed to write whole buffer")
        self._request = request
        self._state = HandshakeState.PENDING_REQUEST