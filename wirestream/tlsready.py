"""Stream that is either plain or TLS, chosen when it is created."""

from __future__ import annotations

from typing import Any, Callable, Optional

from .tls import TlsConfig, TlsStream


def into_tls_stream(stream: Any, configure: Optional[Callable[[TlsConfig], None]] = None) -> TlsStream:
    """Wrap ``stream`` in TLS, using the host of its connection info as server name."""
    server_name = stream.connection_info.host
    return TlsStream.wrap_with_config(stream, server_name, configure)


class TlsReadyStream:
    """Either a plain stream or the same stream carried over TLS.

    With ``secure`` set, a stream that is not already a :class:`TlsStream`
    is wrapped in one, with its connection info's host as server name.
    """

    def __init__(self, stream: Any, secure: bool = False) -> None:
        if secure and not isinstance(stream, TlsStream):
            stream = into_tls_stream(stream)
        self._stream = stream
        self._secure = secure

    @property
    def secure(self) -> bool:
        return self._secure

    @property
    def stream(self) -> Any:
        """The stream that reads and writes are handed to."""
        return self._stream

    @property
    def connection_info(self):
        return self._stream.connection_info

    def read(self, size: int) -> bytes:
        return self._stream.read(size)

    def write(self, data: bytes) -> int:
        return self._stream.write(data)

    def flush(self) -> None:
        self._stream.flush()

    def connected(self) -> bool:
        return self._stream.connected()

    def make_writable(self) -> None:
        self._stream.make_writable()

    def make_readable(self) -> None:
        self._stream.make_readable()