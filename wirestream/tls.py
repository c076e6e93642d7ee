"""Non-blocking TLS client stream layered over any byte stream."""

from __future__ import annotations

import enum
import errno
import logging
import os
import ssl
from typing import Any, Callable, Optional

from .nonblock import read_nonblocking, write_nonblocking

logger = logging.getLogger(__name__)

_READ_CHUNK = 16 * 1024


class TlsConfig:
    """Client TLS settings, applied before the connection is set up."""

    def __init__(self, context: Optional[ssl.SSLContext] = None) -> None:
        self.context = context if context is not None else ssl.create_default_context(ssl.Purpose.SERVER_AUTH)

    def with_no_cert_verification(self) -> None:
        """Disable certificate and host name verification."""
        self.context.check_hostname = False
        self.context.verify_mode = ssl.CERT_NONE

    def with_default_cert_paths(self) -> None:
        """Load the system's default CA file and directory, if any exist."""
        paths = ssl.get_default_verify_paths()
        cafile, capath = paths.cafile, paths.capath
        if cafile is None and capath is None:
            return
        try:
            self.context.load_verify_locations(cafile=cafile, capath=capath)
        except OSError as exc:
            logger.warning("was not able to load default ssl paths due to %r", exc)

    def _apply_keylog_policy(self) -> None:
        path = os.environ.get("SSLKEYLOGFILE")
        if path and hasattr(self.context, "keylog_filename"):
            self.context.keylog_filename = path


class _Phase(enum.Enum):
    HANDSHAKE = enum.auto()
    DRAIN = enum.auto()
    STREAM = enum.auto()


class TlsStream:
    """TLS client over a non-blocking stream.

    Reads drive the handshake and raise BlockingIOError until it is done.
    Data written before then is held and sent once the handshake completes.
    """

    def __init__(self, inner: Any, ssl_object: ssl.SSLObject, incoming: ssl.MemoryBIO,
                 outgoing: ssl.MemoryBIO, config: TlsConfig) -> None:
        self._inner = inner
        self._ssl = ssl_object
        self._incoming = incoming
        self._outgoing = outgoing
        self._config = config
        self._phase = _Phase.HANDSHAKE
        self._pending = bytearray()
        self._outbound = bytearray()

    @classmethod
    def wrap(cls, stream: Any, server_name: str) -> "TlsStream":
        """Start a TLS session over ``stream`` with default settings."""
        return cls.wrap_with_config(stream, server_name, None)

    @classmethod
    def wrap_with_config(cls, stream: Any, server_name: str,
                         configure: Optional[Callable[[TlsConfig], None]]) -> "TlsStream":
        """Start a TLS session over ``stream`` after ``configure`` adjusts the settings."""
        config = TlsConfig()
        config._apply_keylog_policy()
        if configure is not None:
            configure(config)
        incoming, outgoing = ssl.MemoryBIO(), ssl.MemoryBIO()
        ssl_object = config.context.wrap_bio(incoming, outgoing, server_side=False, server_hostname=server_name)
        tls = cls(stream, ssl_object, incoming, outgoing, config)
        try:
            ssl_object.do_handshake()
        except ssl.SSLWantReadError:
            pass
        tls._flush_outgoing()
        return tls

    @property
    def config(self) -> TlsConfig:
        return self._config

    @property
    def connection_info(self):
        return self._inner.connection_info

    @property
    def handshake_complete(self) -> bool:
        return self._phase is _Phase.STREAM

    def _flush_outgoing(self) -> None:
        self._outbound += self._outgoing.read()
        if self._outbound:
            written = write_nonblocking(self._inner.write, bytes(self._outbound))
            del self._outbound[:written]
            self._inner.flush()

    def _fill_incoming(self) -> bool:
        data = read_nonblocking(self._inner.read, _READ_CHUNK)
        if not data:
            return False
        self._incoming.write(data)
        return True

    def _handshake_step(self) -> bool:
        while True:
            try:
                self._ssl.do_handshake()
            except ssl.SSLWantReadError:
                self._flush_outgoing()
                if not self._fill_incoming():
                    return False
            else:
                self._flush_outgoing()
                return True

    def read(self, size: int) -> bytes:
        if self._phase is _Phase.HANDSHAKE:
            if self._handshake_step():
                self._phase = _Phase.DRAIN
            raise BlockingIOError(errno.EAGAIN, "TLS handshake in progress")
        if self._phase is _Phase.DRAIN:
            if self._pending:
                self._ssl.write(bytes(self._pending))
                self._pending.clear()
            self._flush_outgoing()
            if not self._outbound:
                self._inner.flush()
                self._phase = _Phase.STREAM
            raise BlockingIOError(errno.EAGAIN, "draining pending messages")
        self._flush_outgoing()
        while True:
            try:
                return self._ssl.read(size)
            except ssl.SSLWantReadError:
                if not self._fill_incoming():
                    raise BlockingIOError(errno.EAGAIN, "no TLS data available") from None
            except ssl.SSLZeroReturnError:
                return b""

    def write(self, data: bytes) -> int:
        if self._phase is not _Phase.STREAM:
            self._pending += data
            return len(data)
        written = self._ssl.write(data)
        self._flush_outgoing()
        return written

    def flush(self) -> None:
        if self._phase is not _Phase.STREAM:
            return
        self._flush_outgoing()
        self._inner.flush()

    def connected(self) -> bool:
        return self._inner.connected()

    def make_writable(self) -> None:
        self._inner.make_writable()

    def make_readable(self) -> None:
        self._inner.make_readable()