"""Stream wrapper that holds writes until flushed."""

from __future__ import annotations

import errno
from typing import Any

DEFAULT_BUFFER_SIZE = 1024


def _write_all(stream: Any, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = stream.write(view)
        if not written:
            raise OSError(errno.EIO, "failed to write whole buffer")
        view = view[written:]


class BufferedStream:
    """Collects written data in a fixed-capacity buffer and sends it on flush.

    A write that does not fit in the remaining space raises OSError and
    leaves the buffer unchanged.
    """

    def __init__(self, inner: Any, capacity: int = DEFAULT_BUFFER_SIZE) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._inner = inner
        self._capacity = capacity
        self._buffer = bytearray()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def pending(self) -> int:
        """Number of bytes waiting to be flushed."""
        return len(self._buffer)

    @property
    def connection_info(self):
        return self._inner.connection_info

    def read(self, size: int) -> bytes:
        return self._inner.read(size)

    def write(self, data: bytes) -> int:
        if len(data) > self._capacity - len(self._buffer):
            raise OSError(errno.ENOBUFS, "unable to write the whole buffer")
        self._buffer += data
        return len(data)

    def flush(self) -> None:
        _write_all(self._inner, bytes(self._buffer))
        self._buffer.clear()
        self._inner.flush()

    def connected(self) -> bool:
        return self._inner.connected()

    def make_writable(self) -> None:
        self._inner.make_writable()

    def make_readable(self) -> None:
        self._inner.make_readable()