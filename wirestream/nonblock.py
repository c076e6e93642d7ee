"""Helpers that turn would-block conditions into empty results."""

from __future__ import annotations

from typing import Callable, Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]


def read_nonblocking(read: Callable[[int], Optional[bytes]], size: int) -> bytes:
    """Call ``read(size)`` and return what it gave.

    A read that would block yields ``b""``. A read that reports end of
    stream (an empty result) raises :class:`EOFError`.
    """
    try:
        data = read(size)
    except BlockingIOError:
        return b""
    if data is None:
        return b""
    if not data:
        raise EOFError("unexpected end of stream")
    return data


def write_nonblocking(write: Callable[[BytesLike], Optional[int]], data: BytesLike) -> int:
    """Call ``write(data)`` and return the number of bytes taken.

    A write that would block counts as zero bytes written. A writer that
    returns ``None`` is taken to have accepted the whole of ``data``.
    """
    try:
        written = write(data)
    except BlockingIOError:
        return 0
    if written is None:
        return len(data)
    return written