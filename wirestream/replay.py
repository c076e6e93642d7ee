"""Stream that plays back previously recorded inbound traffic."""

from __future__ import annotations

import errno
import os
from typing import Any, Dict, Union

from .connection import ConnectionInfo
from .record import SEQUENCE_RECORD


def load_sequence_file(path: Union[str, os.PathLike]) -> Dict[int, int]:
    """Read a sequence file into a mapping of sequence number to byte count."""
    entries: Dict[int, int] = {}
    with open(path, "rb") as fh:
        while True:
            record = fh.read(SEQUENCE_RECORD.size)
            if not record:
                break
            if len(record) != SEQUENCE_RECORD.size:
                raise ValueError("incomplete sequence file")
            seq, count = SEQUENCE_RECORD.unpack(record)
            entries[seq] = count
    return entries


class ReplayStream:
    """Replays a recording read by read, following its sequence numbers.

    A sequence number with no data makes the read raise BlockingIOError;
    after the last recorded sequence every read raises EOFError. Writes
    are accepted and discarded.
    """

    def __init__(self, inner: Any, bytes_read: Dict[int, int]) -> None:
        if not bytes_read:
            raise ValueError("sequence file is empty")
        self._inner = inner
        self._bytes_read = dict(bytes_read)
        self._seq = 0
        self._last_seq = max(self._bytes_read)
        self._closed = False
        self.connection_info = ConnectionInfo()

    @classmethod
    def from_file(cls, recording_name: Union[str, os.PathLike]) -> "ReplayStream":
        """Open ``<name>.rec`` with its sequence file ``<name>_seq.rec``."""
        name = os.fspath(recording_name)
        bytes_read = load_sequence_file(f"{name}_seq.rec")
        if not bytes_read:
            raise ValueError("sequence file is empty")
        return cls(open(f"{name}.rec", "rb"), bytes_read)

    def read(self, size: int) -> bytes:
        seq = self._seq
        if seq > self._last_seq:
            raise EOFError("no more data to replay")
        self._seq += 1
        count = self._bytes_read.get(seq, 0)
        if count == 0:
            raise BlockingIOError(errno.EAGAIN, "nothing recorded at this sequence")
        if count > size:
            raise ValueError(f"read of {size} bytes cannot hold {count} recorded bytes")
        data = bytearray()
        while len(data) < count:
            chunk = self._inner.read(count - len(data))
            if not chunk:
                raise EOFError("recording ends before its sequence file")
            data += chunk
        return bytes(data)

    def write(self, data: bytes) -> int:
        return len(data)

    def flush(self) -> None:
        """Nothing is ever written; fails only once the stream is closed."""
        if self._closed:
            raise ValueError("flush on a closed stream")

    def close(self) -> None:
        self._closed = True
        close_inner = getattr(self._inner, "close", None)
        if close_inner is not None:
            close_inner()

    def __enter__(self) -> "ReplayStream":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ReplayStream(seq={self._seq}, last_seq={self._last_seq})"