"""Stream wrapper that records inbound and outbound traffic to files."""

from __future__ import annotations

import os
import struct
from contextlib import ExitStack
from typing import Any, Union

DEFAULT_RECORDING_NAME = "plain"

# One entry of a sequence file: read sequence number and byte count, little endian.
SEQUENCE_RECORD = struct.Struct("<QQ")


class Recorder:
    """Writes recorded traffic into three files named after ``recording_name``.

    ``<name>_inbound.rec`` holds the bytes read, ``<name>_inbound_seq.rec`` holds
    one sequence record per read and ``<name>_outbound.rec`` holds the bytes written.
    """

    def __init__(self, recording_name: Union[str, os.PathLike]) -> None:
        name = os.fspath(recording_name)
        with ExitStack() as stack:
            self._inbound = stack.enter_context(open(f"{name}_inbound.rec", "wb"))
            self._outbound = stack.enter_context(open(f"{name}_outbound.rec", "wb"))
            self._inbound_seq = stack.enter_context(open(f"{name}_inbound_seq.rec", "wb"))
            self._files = stack.pop_all()

    def record_inbound(self, data: bytes, seq: int) -> None:
        """Append ``data`` to the inbound recording under sequence number ``seq``."""
        self._inbound.write(data)
        self._inbound.flush()
        self._inbound_seq.write(SEQUENCE_RECORD.pack(seq, len(data)))
        self._inbound_seq.flush()

    def record_outbound(self, data: bytes) -> None:
        """Append ``data`` to the outbound recording."""
        self._outbound.write(data)
        self._outbound.flush()

    def close(self) -> None:
        self._files.close()

    def __enter__(self) -> "Recorder":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class RecordedStream:
    """Passes reads and writes through to ``inner`` and records what went by.

    Every read attempt takes the next sequence number, even one that fails,
    so gaps in the sequence file mark reads that produced nothing.
    """

    def __init__(self, inner: Any, recorder: Recorder) -> None:
        self._inner = inner
        self._recorder = recorder
        self._inbound_seq = 0

    @property
    def connection_info(self):
        return self._inner.connection_info

    def read(self, size: int) -> bytes:
        seq = self._inbound_seq
        self._inbound_seq += 1
        data = self._inner.read(size)
        self._recorder.record_inbound(data, seq)
        return data

    def write(self, data: bytes) -> int:
        written = self._inner.write(data)
        self._recorder.record_outbound(bytes(data[:written]))
        return written

    def flush(self) -> None:
        self._inner.flush()

    def close(self) -> None:
        self._recorder.close()
        close_inner = getattr(self._inner, "close", None)
        if close_inner is not None:
            close_inner()

    def __enter__(self) -> "RecordedStream":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"RecordedStream(seq={self._inbound_seq})"


def into_recorded_stream(stream: Any, recording_name: Union[str, os.PathLike] = DEFAULT_RECORDING_NAME) -> RecordedStream:
    """Wrap ``stream`` so that its traffic is recorded under ``recording_name``."""
    return RecordedStream(stream, Recorder(recording_name))