"""Read-only stream over a file, delivered in bounded chunks."""

from __future__ import annotations

import os
from typing import Union

DEFAULT_CHUNK_SIZE = 256


class FileStream:
    """Reads a file at most ``chunk_size`` bytes at a time; writes are discarded."""

    def __init__(self, path: Union[str, os.PathLike], chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self._file = open(path, "rb")

    def read(self, size: int) -> bytes:
        """Return up to ``min(size, chunk_size)`` bytes; raises EOFError when exhausted."""
        data = self._file.read(min(size, self.chunk_size))
        if not data:
            raise EOFError("eof")
        return data

    def write(self, data: bytes) -> int:
        return len(data)

    def flush(self) -> None:
        """Nothing is ever written; fails only once the stream is closed."""
        if self._file.closed:
            raise ValueError("flush on a closed stream")

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "FileStream":
        return self

    def __exit__(self, *args) -> None:
        self.close()