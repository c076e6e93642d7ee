"""Encoding of client websocket frames."""

from __future__ import annotations

import errno
import struct
from typing import Any, Optional

from .protocol import FIN_MASK, MASK_MASK

# The masking key is all zeros, so the masked payload equals the plain payload.
_MASKING_KEY = b"\x00\x00\x00\x00"
_U16 = struct.Struct(">H")
_U64 = struct.Struct(">Q")


def encode_frame(fin: bool, op_code: int, body: Optional[bytes] = None) -> bytes:
    """Return the wire bytes of a masked client frame."""
    op_code = int(op_code)
    if not 0 <= op_code <= 0x0F:
        raise ValueError(f"invalid op code: {op_code}")
    header = (FIN_MASK if fin else 0) | op_code
    frame = bytearray((header,))
    if body is None:
        frame.append(MASK_MASK)
        frame += _MASKING_KEY
        return bytes(frame)
    body = bytes(body)
    length = len(body)
    if length <= 125:
        frame.append(MASK_MASK | length)
    elif length <= 0xFFFF:
        frame.append(MASK_MASK | 126)
        frame += _U16.pack(length)
    else:
        frame.append(MASK_MASK | 127)
        frame += _U64.pack(length)
    frame += _MASKING_KEY
    frame += body
    return bytes(frame)


def _write_all(stream: Any, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = stream.write(view)
        if written is None:
            written = len(view)
        if written == 0:
            raise OSError(errno.EIO, "failed to write whole buffer")
        view = view[written:]


def send(stream: Any, fin: bool, op_code: int, body: Optional[bytes] = None) -> None:
    """Write one frame to ``stream`` in full and flush it."""
    _write_all(stream, encode_frame(fin, op_code, body))
    stream.flush()