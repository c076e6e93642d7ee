"""Websocket wire constants and the frame type."""

from __future__ import annotations

import enum
from dataclasses import dataclass

FIN_MASK = 0b1000_0000
RSV1_MASK = 0b0100_0000
RSV2_MASK = 0b0010_0000
RSV3_MASK = 0b0001_0000
OP_CODE_MASK = 0b0000_1111
MASK_MASK = 0b1000_0000
PAYLOAD_LENGTH_MASK = 0b0111_1111


class OpCode(enum.IntEnum):
    """Frame op codes."""

    CONTINUATION = 0x0
    TEXT = 0x1
    BINARY = 0x2
    CLOSE = 0x8
    PING = 0x9
    PONG = 0xA


class FrameKind(enum.Enum):
    """Kinds of websocket frame, valued by their op code."""

    CONTINUATION = OpCode.CONTINUATION.value
    TEXT = OpCode.TEXT.value
    BINARY = OpCode.BINARY.value
    CLOSE = OpCode.CLOSE.value
    PING = OpCode.PING.value
    PONG = OpCode.PONG.value

    @property
    def op_code(self) -> OpCode:
        return OpCode(self.value)

    @property
    def is_control(self) -> bool:
        return self in (FrameKind.CLOSE, FrameKind.PING, FrameKind.PONG)


@dataclass(frozen=True)
class WebsocketFrame:
    """A decoded frame: its kind, payload and whether it ends a message.

    Ping and close frames are answered by the websocket itself and not
    handed to the user.
    """

    kind: FrameKind
    payload: bytes
    fin: bool = True

    @property
    def is_control(self) -> bool:
        return self.kind.is_control