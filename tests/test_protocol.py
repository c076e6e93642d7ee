import dataclasses

import pytest

from wirestream.protocol import OP_CODE_MASK, FrameKind, OpCode, WebsocketFrame


@pytest.mark.parametrize(
    "value, expected",
    [
        (0x0, OpCode.CONTINUATION),
        (0x1, OpCode.TEXT),
        (0x2, OpCode.BINARY),
        (0x8, OpCode.CLOSE),
        (0x9, OpCode.PING),
        (0xA, OpCode.PONG),
    ],
)
def test_op_code_from_wire_value(value, expected):
    assert OpCode(value) is expected


def test_op_code_rejects_unknown_value():
    with pytest.raises(ValueError):
        OpCode(0x3)


@pytest.mark.parametrize("op", list(OpCode))
def test_frame_kind_round_trips_through_op_code(op):
    kind = FrameKind(op)
    assert kind.op_code is op
    assert kind.op_code & ~OP_CODE_MASK == 0


def test_frame_kind_rejects_unknown_op_code():
    with pytest.raises(ValueError):
        FrameKind(0x3)


@pytest.mark.parametrize(
    "op, expected",
    [
        (OpCode.CONTINUATION, False),
        (OpCode.TEXT, False),
        (OpCode.BINARY, False),
        (OpCode.CLOSE, True),
        (OpCode.PING, True),
        (OpCode.PONG, True),
    ],
)
def test_control_kinds(op, expected):
    assert FrameKind(op).is_control is expected


def test_frame_defaults_to_final():
    frame = WebsocketFrame(FrameKind.TEXT, b"foo")
    assert frame.fin is True
    assert frame.payload == b"foo"
    assert frame.is_control is False


def test_frames_compare_by_value():
    assert WebsocketFrame(FrameKind.BINARY, b"x", False) == WebsocketFrame(FrameKind.BINARY, b"x", False)
    assert WebsocketFrame(FrameKind.PING, b"").is_control is True


def test_frame_is_immutable():
    frame = WebsocketFrame(FrameKind.TEXT, b"foo")
    with pytest.raises(dataclasses.FrozenInstanceError):
        frame.payload = b"bar"
    assert frame.payload == b"foo"