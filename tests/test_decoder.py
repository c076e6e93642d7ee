import struct

import pytest

from wirestream.decoder import Decoder
from wirestream.errors import ProtocolError
from wirestream.protocol import FrameKind, OpCode, WebsocketFrame


def _server_frame(fin, op, body):
    header = bytes([(0x80 if fin else 0) | op])
    n = len(body)
    if n <= 125:
        length = bytes([n])
    elif n <= 0xFFFF:
        length = bytes([126]) + struct.pack(">H", n)
    else:
        length = bytes([127]) + struct.pack(">Q", n)
    return header + length + body


class FakeStream:
    def __init__(self, inbound=b""):
        self.inbound = bytearray(inbound)
        self.reads = 0
        self.sizes = []

    def read(self, size):
        self.reads += 1
        self.sizes.append(size)
        if not self.inbound:
            raise BlockingIOError()
        chunk = bytes(self.inbound[:size])
        del self.inbound[:size]
        return chunk


class EofStream:
    def read(self, size):
        return b""


def test_decodes_text_frame():
    decoder = Decoder()
    decoder.feed(b"\x81\x03foo")
    assert decoder.decode_next() == WebsocketFrame(FrameKind.TEXT, b"foo", True)
    assert decoder.decode_next() is None


def test_decodes_non_final_binary_frame():
    decoder = Decoder()
    decoder.feed(_server_frame(False, OpCode.BINARY, b"\x00\x01"))
    frame = decoder.decode_next()
    assert frame.kind is FrameKind.BINARY
    assert frame.fin is False
    assert frame.payload == b"\x00\x01"


def test_partial_frame_waits_for_more_data():
    data = _server_frame(True, OpCode.TEXT, b"hello world")
    decoder = Decoder()
    decoder.feed(data[:5])
    assert decoder.decode_next() is None
    assert decoder.needs_more_data is True
    decoder.feed(data[5:])
    assert decoder.decode_next() == WebsocketFrame(FrameKind.TEXT, b"hello world", True)


def test_two_byte_extended_length():
    body = b"x" * 200
    decoder = Decoder()
    decoder.feed(_server_frame(True, OpCode.TEXT, body))
    assert decoder.decode_next().payload == body


def test_eight_byte_extended_length():
    body = bytes(range(256)) * 300
    decoder = Decoder()
    decoder.feed(_server_frame(True, OpCode.BINARY, body))
    assert decoder.decode_next().payload == body
    assert decoder.available == 0


def test_several_frames_in_one_feed():
    decoder = Decoder()
    decoder.feed(
        _server_frame(False, OpCode.TEXT, b"a")
        + _server_frame(True, OpCode.CONTINUATION, b"b")
        + _server_frame(True, OpCode.PING, b"p")
    )
    frames = [decoder.decode_next() for _ in range(3)]
    assert [f.kind for f in frames] == [FrameKind.TEXT, FrameKind.CONTINUATION, FrameKind.PING]
    assert [f.payload for f in frames] == [b"a", b"b", b"p"]
    assert decoder.decode_next() is None


def test_close_frame_decoded():
    decoder = Decoder()
    decoder.feed(_server_frame(True, OpCode.CLOSE, b"\x03\xe8bye"))
    frame = decoder.decode_next()
    assert frame.kind is FrameKind.CLOSE
    assert frame.payload == b"\x03\xe8bye"


def test_rsv_bits_rejected():
    decoder = Decoder()
    decoder.feed(b"\xc1\x00")
    with pytest.raises(ProtocolError, match="RSV"):
        decoder.decode_next()


def test_masked_server_frame_rejected():
    decoder = Decoder()
    decoder.feed(b"\x81\x83")
    with pytest.raises(ProtocolError, match="masking bit"):
        decoder.decode_next()


@pytest.mark.parametrize("op", [0x3, OpCode.PONG])
def test_unknown_op_code_rejected(op):
    decoder = Decoder()
    decoder.feed(_server_frame(True, op, b""))
    with pytest.raises(ProtocolError, match="unknown op_code"):
        decoder.decode_next()


def test_read_from_stream_then_decode():
    stream = FakeStream(_server_frame(True, OpCode.TEXT, b"foo"))
    decoder = Decoder()
    decoder.read(stream)
    assert decoder.decode_next() == WebsocketFrame(FrameKind.TEXT, b"foo", True)


def test_read_skipped_while_data_pending():
    stream = FakeStream(b"\x81\x01z")
    decoder = Decoder()
    decoder.feed(_server_frame(True, OpCode.TEXT, b"foo"))
    decoder.read(stream)
    assert stream.reads == 0
    assert decoder.decode_next().payload == b"foo"
    assert decoder.decode_next() is None
    decoder.read(stream)
    assert stream.reads == 1
    assert decoder.decode_next().payload == b"z"


def test_read_asks_for_at_most_capacity():
    stream = FakeStream(_server_frame(True, OpCode.TEXT, b"abcdef"))
    decoder = Decoder(capacity=2)
    for _ in range(4):
        decoder.read(stream)
        frame = decoder.decode_next()
    assert stream.sizes == [2, 2, 2, 2]
    assert frame.payload == b"abcdef"


def test_read_that_would_block_yields_nothing():
    decoder = Decoder()
    decoder.read(FakeStream())
    assert decoder.decode_next() is None


def test_read_at_end_of_stream_raises():
    decoder = Decoder()
    with pytest.raises(EOFError):
        decoder.read(EofStream())


def test_invalid_capacity():
    with pytest.raises(ValueError):
        Decoder(capacity=0)