import pytest

from wirestream.datasource import DataSource, DataSourceWebsocket
from wirestream.errors import ProtocolError
from wirestream.protocol import FrameKind, WebsocketFrame


class CustomDataSource(DataSource):
    def next_frame(self):
        return WebsocketFrame(FrameKind.TEXT, b"foo", True)


def test_should_use_custom_data_source():
    ws = DataSourceWebsocket(CustomDataSource())
    frame = ws.receive_next()
    assert frame.kind is FrameKind.TEXT
    assert frame.payload == b"foo"


def test_sequence_of_frames_then_none():
    class ListSource(DataSource):
        def __init__(self, frames):
            self.frames = list(frames)

        def next_frame(self):
            return self.frames.pop(0) if self.frames else None

    frames = [
        WebsocketFrame(FrameKind.TEXT, b"a", False),
        WebsocketFrame(FrameKind.CONTINUATION, b"b", True),
    ]
    ws = DataSourceWebsocket(ListSource(frames))
    assert ws.receive_next() == frames[0]
    assert ws.receive_next() == frames[1]
    assert ws.receive_next() is None
    assert ws.closed is False
    assert ws.handshake_complete is True


def test_source_errors_propagate():
    class FailingSource(DataSource):
        def next_frame(self):
            raise ProtocolError("unknown op_code")

    ws = DataSourceWebsocket(FailingSource())
    with pytest.raises(ProtocolError):
        ws.receive_next()


def test_data_source_is_abstract():
    with pytest.raises(TypeError):
        DataSource()