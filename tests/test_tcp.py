import select
import socket

import pytest

from wirestream.connection import ConnectionInfo
from wirestream.tcp import TcpStream


@pytest.fixture
def listener():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(4)
    server.settimeout(5)
    yield server
    server.close()


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


def _wait_readable(stream):
    readable, _, _ = select.select([stream], [], [], 5)
    return readable


def _wait_writable(stream):
    _, writable, _ = select.select([], [stream], [], 5)
    return writable


def test_write_reaches_peer(pair):
    a, b = pair
    stream = TcpStream(a, ConnectionInfo("example.com", 80))
    assert stream.write(b"hello") == 5
    assert b.recv(16) == b"hello"


def test_read_from_peer(pair):
    a, b = pair
    stream = TcpStream(a, ConnectionInfo("example.com", 80))
    b.sendall(b"world")
    assert stream.read(16) == b"world"


def test_connected_is_always_true(pair):
    a, _ = pair
    stream = TcpStream(a, ConnectionInfo("example.com", 80))
    stream.make_writable()
    stream.make_readable()
    assert stream.connected() is True


def test_fileno_matches_socket(pair):
    a, _ = pair
    stream = TcpStream(a, ConnectionInfo("example.com", 80))
    assert stream.fileno() == a.fileno()


def test_close_closes_socket(pair):
    a, _ = pair
    stream = TcpStream(a, ConnectionInfo("example.com", 80))
    stream.close()
    assert a.fileno() == -1


def test_context_manager_closes(pair):
    a, _ = pair
    with TcpStream(a, ConnectionInfo("example.com", 80)) as stream:
        assert stream.fileno() == a.fileno()
    assert a.fileno() == -1


def test_connect_round_trip(listener):
    port = listener.getsockname()[1]
    with TcpStream.connect(ConnectionInfo("127.0.0.1", port)) as stream:
        conn, _ = listener.accept()
        with conn:
            conn.sendall(b"ping")
            assert _wait_readable(stream)
            assert stream.read(16) == b"ping"
            assert _wait_writable(stream)
            assert stream.write(b"pong") == 4
            conn.settimeout(5)
            assert conn.recv(16) == b"pong"


def test_connect_read_without_data_would_block(listener):
    port = listener.getsockname()[1]
    with TcpStream.connect(ConnectionInfo("127.0.0.1", port)) as stream:
        conn, _ = listener.accept()
        with conn:
            with pytest.raises(BlockingIOError):
                stream.read(16)


def test_connect_from_tuple_keeps_info(listener):
    port = listener.getsockname()[1]
    with TcpStream.connect(("127.0.0.1", port)) as stream:
        conn, _ = listener.accept()
        conn.close()
        assert stream.connection_info == ConnectionInfo("127.0.0.1", port)


def test_connect_with_resolved_address_keeps_host(listener):
    port = listener.getsockname()[1]
    info = ConnectionInfo("service.example.com", port)
    with TcpStream.connect(info, ("127.0.0.1", port)) as stream:
        conn, peer = listener.accept()
        conn.close()
        assert stream.connection_info.host == "service.example.com"
        assert peer == stream.sock.getsockname()