"""TCP stream that carries its connection info."""

from __future__ import annotations

import socket
from typing import Optional, Tuple, Union

from .connection import ConnectionInfo, bind_and_connect


class TcpStream:
    """A non-blocking TCP socket together with the details it was opened with."""

    def __init__(self, sock: socket.socket, connection_info: ConnectionInfo) -> None:
        self.sock = sock
        self.connection_info = connection_info
        self.readable = False
        self.writable = False

    @classmethod
    def connect(
        cls,
        connection_info: Union[ConnectionInfo, Tuple[str, int]],
        addr: Optional[Tuple[str, int]] = None,
    ) -> "TcpStream":
        """Open a connection, resolving the host unless ``addr`` is already given."""
        if not isinstance(connection_info, ConnectionInfo):
            host, port = connection_info
            connection_info = ConnectionInfo(host, port)
        target = addr if addr is not None else connection_info
        sock = bind_and_connect(
            target,
            connection_info.net_iface,
            connection_info.cpu,
            connection_info.socket_config,
        )
        return cls(sock, connection_info)

    def read(self, size: int) -> bytes:
        """Receive up to ``size`` bytes; raises BlockingIOError if none are ready."""
        return self.sock.recv(size)

    def write(self, data: bytes) -> int:
        """Send as much of ``data`` as the socket takes and return the count."""
        return self.sock.send(data)

    def flush(self) -> None:
        """Nothing is buffered here; fails only if the socket is already closed."""
        if self.sock.fileno() < 0:
            raise OSError("flush on a closed socket")

    def connected(self) -> bool:
        return True

    def make_writable(self) -> None:
        """Mark the socket as ready for writing."""
        self.writable = True

    def make_readable(self) -> None:
        """Mark the socket as ready for reading."""
        self.readable = True

    def fileno(self) -> int:
        return self.sock.fileno()

    def close(self) -> None:
        self.sock.close()

    def __enter__(self) -> "TcpStream":
        return self

    def __exit__(self, *args) -> None:
        self.close()