"""Connection details and non-blocking socket creation."""

from __future__ import annotations

import dataclasses
import errno
import socket
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union
from urllib.parse import urlsplit

SocketConfig = Callable[[socket.socket], None]
Address = Tuple[str, int]

_KNOWN_DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}

_CONNECT_PENDING = {errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EAGAIN}
_SO_INCOMING_CPU = getattr(socket, "SO_INCOMING_CPU", 49)


@dataclass(frozen=True)
class ConnectionInfo:
    """Host and port of a TCP endpoint plus optional socket settings."""

    host: str = ""
    port: int = 0
    net_iface: Optional[Address] = None
    net_iface_name: Optional[str] = None
    cpu: Optional[int] = None
    socket_config: Optional[SocketConfig] = None

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")

    @classmethod
    def from_url(cls, url: str) -> "ConnectionInfo":
        """Build connection info from a URL, using the scheme's default port if none is given."""
        parts = urlsplit(url)
        if not parts.scheme:
            raise ValueError("relative URL without a base")
        host = parts.hostname
        if not host:
            raise ValueError("host not present")
        try:
            port = parts.port
        except ValueError as exc:
            raise ValueError("invalid port number") from exc
        if port is None:
            port = _KNOWN_DEFAULT_PORTS.get(parts.scheme.lower())
        if port is None:
            raise ValueError("port not present")
        return cls(host, port)

    def with_cpu(self, cpu: int) -> "ConnectionInfo":
        """Return a copy that sets the receive CPU affinity."""
        return dataclasses.replace(self, cpu=cpu)

    def with_socket_config(self, socket_config: SocketConfig) -> "ConnectionInfo":
        """Return a copy that applies ``socket_config`` to the socket before connecting."""
        return dataclasses.replace(self, socket_config=socket_config)

    def socket_addrs(self) -> list:
        """Resolve the host and port into socket addresses."""
        infos = socket.getaddrinfo(self.host, self.port, type=socket.SOCK_STREAM)
        return [info[4] for info in infos]

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def _resolve(addr: Union[ConnectionInfo, Address]) -> tuple:
    if isinstance(addr, ConnectionInfo):
        host, port = addr.host, addr.port
    else:
        host, port = addr[0], addr[1]
    infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM, proto=socket.IPPROTO_TCP)
    if not infos:
        raise OSError("unable to resolve socket address")
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr


def bind_and_connect(
    addr: Union[ConnectionInfo, Address],
    net_iface: Optional[Address] = None,
    cpu: Optional[int] = None,
    socket_config: Optional[SocketConfig] = None,
) -> socket.socket:
    """Create a non-blocking TCP socket, optionally bind it, and start connecting.

    The connection may still be in progress when the socket is returned.
    """
    family, sockaddr = _resolve(addr)
    sock = socket.socket(family, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    try:
        sock.setblocking(False)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)

        if socket_config is not None:
            socket_config(sock)

        if net_iface is not None:
            sock.bind(net_iface)

        if cpu is not None and sys.platform.startswith("linux"):
            sock.setsockopt(socket.SOL_SOCKET, _SO_INCOMING_CPU, cpu)

        code = sock.connect_ex(sockaddr)
        if code != 0 and code not in _CONNECT_PENDING:
            raise OSError(code, f"unable to connect to {sockaddr}")
    except BaseException:
        sock.close()
        raise
    return sock