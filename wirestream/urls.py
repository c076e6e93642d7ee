"""Splitting websocket URLs into connection details."""

from __future__ import annotations

from typing import Tuple
from urllib.parse import urlsplit

from .connection import ConnectionInfo


def parse_url(url: str) -> Tuple[ConnectionInfo, str, bool]:
    """Return the connection info, request endpoint and whether TLS is used.

    Only ``ws`` and ``wss`` schemes are accepted; anything else raises ValueError.
    """
    connection_info = ConnectionInfo.from_url(url)
    parts = urlsplit(url)
    path = parts.path or "/"
    endpoint = f"{path}?{parts.query}" if parts.query else path
    if parts.scheme == "ws":
        secure = False
    elif parts.scheme == "wss":
        secure = True
    else:
        raise ValueError(f"unrecognised url scheme: {parts.scheme}")
    return connection_info, endpoint, secure