"""Websocket that takes its frames from a user supplied source."""

from __future__ import annotations

import abc
from typing import Optional

from .protocol import WebsocketFrame


class DataSource(abc.ABC):
    """Supplies frames in place of a network connection."""

    @abc.abstractmethod
    def next_frame(self) -> Optional[WebsocketFrame]:
        """Return the next frame, or None when none is ready."""


class DataSourceWebsocket:
    """Websocket whose frames come from a :class:`DataSource`."""

    def __init__(self, data_source: DataSource) -> None:
        self.data_source = data_source
        self.closed = False

    @property
    def handshake_complete(self) -> bool:
        return True

    def receive_next(self) -> Optional[WebsocketFrame]:
        """Return the next frame the source supplies."""
        return self.data_source.next_frame()