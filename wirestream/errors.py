"""Errors raised by the websocket client."""

from __future__ import annotations


class WebsocketError(Exception):
    """Base class of websocket errors."""


class ProtocolError(WebsocketError):
    """The peer broke the websocket protocol."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"websocket protocol error: {reason}")
        self.reason = reason


class ReceivedCloseFrame(WebsocketError):
    """The peer sent a close frame."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"the peer has sent the close frame: status code {status_code}, body: {body}")
        self.status_code = status_code
        self.body = body


class WebsocketClosed(WebsocketError):
    """The websocket is closed and can be dropped."""

    def __init__(self) -> None:
        super().__init__("the websocket is closed and can be dropped")