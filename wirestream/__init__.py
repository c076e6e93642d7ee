"""Non-blocking stream layers (TCP, TLS, buffering, recording, replay) and a WebSocket client."""

__version__ = "0.1.0"