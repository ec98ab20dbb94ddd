"""Sinks that deliver a progressive JSON stream: ASGI and raw text streams."""

from trickle.server.app import ProgressiveApp
from trickle.server.sender import send_streaming_response, write_stream

__all__ = ["ProgressiveApp", "send_streaming_response", "write_stream"]
