"""Test and client utilities for progressive JSON streams.

Provides the stream parser and reassembler, an incremental reader, and
an async ASGI test client::

    from trickle.testing import TestClient, reassemble
"""

from trickle.testing.client import StreamTestResult, TestClient
from trickle.testing.stream import (
    ProgressiveDocument,
    StreamChunk,
    StreamReader,
    parse_progressive_stream,
    reassemble,
    splice,
)

__all__ = [
    "ProgressiveDocument",
    "StreamChunk",
    "StreamReader",
    "StreamTestResult",
    "TestClient",
    "parse_progressive_stream",
    "reassemble",
    "splice",
]
