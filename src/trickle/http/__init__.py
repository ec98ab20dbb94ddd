"""HTTP value types for progressive JSON responses."""

from trickle.http.headers import CONTENT_TYPE, STREAMING_HEADERS, Headers, streaming_headers
from trickle.http.response import StreamingResponse

__all__ = [
    "CONTENT_TYPE",
    "STREAMING_HEADERS",
    "Headers",
    "StreamingResponse",
    "streaming_headers",
]
