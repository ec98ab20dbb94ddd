"""Streamed HTTP response with chainable .with_*() transformation API.

Each transformation returns a new StreamingResponse. Immutable by
convention, built incrementally by design.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator, Mapping
from dataclasses import dataclass, replace

from trickle.http.headers import CONTENT_TYPE, STREAMING_HEADERS


@dataclass(frozen=True, slots=True)
class StreamingResponse:
    """An HTTP response that sends progressive JSON chunks as they resolve.

    Headers go out immediately, then each chunk is sent as its own body
    message. The chunk iterator is not touched until a sender consumes
    it, so building a response never invokes a producer.

    Usage::

        response = streamer.as_response().with_header("X-Request-Id", rid)
    """

    chunks: Iterator[str] | AsyncIterator[str]
    status: int = 200
    content_type: str = CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = STREAMING_HEADERS

    def with_status(self, status: int) -> StreamingResponse:
        """Return a new StreamingResponse with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> StreamingResponse:
        """Return a new StreamingResponse with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> StreamingResponse:
        """Return a new StreamingResponse with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> StreamingResponse:
        """Return a new StreamingResponse with a different content type."""
        return replace(self, content_type=content_type)

    def header(self, name: str, default: str | None = None) -> str | None:
        """First value of header *name* (case-insensitive), or *default*."""
        if name.lower() == "content-type":
            return self.content_type
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return default

    @property
    def is_async(self) -> bool:
        """Whether the chunks must be consumed with ``async for``."""
        return isinstance(self.chunks, AsyncIterator)
