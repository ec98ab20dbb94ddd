"""Progressive JSON streaming — skeleton first, deferred values after.

Sends a JSON skeleton immediately, with every deferred field replaced by
a ``"$path"`` reference, then streams one framed chunk per registered
producer as each value resolves.

Pipeline::

    ProgressiveJsonStreamer()
        .data({"status": "ok", "user": "{$}", "feed": "{$}"})
        .add_placeholder("user", load_user)     # invoked second
        .add_placeholder("feed", load_feed)     # invoked third

    1. Walk the template, replacing markers with "$path" references
    2. Yield the pretty-printed skeleton (instant first paint)
    3. For each producer, in registration order:
       a. Invoke it (only now — nothing is prefetched)
       b. Yield "\\n/* $path */\\n" + JSON value, or an error payload
          under the same tag if the producer failed

Producers run strictly one at a time. A producer that blocks holds back
every chunk after it; that is what keeps chunk order equal to
registration order.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import sys
from collections.abc import AsyncIterator, Callable, Iterator, Mapping
from typing import Any, TextIO

from trickle._internal.invoke import invoke
from trickle.config import StreamConfig
from trickle.errors import ConfigurationError, EncodingError
from trickle.http.headers import streaming_headers
from trickle.http.response import StreamingResponse
from trickle.templating.chunks import ChunkPayload, Failure, Resolved, encode_json, format_chunk
from trickle.templating.walker import collect_references, walk_structure

logger = logging.getLogger("trickle.stream")

Producer = Callable[[], Any]


def _check_entry(path: object, producer: object) -> None:
    if not isinstance(path, str) or not path:
        msg = f"Placeholder path must be a non-empty string, got {path!r}"
        raise ConfigurationError(msg)
    if not callable(producer):
        msg = f"Resolver for key '{path}' must be callable"
        raise ConfigurationError(msg)


class ProgressiveJsonStreamer:
    """Stream a JSON document in two phases: skeleton, then resolved values.

    Every configuration method returns ``self`` so calls chain::

        streamer = (
            ProgressiveJsonStreamer()
            .data({"message": "{$}", "status": "200", "items": "{$}"})
            .add_placeholder("message", lambda: "hi")
            .add_placeholder("items", fetch_items)
        )

        for chunk in streamer.stream():
            out.write(chunk)

    Producers are keyed by dot-notation path (``"user.profile.name"``;
    sequence indices are plain segments, ``"items.0"``). A path with no
    placeholder in the template still streams its chunk, and a
    placeholder with no producer stays a ``"$path"`` reference. Neither
    is an error.

    The instance can be streamed any number of times. Each pass re-walks
    the template and invokes every producer again; nothing is cached.
    """

    __slots__ = ("_config", "_placeholders", "_structure")

    def __init__(self, structure: Any = None, *, config: StreamConfig | None = None) -> None:
        self._config = config or StreamConfig()
        self._structure: Any = {} if structure is None else copy.deepcopy(structure)
        self._placeholders: dict[str, Producer] = {}

    def __repr__(self) -> str:
        return f"<ProgressiveJsonStreamer placeholders={list(self._placeholders)!r}>"

    # -- Configuration --

    def data(self, structure: Any) -> ProgressiveJsonStreamer:
        """Set the template. It is copied, so later caller edits don't leak in."""
        self._structure = copy.deepcopy(structure)
        return self

    def add_placeholder(self, path: str, producer: Producer) -> ProgressiveJsonStreamer:
        """Register the producer for *path*, replacing any earlier one.

        Re-registering a path keeps its original position in the stream.

        Raises:
            ConfigurationError: *path* is not a non-empty string or
                *producer* is not callable.
        """
        _check_entry(path, producer)
        self._placeholders[path] = producer
        return self

    def add_placeholders(self, producers: Mapping[str, Producer]) -> ProgressiveJsonStreamer:
        """Register several producers, in the mapping's iteration order.

        All entries are checked before any is registered.
        """
        for path, producer in producers.items():
            _check_entry(path, producer)
        self._placeholders.update(producers)
        return self

    def set_placeholder_marker(self, marker: Any) -> ProgressiveJsonStreamer:
        """Use *marker* (any JSON scalar) as the "defer this leaf" value."""
        self._config = dataclasses.replace(self._config, marker=marker)
        return self

    def set_max_depth(self, depth: int) -> ProgressiveJsonStreamer:
        """Limit how many container levels the template may nest.

        Raises:
            ConfigurationError: *depth* is less than 1.
        """
        self._config = dataclasses.replace(self._config, max_depth=depth)
        return self

    # -- Queries --

    @property
    def config(self) -> StreamConfig:
        return self._config

    @property
    def structure(self) -> Any:
        """A copy of the raw template, markers and all."""
        return copy.deepcopy(self._structure)

    def placeholder_keys(self) -> list[str]:
        """Registered paths, in registration (= emission) order."""
        return list(self._placeholders)

    def has_placeholder(self, path: str) -> bool:
        return path in self._placeholders

    def remove_placeholder(self, path: str) -> ProgressiveJsonStreamer:
        """Unregister *path*. Unknown paths are ignored."""
        self._placeholders.pop(path, None)
        return self

    def clear_placeholders(self) -> ProgressiveJsonStreamer:
        self._placeholders.clear()
        return self

    def skeleton(self) -> Any:
        """The template with markers replaced by ``"$path"`` references.

        Raises:
            DepthExceeded: the template nests past ``config.max_depth``.
        """
        config = self._config
        return walk_structure(self._structure, config.marker, max_depth=config.max_depth)

    def headers(self) -> dict[str, str]:
        """HTTP headers any sink should send with this stream."""
        return streaming_headers()

    # -- Generation --

    def stream(self) -> Iterator[str]:
        """Yield the skeleton, then one framed chunk per producer.

        Lazy: producer *n* is invoked only when chunk *n* is requested.
        Stopping iteration early means later producers never run.

        Raises:
            DepthExceeded: on the first ``next()``, before any chunk.
            EncodingError: the skeleton is not representable as JSON,
                or a resolved value isn't and ``strict_encoding`` is on.
        """
        config = self._config
        placeholders = dict(self._placeholders)
        logger.debug("Progressive stream: %d placeholders registered", len(placeholders))

        yield self._render_skeleton(config, placeholders)

        for path, producer in placeholders.items():
            try:
                value = producer()
            except Exception as exc:
                logger.exception("Progressive stream: producer for %r failed", path)
                payload: ChunkPayload = Failure.from_exception(path, exc)
            else:
                payload = self._settle(path, value)
            yield self._frame(payload, config)

    async def astream(self) -> AsyncIterator[str]:
        """Async twin of :meth:`stream`, for ASGI sinks.

        Same chunks, same order, still one producer at a time.
        ``async def`` producers are awaited; plain ones run in a worker
        thread so they cannot block the event loop.
        """
        config = self._config
        placeholders = dict(self._placeholders)
        logger.debug("Progressive stream: %d placeholders registered", len(placeholders))

        yield self._render_skeleton(config, placeholders)

        for path, producer in placeholders.items():
            try:
                value = await invoke(producer)
            except Exception as exc:
                logger.exception("Progressive stream: producer for %r failed", path)
                payload: ChunkPayload = Failure.from_exception(path, exc)
            else:
                payload = self._settle(path, value)
            yield self._frame(payload, config)

    # -- Sinks --

    def as_response(self, *, use_async: bool = True) -> StreamingResponse:
        """Wrap the stream in a ``StreamingResponse`` with streaming headers.

        No producer runs until a sender starts consuming the response.
        """
        chunks = self.astream() if use_async else self.stream()
        return StreamingResponse(chunks)

    def send(self, out: TextIO | None = None, *, with_headers: bool = False) -> None:
        """Write the whole stream to *out* (default stdout), flushing per chunk.

        With *with_headers*, a CGI-style header block is written first.

        Raises:
            StreamError: generation failed; the best-effort error marker
                has already been written.
        """
        from trickle.server.sender import write_stream

        target = out if out is not None else sys.stdout
        if with_headers:
            for name, value in self.headers().items():
                target.write(f"{name}: {value}\r\n")
            target.write("\r\n")
            target.flush()
        write_stream(self.stream(), target)

    # -- Internals --

    def _render_skeleton(self, config: StreamConfig, placeholders: Mapping[str, Producer]) -> str:
        skeleton = walk_structure(self._structure, config.marker, max_depth=config.max_depth)
        if logger.isEnabledFor(logging.DEBUG):
            unresolved = [p for p in collect_references(skeleton) if p not in placeholders]
            if unresolved:
                logger.debug("Progressive stream: no producer for %s", ", ".join(unresolved))
        return encode_json(skeleton, indent=config.indent)

    @staticmethod
    def _settle(path: str, value: Any) -> ChunkPayload:
        # A producer may report failure by returning the exception
        if isinstance(value, Exception):
            logger.warning(
                "Progressive stream: producer for %r returned %s: %s",
                path, type(value).__name__, value,
            )
            return Failure.from_exception(path, value)
        logger.debug("Progressive stream: resolved %r", path)
        return Resolved(path, value)

    @staticmethod
    def _frame(payload: ChunkPayload, config: StreamConfig) -> str:
        try:
            return format_chunk(payload, indent=config.indent)
        except EncodingError as exc:
            if config.strict_encoding:
                raise
            logger.warning(
                "Progressive stream: value for %r is not JSON-encodable: %s", payload.path, exc,
            )
            return format_chunk(Failure.from_exception(payload.path, exc), indent=config.indent)
