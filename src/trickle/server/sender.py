"""Chunk sinks — ASGI messages and raw text streams.

Both sinks write each chunk as soon as it is produced and never merge
or reframe chunks. On a top-level failure they emit the
``/* STREAM_ERROR */`` marker so a client can tell a truncated stream
from a finished one.
"""

import logging
from collections.abc import AsyncIterator, Iterable
from typing import Any, TextIO

import anyio

from trickle._internal.asgi import Receive, Send, encode_headers
from trickle.errors import StreamError
from trickle.http.response import StreamingResponse
from trickle.templating.chunks import format_stream_error

logger = logging.getLogger("trickle.server")


def _encode_chunk(chunk: str | bytes) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else chunk


async def _close_chunks(chunks: Any) -> None:
    """Close an abandoned generator so no further producer can run."""
    aclose = getattr(chunks, "aclose", None)
    if aclose is not None:
        with anyio.CancelScope(shield=True):
            await aclose()
        return
    close = getattr(chunks, "close", None)
    if close is not None:
        close()


async def send_streaming_response(
    response: StreamingResponse,
    send: Send,
    receive: Receive | None = None,
) -> None:
    """Send a streaming response as a sequence of ASGI body messages.

    Sends headers immediately, then each non-empty chunk with
    ``more_body=True``, then an empty closing body.

    With *receive*, a watcher waits for ``http.disconnect`` and cancels
    generation; the chunk generator is closed and nothing more is sent.
    A mid-stream exception is logged and replaced by the error marker.
    """
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
        (b"transfer-encoding", b"chunked"),
    ]
    raw_headers.extend(encode_headers(response.headers))

    # No content-length; chunked transfer encoding signals body boundaries
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )

    async def _send_chunk(chunk: str | bytes) -> None:
        await send(
            {
                "type": "http.response.body",
                "body": _encode_chunk(chunk),
                "more_body": True,
            }
        )

    disconnected = False

    async def pump() -> None:
        try:
            if isinstance(response.chunks, AsyncIterator):
                async for chunk in response.chunks:
                    if chunk:
                        await _send_chunk(chunk)
                    if disconnected:
                        return
            else:
                for chunk in response.chunks:
                    if chunk:
                        await _send_chunk(chunk)
                    if disconnected:
                        return
        except Exception:
            logger.exception("Progressive stream failed mid-response")
            await _send_chunk(format_stream_error())

    if receive is None:
        await pump()
    else:
        async with anyio.create_task_group() as tg:

            async def watch_disconnect() -> None:
                nonlocal disconnected
                while True:
                    message = await receive()
                    if message.get("type") == "http.disconnect":
                        disconnected = True
                        tg.cancel_scope.cancel()
                        return

            tg.start_soon(watch_disconnect)
            try:
                await pump()
            finally:
                tg.cancel_scope.cancel()

    if disconnected:
        logger.debug("Client disconnected; progressive stream abandoned")
        await _close_chunks(response.chunks)
        return

    await send(
        {
            "type": "http.response.body",
            "body": b"",
            "more_body": False,
        }
    )


def write_stream(chunks: Iterable[str], out: TextIO) -> None:
    """Write each chunk to *out* and flush immediately after it.

    Raises:
        StreamError: the chunk source failed. The error marker is
            written (best effort) before raising.
    """
    try:
        for chunk in chunks:
            out.write(chunk)
            out.flush()
    except Exception as exc:
        logger.exception("Progressive stream failed while writing")
        try:
            out.write(format_stream_error())
            out.flush()
        except OSError:
            logger.warning("Could not write the stream error marker")
        msg = f"Failed to send stream: {exc}"
        raise StreamError(msg) from exc
