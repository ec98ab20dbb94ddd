"""ASGI application serving one progressive JSON stream per request.

Wraps a factory that builds a configured ``ProgressiveJsonStreamer``
for each request::

    def build(scope):
        return (
            ProgressiveJsonStreamer()
            .data({"user": "{$}", "feed": "{$}"})
            .add_placeholder("user", load_user)
            .add_placeholder("feed", load_feed)
        )

    app = ProgressiveApp(build)

Any ASGI server can host ``app``. The factory may be ``async def``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from trickle._internal.asgi import Receive, Scope, Send
from trickle._internal.invoke import invoke
from trickle.server.sender import send_streaming_response

logger = logging.getLogger("trickle.server")

_ALLOWED_METHODS = ("GET", "HEAD")


async def _send_plain(send: Send, status: int, body: str, headers: tuple[tuple[bytes, bytes], ...] = ()) -> None:
    payload = body.encode("utf-8")
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [
                (b"content-type", b"text/plain; charset=utf-8"),
                (b"content-length", str(len(payload)).encode("latin-1")),
                *headers,
            ],
        }
    )
    await send({"type": "http.response.body", "body": payload})


class ProgressiveApp:
    """ASGI 3 callable that streams the streamer built by *factory*.

    - ``lifespan`` startup/shutdown messages are acknowledged.
    - Methods other than GET and HEAD get ``405`` with an ``Allow`` header.
    - A factory that raises gets a ``500`` and a logged traceback.
    - A client disconnect stops generation; later producers never run.
    """

    __slots__ = ("factory", "use_async")

    def __init__(self, factory: Callable[[Scope], Any], *, use_async: bool = True) -> None:
        self.factory = factory
        self.use_async = use_async

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            msg = f"Unsupported ASGI scope type: {scope['type']!r}"
            raise RuntimeError(msg)

        method = scope.get("method", "GET")
        if method not in _ALLOWED_METHODS:
            allow = ", ".join(_ALLOWED_METHODS)
            await _send_plain(
                send, 405, "Method Not Allowed", ((b"allow", allow.encode("latin-1")),),
            )
            return

        try:
            streamer = await invoke(lambda: self.factory(scope), offload=False)
        except Exception:
            logger.exception("Streamer factory failed for %s", scope.get("path", ""))
            await _send_plain(send, 500, "Internal Server Error")
            return

        response = streamer.as_response(use_async=self.use_async)
        if method == "HEAD":
            # Headers only; the producers are never invoked
            await send_streaming_response(replace(response, chunks=iter(())), send)
            return
        await send_streaming_response(response, send, receive)

    @staticmethod
    async def _handle_lifespan(receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
