"""Tests for trickle.server.app — ProgressiveApp over ASGI."""

import pytest

from trickle.server.app import ProgressiveApp
from trickle.templating.streaming import ProgressiveJsonStreamer
from trickle.testing import TestClient

M = "{$}"


def _build(calls: list[str] | None = None):
    log = calls if calls is not None else []

    def produce(name: str, value: object):
        def _produce() -> object:
            log.append(name)
            return value

        return _produce

    def factory(scope) -> ProgressiveJsonStreamer:
        return (
            ProgressiveJsonStreamer()
            .data({"message": M, "status": "200", "items": M})
            .add_placeholder("message", produce("message", "hi"))
            .add_placeholder("items", produce("items", [1, 2, 3]))
        )

    return factory


class TestGet:
    async def test_streams_document(self) -> None:
        async with TestClient(ProgressiveApp(_build())) as client:
            result = await client.get("/")

        assert result.status == 200
        assert result.completed
        assert result.document.resolved() == {"message": "hi", "status": "200", "items": [1, 2, 3]}

    async def test_one_body_message_per_chunk(self) -> None:
        async with TestClient(ProgressiveApp(_build())) as client:
            result = await client.get("/")

        assert len(result.body_chunks) == 3
        assert result.body_chunks[1] == '\n/* $message */\n"hi"'

    async def test_streaming_headers(self) -> None:
        async with TestClient(ProgressiveApp(_build())) as client:
            result = await client.get("/")

        assert result.headers["content-type"] == "application/x-json-stream"
        assert result.headers["cache-control"] == "no-cache, no-store, must-revalidate"
        assert result.headers["pragma"] == "no-cache"
        assert result.headers["expires"] == "0"
        assert result.headers["x-accel-buffering"] == "no"
        assert result.headers["x-content-type-options"] == "nosniff"
        assert result.headers["transfer-encoding"] == "chunked"

    async def test_sync_generation_path(self) -> None:
        async with TestClient(ProgressiveApp(_build(), use_async=False)) as client:
            sync_result = await client.get("/")
        async with TestClient(ProgressiveApp(_build())) as client:
            async_result = await client.get("/")

        assert sync_result.body == async_result.body

    async def test_async_factory(self) -> None:
        async def factory(scope) -> ProgressiveJsonStreamer:
            return ProgressiveJsonStreamer().data({"a": M}).add_placeholder("a", lambda: 1)

        async with TestClient(ProgressiveApp(factory)) as client:
            result = await client.get("/")

        assert result.document.resolved() == {"a": 1}

    async def test_factory_sees_request_scope(self) -> None:
        def factory(scope) -> ProgressiveJsonStreamer:
            return ProgressiveJsonStreamer().data(
                {"path": scope["path"], "query": scope["query_string"].decode()}
            )

        async with TestClient(ProgressiveApp(factory)) as client:
            result = await client.get("/users?id=7")

        assert result.document.skeleton == {"path": "/users", "query": "id=7"}

    async def test_producer_failure_is_isolated(self) -> None:
        def fail() -> None:
            raise RuntimeError("db down")

        def factory(scope) -> ProgressiveJsonStreamer:
            return (
                ProgressiveJsonStreamer()
                .data({"a": M, "b": M})
                .add_placeholder("a", fail)
                .add_placeholder("b", lambda: "ok")
            )

        async with TestClient(ProgressiveApp(factory)) as client:
            result = await client.get("/")

        assert result.status == 200
        assert result.completed
        assert [c.path for c in result.document.errors] == ["a"]
        assert result.document.get("b") == "ok"

    async def test_generation_failure_sends_stream_error(self) -> None:
        def factory(scope) -> ProgressiveJsonStreamer:
            return ProgressiveJsonStreamer().set_max_depth(1).data({"a": {"b": {"c": M}}})

        async with TestClient(ProgressiveApp(factory)) as client:
            result = await client.get("/")

        assert result.status == 200
        assert result.completed
        assert result.body.startswith("\n/* STREAM_ERROR */\n")


class TestDisconnect:
    async def test_later_producers_never_run(self) -> None:
        calls: list[str] = []
        async with TestClient(ProgressiveApp(_build(calls))) as client:
            result = await client.stream("/", max_chunks=2)

        assert calls == ["message"]
        assert len(result.body_chunks) == 2
        assert not result.completed

    async def test_disconnect_after_skeleton(self) -> None:
        calls: list[str] = []
        async with TestClient(ProgressiveApp(_build(calls))) as client:
            result = await client.stream("/", max_chunks=1)

        assert calls == []
        assert result.body_chunks[0].startswith("{")


class TestMethods:
    async def test_head_sends_headers_only(self) -> None:
        calls: list[str] = []
        async with TestClient(ProgressiveApp(_build(calls))) as client:
            result = await client.stream("/", method="HEAD")

        assert result.status == 200
        assert result.headers["content-type"] == "application/x-json-stream"
        assert result.body == ""
        assert result.completed
        assert calls == []

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
    async def test_other_methods_rejected(self, method: str) -> None:
        calls: list[str] = []
        async with TestClient(ProgressiveApp(_build(calls))) as client:
            result = await client.stream("/", method=method)

        assert result.status == 405
        assert result.headers["allow"] == "GET, HEAD"
        assert calls == []


class TestFactoryErrors:
    async def test_factory_exception_gives_500(self, caplog: pytest.LogCaptureFixture) -> None:
        def factory(scope) -> ProgressiveJsonStreamer:
            msg = "bad config"
            raise ValueError(msg)

        with caplog.at_level("ERROR", logger="trickle.server"):
            async with TestClient(ProgressiveApp(factory)) as client:
                result = await client.get("/")

        assert result.status == 500
        assert result.body == "Internal Server Error"
        assert "Streamer factory failed" in caplog.text


class TestProtocol:
    async def test_lifespan(self) -> None:
        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict] = []

        async def receive() -> dict:
            return incoming.pop(0)

        async def send(message: dict) -> None:
            sent.append(message)

        await ProgressiveApp(_build())({"type": "lifespan"}, receive, send)

        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_unsupported_scope_raises(self) -> None:
        async def receive() -> dict:
            return {}

        async def send(message: dict) -> None:
            pass

        with pytest.raises(RuntimeError, match="Unsupported ASGI scope type"):
            await ProgressiveApp(_build())({"type": "websocket"}, receive, send)
