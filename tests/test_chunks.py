"""Tests for chunk payloads, JSON encoding, and wire framing."""

import json
import math

import pytest

from trickle.errors import EncodingError
from trickle.templating.chunks import (
    Failure,
    Resolved,
    encode_json,
    format_chunk,
    format_stream_error,
    format_tag,
)


class TestEncodeJson:
    def test_pretty_printed_with_four_spaces(self) -> None:
        assert encode_json({"a": 1}) == '{\n    "a": 1\n}'

    def test_custom_indent(self) -> None:
        assert encode_json([1], indent=2) == "[\n  1\n]"

    def test_unicode_preserved(self) -> None:
        text = encode_json({"name": "Zoë", "city": "القاهرة"})
        assert "Zoë" in text
        assert "القاهرة" in text
        assert "\\u" not in text

    def test_scalar(self) -> None:
        assert encode_json("hi") == '"hi"'

    def test_unsupported_type_raises(self) -> None:
        with pytest.raises(EncodingError, match="not JSON serializable"):
            encode_json({"s": {1, 2}})

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_float_raises(self, value: float) -> None:
        with pytest.raises(EncodingError):
            encode_json({"x": value})

    def test_circular_reference_raises(self) -> None:
        loop: list = []
        loop.append(loop)
        with pytest.raises(EncodingError):
            encode_json(loop)

    def test_original_error_chained(self) -> None:
        with pytest.raises(EncodingError) as info:
            encode_json(object())
        assert isinstance(info.value.__cause__, TypeError)


class TestPayloads:
    def test_resolved_payload_is_value(self) -> None:
        assert Resolved("a", [1, 2]).payload() == [1, 2]

    def test_failure_payload_shape(self) -> None:
        failure = Failure(path="user.posts", message="boom", kind="RuntimeError")
        assert failure.payload() == {
            "error": True,
            "key": "user.posts",
            "message": "boom",
            "type": "RuntimeError",
        }

    def test_failure_from_exception(self) -> None:
        failure = Failure.from_exception("feed", ConnectionError("refused"))
        assert failure.path == "feed"
        assert failure.message == "refused"
        assert failure.kind == "ConnectionError"

    def test_payloads_frozen(self) -> None:
        with pytest.raises(AttributeError):
            Resolved("a", 1).path = "b"  # type: ignore[misc]


class TestFraming:
    def test_tag_line(self) -> None:
        assert format_tag("$user.name") == "\n/* $user.name */\n"

    def test_resolved_chunk(self) -> None:
        assert format_chunk(Resolved("message", "hi")) == '\n/* $message */\n"hi"'

    def test_failure_chunk_framed_identically(self) -> None:
        ok = format_chunk(Resolved("a", {"x": 1}))
        failed = format_chunk(Failure("a", "nope", "ValueError"))
        assert ok.split("\n", 2)[:2] == failed.split("\n", 2)[:2]
        assert json.loads(failed.split("\n", 2)[2])["error"] is True

    def test_unencodable_resolved_value_raises(self) -> None:
        with pytest.raises(EncodingError):
            format_chunk(Resolved("a", object()))

    def test_stream_error_marker(self) -> None:
        marker = format_stream_error()
        assert marker.startswith("\n/* STREAM_ERROR */\n")
        assert json.loads(marker.split("\n", 2)[2]) == {
            "error": True,
            "message": "Stream processing failed",
        }
