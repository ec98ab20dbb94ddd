"""Chunk payloads and wire framing.

Every chunk after the skeleton carries one of two payload shapes, framed
identically so a client cannot tell them apart without looking inside::

    \\n/* $user.name */\\n"Jane"

    \\n/* $user.posts */\\n{
        "error": true,
        "key": "user.posts",
        "message": "connection refused",
        "type": "ConnectionError"
    }

The generator only decides *which* payload to build; encoding and framing
live here.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from trickle.errors import EncodingError

STREAM_ERROR_TAG = "STREAM_ERROR"


def encode_json(value: Any, *, indent: int = 4) -> str:
    """Pretty-print *value* as standard JSON, keeping non-ASCII as-is.

    Raises:
        EncodingError: unsupported type, circular reference, or a
            non-finite float (NaN and Infinity are not JSON).
    """
    try:
        return json.dumps(value, ensure_ascii=False, indent=indent, allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise EncodingError(str(exc)) from exc


def format_tag(label: str) -> str:
    """The comment line that precedes a payload: ``\\n/* label */\\n``."""
    return f"\n/* {label} */\n"


@dataclass(frozen=True, slots=True)
class Resolved:
    """A producer returned *value* for *path*."""

    path: str
    value: Any

    def payload(self) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    """A producer for *path* failed; *kind* is the exception class name."""

    path: str
    message: str
    kind: str

    @classmethod
    def from_exception(cls, path: str, exc: BaseException) -> Failure:
        return cls(path=path, message=str(exc), kind=type(exc).__name__)

    def payload(self) -> dict[str, Any]:
        return {
            "error": True,
            "key": self.path,
            "message": self.message,
            "type": self.kind,
        }


ChunkPayload = Resolved | Failure


def format_chunk(payload: ChunkPayload, *, indent: int = 4) -> str:
    """Frame one payload for the wire: tag line, then pretty JSON.

    Raises:
        EncodingError: the payload value is not representable as JSON.
    """
    return format_tag(f"${payload.path}") + encode_json(payload.payload(), indent=indent)


def format_stream_error(message: str = "Stream processing failed") -> str:
    """Best-effort marker a sink writes when the whole stream fails."""
    return format_tag(STREAM_ERROR_TAG) + json.dumps({"error": True, "message": message})
