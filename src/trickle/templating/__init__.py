"""Skeleton walking, chunk framing, and progressive stream generation."""

from trickle.templating.chunks import ChunkPayload, Failure, Resolved, encode_json, format_chunk
from trickle.templating.streaming import ProgressiveJsonStreamer
from trickle.templating.walker import walk_structure

__all__ = [
    "ChunkPayload",
    "Failure",
    "ProgressiveJsonStreamer",
    "Resolved",
    "encode_json",
    "format_chunk",
    "walk_structure",
]
