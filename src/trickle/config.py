"""Streamer configuration.

StreamConfig is a frozen dataclass — immutable after creation, validated
on construction, no string-key dict lookups.
"""

from dataclasses import dataclass
from typing import Any

from trickle.errors import ConfigurationError

DEFAULT_MARKER = "{$}"
DEFAULT_MAX_DEPTH = 50

_SCALAR_TYPES = (str, int, float, bool, type(None))


@dataclass(frozen=True, slots=True)
class StreamConfig:
    """Stream configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = StreamConfig(marker="@@", max_depth=10)
    """

    # Template leaf value meaning "defer this field"
    marker: Any = DEFAULT_MARKER

    # Nested container levels allowed below the template root
    max_depth: int = DEFAULT_MAX_DEPTH

    # Pretty-print indentation for every emitted JSON fragment
    indent: int = 4

    # Raise EncodingError for an unencodable resolved value instead of
    # emitting an error chunk for that path
    strict_encoding: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.marker, _SCALAR_TYPES):
            msg = f"Placeholder marker must be a JSON scalar, got {type(self.marker).__name__}"
            raise ConfigurationError(msg)
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            msg = f"Max depth must be an integer, got {type(self.max_depth).__name__}"
            raise ConfigurationError(msg)
        if self.max_depth < 1:
            msg = "Max depth must be at least 1"
            raise ConfigurationError(msg)
        if self.indent < 0:
            msg = "Indent must not be negative"
            raise ConfigurationError(msg)
