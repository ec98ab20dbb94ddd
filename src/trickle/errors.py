"""Trickle exception hierarchy.

Shared across the walker, the stream generator, and the sinks so every
module raises and catches the same types.
"""


class TrickleError(Exception):
    """Base for all trickle-specific errors."""


class ConfigurationError(TrickleError):
    """Raised when a streamer is configured with invalid values.

    Always raised synchronously by the configuration call itself,
    before any streaming begins.
    """


class DepthExceeded(TrickleError):  # noqa: N818
    """The template nests deeper than the configured maximum.

    Raised while walking the template, before the skeleton chunk is
    emitted, so a failing stream produces no output at all.
    """

    def __init__(self, max_depth: int, path: str = "") -> None:
        self.max_depth = max_depth
        self.path = path
        super().__init__(f"Maximum nesting depth ({max_depth}) exceeded in structure")


class EncodingError(TrickleError):
    """A value cannot be represented as standard JSON.

    Fatal when the skeleton fails to encode. For a single resolved value
    it becomes an error chunk unless ``strict_encoding`` is enabled.
    """


class StreamError(TrickleError):
    """A top-level stream failure surfaced by a sink.

    The original exception is chained as ``__cause__``.
    """
