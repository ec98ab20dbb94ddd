"""Trickle — progressive JSON streaming.

Sends a JSON skeleton right away, with slow fields replaced by ``"$path"``
references, then streams each slow value as it resolves.

Basic usage::

    from trickle import ProgressiveJsonStreamer

    streamer = (
        ProgressiveJsonStreamer()
        .data({"message": "{$}", "status": "200", "items": "{$}"})
        .add_placeholder("message", lambda: "Hello!")
        .add_placeholder("items", load_items)
    )

    for chunk in streamer.stream():
        print(chunk, end="")

Over ASGI::

    from trickle import ProgressiveApp

    app = ProgressiveApp(lambda scope: build_streamer())
"""

__version__ = "0.1.0-dev"
__all__ = [
    "DEFAULT_MARKER",
    "ConfigurationError",
    "DepthExceeded",
    "EncodingError",
    "ProgressiveApp",
    "ProgressiveJsonStreamer",
    "StreamConfig",
    "StreamError",
    "StreamingResponse",
    "TrickleError",
    "walk_structure",
]

# Public name -> defining module. Resolved on first attribute access.
_LAZY_IMPORTS: dict[str, str] = {
    "DEFAULT_MARKER": "trickle.config",
    "StreamConfig": "trickle.config",
    "ConfigurationError": "trickle.errors",
    "DepthExceeded": "trickle.errors",
    "EncodingError": "trickle.errors",
    "StreamError": "trickle.errors",
    "TrickleError": "trickle.errors",
    "StreamingResponse": "trickle.http.response",
    "ProgressiveApp": "trickle.server.app",
    "ProgressiveJsonStreamer": "trickle.templating.streaming",
    "walk_structure": "trickle.templating.walker",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import trickle`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    from importlib import import_module

    return getattr(import_module(module_name), name)
