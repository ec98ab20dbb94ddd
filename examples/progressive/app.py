"""Progressive feed — skeleton first, slow fields as they resolve.

A status page whose greeting and item list come from slow sources.
The skeleton goes out immediately with ``"$message"`` and ``"$items"``
references; each value follows in its own chunk once ready.

Serve with any ASGI server::

    uvicorn app:app

Or write the stream, CGI-style, to stdout::

    python app.py
"""

import time

import anyio

from trickle import ProgressiveApp, ProgressiveJsonStreamer

# Simulated latency per source, in seconds
MESSAGE_DELAY = 0.05
ITEMS_DELAY = 0.1

_ITEMS = [
    {"id": 1, "title": "Deploy started", "tags": ["ops"]},
    {"id": 2, "title": "Cache warmed", "tags": ["ops", "perf"]},
    {"id": 3, "title": "Release notes published", "tags": ["docs"]},
]


def load_message() -> str:
    time.sleep(MESSAGE_DELAY)
    return "Hello from the slow greeting service"


async def load_items() -> list[dict]:
    await anyio.sleep(ITEMS_DELAY)
    return _ITEMS


def load_items_blocking() -> list[dict]:
    time.sleep(ITEMS_DELAY)
    return _ITEMS


def build_streamer(scope=None) -> ProgressiveJsonStreamer:
    """One fresh streamer per request."""
    return (
        ProgressiveJsonStreamer()
        .data({"message": "{$}", "status": "200", "items": "{$}"})
        .add_placeholder("message", load_message)
        .add_placeholder("items", load_items)
    )


app = ProgressiveApp(build_streamer)


if __name__ == "__main__":
    # The sync path cannot await load_items
    build_streamer().add_placeholder("items", load_items_blocking).send(with_headers=True)
