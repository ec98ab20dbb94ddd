"""Streaming response headers and a case-insensitive header view.

``STREAMING_HEADERS`` is the fixed header set every sink sends with a
progressive JSON stream: no caching anywhere, no proxy buffering, no
content sniffing.
"""

from collections.abc import Iterator, Mapping

CONTENT_TYPE = "application/x-json-stream"

STREAMING_HEADERS: tuple[tuple[str, str], ...] = (
    ("Cache-Control", "no-cache, no-store, must-revalidate"),
    ("Pragma", "no-cache"),
    ("Expires", "0"),
    ("Connection", "keep-alive"),
    ("X-Accel-Buffering", "no"),  # nginx: pass chunks through unbuffered
    ("X-Content-Type-Options", "nosniff"),
)


def streaming_headers() -> dict[str, str]:
    """Full header set, ``Content-Type`` included, as a plain dict."""
    return {"Content-Type": CONTENT_TYPE, **dict(STREAMING_HEADERS)}


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive view over raw ASGI header pairs.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name.lower() == key_lower:
                return value.decode("latin-1")
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower().encode("latin-1")
        return any(name.lower() == key_lower for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        key_lower = key.lower().encode("latin-1")
        return [value.decode("latin-1") for name, value in self._raw if name.lower() == key_lower]
