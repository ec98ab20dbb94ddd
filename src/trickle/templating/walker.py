"""Structure walker — template tree in, skeleton tree out.

Replaces every placeholder-marker leaf with a ``"$" + path`` reference
string, where *path* is the dot-joined key sequence that locates the leaf::

    {"user": {"profile": {"name": "{$}"}}}
    -> {"user": {"profile": {"name": "$user.profile.name"}}}

Sequence indices become path segments too (``"$items.0.title"``).

The walk is pure: it never looks at registered producers, so the
skeleton shape depends only on the template and the marker.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any

from trickle.config import DEFAULT_MARKER, DEFAULT_MAX_DEPTH
from trickle.errors import DepthExceeded

REFERENCE_PREFIX = "$"
ROOT_REFERENCE = "$placeholder"


def is_marker(value: Any, marker: Any) -> bool:
    """Value equality with the marker, requiring the same concrete type.

    Keeps ``True`` from matching a marker of ``1`` and ``0.0`` from
    matching ``0``.
    """
    return type(value) is type(marker) and value == marker


def reference_for(path: str) -> str:
    """The skeleton reference string for *path*."""
    return REFERENCE_PREFIX + path if path else ROOT_REFERENCE


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _is_record(value: Any) -> bool:
    # Dataclass *instances* only; a dataclass type is a plain value
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _as_mapping(record: Any) -> dict[str, Any]:
    """Shallow field map of a dataclass instance, in declaration order."""
    return {f.name: getattr(record, f.name) for f in dataclasses.fields(record)}


def _entries(node: Mapping[Any, Any] | list[Any] | tuple[Any, ...]) -> Any:
    if isinstance(node, Mapping):
        return node.items()
    return enumerate(node)


def walk_structure(
    node: Any,
    marker: Any = DEFAULT_MARKER,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    path: str = "",
    depth: int = 0,
) -> Any:
    """Return *node* with marker leaves replaced by path references.

    Mappings come back as ``dict`` and sequences as ``list``; scalars and
    unrecognised objects pass through unchanged (the JSON encoder decides
    whether they are representable).

    Raises:
        DepthExceeded: *depth* is past *max_depth*. The root is depth 0
            and each nested container adds one.
    """
    if depth > max_depth:
        raise DepthExceeded(max_depth, path)

    if _is_record(node):
        return walk_structure(
            _as_mapping(node), marker, max_depth=max_depth, path=path, depth=depth,
        )

    if not _is_container(node):
        if is_marker(node, marker):
            return reference_for(path)
        return node

    is_mapping = isinstance(node, Mapping)
    result: dict[Any, Any] | list[Any] = {} if is_mapping else []

    for key, value in _entries(node):
        child_path = str(key) if path == "" else f"{path}.{key}"

        if is_marker(value, marker):
            item = reference_for(child_path)
        elif _is_container(value) or _is_record(value):
            item = walk_structure(
                value, marker, max_depth=max_depth, path=child_path, depth=depth + 1,
            )
        else:
            item = value

        if is_mapping:
            result[key] = item  # type: ignore[index]
        else:
            result.append(item)  # type: ignore[union-attr]

    return result


def collect_references(node: Any) -> list[str]:
    """Paths of every ``"$path"`` reference in a skeleton, in walk order.

    Used to report unresolved placeholders; literal strings that happen
    to start with ``$`` are indistinguishable and are reported too.
    """
    found: list[str] = []

    def _visit(value: Any) -> None:
        if isinstance(value, str):
            if value.startswith(REFERENCE_PREFIX) and value != ROOT_REFERENCE:
                found.append(value[len(REFERENCE_PREFIX):])
        elif isinstance(value, Mapping):
            for item in value.values():
                _visit(item)
        elif isinstance(value, (list, tuple)):
            for item in value:
                _visit(item)

    _visit(node)
    return found
