"""
Path helpers for dot-segmented state locations.

A path names a location inside a composite value, e.g. ``"user.name"`` or
``"items.0"``. Segments are joined with ``SEPARATOR`` and never escaped, so a
field name containing the separator cannot be addressed.

Composite values are the ones the engine is willing to wrap: mutable mappings,
mutable sequences and dataclass instances. Everything else (numbers, strings,
tuples, frozen containers, callables) is a leaf.
"""

import dataclasses
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, Tuple

from cachetools import LRUCache, cached

SEPARATOR = "."
PATH_CACHE_SIZE = 1024


def join_path(parent: str, field: Any) -> str:
    """Append ``field`` to ``parent``; the root path is the empty string."""
    return f"{parent}{SEPARATOR}{field}" if parent else str(field)


@cached(cache=LRUCache(maxsize=PATH_CACHE_SIZE))
def split_path(path: str) -> Tuple[str, ...]:
    """Split a path into its segments. Results are memoized."""
    if not path:
        return ()
    return tuple(path.split(SEPARATOR))


def is_composite(value: Any) -> bool:
    """Return True for values the engine wraps in a draft."""
    if isinstance(value, (MutableMapping, MutableSequence)):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def read_field(target: Any, field: Any) -> Any:
    """Read one field from a composite (or read-only container) value."""
    if isinstance(target, Mapping):
        return target[field]
    if isinstance(target, Sequence) and not isinstance(target, str):
        return target[int(field)]
    if hasattr(target, "__getitem__"):
        # drafts resolve the field themselves
        return target[field]
    return getattr(target, field)


def write_field(target: Any, field: Any, value: Any) -> None:
    """Assign one field on a composite value."""
    if isinstance(target, MutableMapping):
        target[field] = value
    elif isinstance(target, MutableSequence):
        target[int(field)] = value
    elif hasattr(target, "__setitem__"):
        target[field] = value
    else:
        setattr(target, field, value)


def has_field(target: Any, field: Any) -> bool:
    """Return True if ``read_field(target, field)`` would find a value."""
    if isinstance(target, Mapping):
        return field in target
    if isinstance(target, Sequence) and not isinstance(target, str):
        try:
            index = int(field)
        except ValueError:
            return False
        return -len(target) <= index < len(target)
    if hasattr(target, "__getitem__"):
        return field in target
    return isinstance(field, str) and hasattr(target, field)


_RAISE = object()


def get_in(value: Any, path: str, default: Any = _RAISE) -> Any:
    """
    Resolve a dotted path against ``value``.

    A missing or ``None`` intermediate raises the ordinary lookup error
    (KeyError, IndexError, AttributeError or TypeError). An absent last
    segment raises too, unless ``default`` is given.
    """
    segments = split_path(path)
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if (
            last
            and default is not _RAISE
            and value is not None
            and not has_field(value, segment)
        ):
            return default
        value = read_field(value, segment)
    return value


def is_under(path: str, dep: str) -> bool:
    """
    Return True if ``path`` is ``dep`` or lies below it.

    The test respects segment boundaries: ``"a.b"`` is under ``"a"`` but
    ``"ab"`` is not.
    """
    return path == dep or path.startswith(dep + SEPARATOR)
