"""
Raw resolution for wrapped handles.

Every draft the engine builds is registered here against the value it wraps.
The registry holds its keys weakly, so an entry disappears as soon as the
draft itself becomes unreachable; nothing is ever removed explicitly.

Because a draft may wrap another draft (``produce`` called on a draft),
``to_raw`` follows the chain until it reaches a value that is not a key.
"""

import weakref
from typing import Any

_raw_by_handle: "weakref.WeakKeyDictionary[Any, Any]" = weakref.WeakKeyDictionary()


def register(handle: Any, raw: Any) -> None:
    """Associate ``handle`` with the value it wraps."""
    _raw_by_handle[handle] = raw


def is_wrapped(value: Any) -> bool:
    """True if ``value`` is a registered handle."""
    try:
        return value in _raw_by_handle
    except TypeError:
        # unhashable, so never registered
        return False


def to_raw(value: Any) -> Any:
    """Unwrap ``value`` completely; identity for anything never wrapped."""
    while is_wrapped(value):
        value = _raw_by_handle[value]
    return value
