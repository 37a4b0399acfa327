"""
pathstore Store - Canonical State with Patch-Based Notification
===============================================================

A ``Store`` owns one state mapping and tells its listeners exactly which
paths each update wrote.

Updates come in two shapes:

```python
store = Store()

# 1. a mapping, shallow-merged over the current state
store.set_state({"count": 0, "user": {"name": "Ada"}})
# patches: [Patch("count", 0), Patch("user", {"name": "Ada"})]

# 2. a mutator, run against a draft of the current state
def rename(state):
    state.user = {"name": "Grace"}     # in-place write, recorded as "user"
    return {"count": state.count + 1}  # merged afterwards, recorded as "count"

store.set_state(rename)
# patches: [Patch("user", {"name": "Grace"}), Patch("count", 1)]
```

Inside a mutator, nested values are handed out raw (packing is paused), so
only top-level writes are recorded. Replace a nested value wholesale to have
it reported.

Listeners are called synchronously, in subscription order, with
``(state, patches)`` once every patch has been computed, so no listener ever
sees a half-applied update. A listener may itself call ``set_state``; the
nested update is delivered completely before the outer pass continues.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .flags import PACKING, TRACKING, paused
from .produce import Patch, produce
from .raw import to_raw

logger = logging.getLogger(__name__)

State = Dict[str, Any]
Listener = Callable[[State, List[Patch]], Any]
Mutator = Callable[[Any], Any]
PartialState = Union[Mapping, Mutator]


def merge_into(state: State, partial: Mapping) -> List[Patch]:
    """
    Copy the top-level keys of ``partial`` onto ``state``.

    Returns one patch per key, in the partial's own key order.
    """
    patches = []
    for key, value in partial.items():
        value = to_raw(value)
        state[key] = value
        patches.append(Patch(key, value))
    return patches


class Store:
    """
    Reactive container for a single state mapping.

    The state reference is replaced on every update: ``get_state()`` taken
    before a ``set_state`` call keeps its top-level keys. Nested values are
    shared between snapshots, and a mutator's nested writes land on them
    directly.
    """

    def __init__(self, initial: Optional[Mapping] = None):
        self._state: State = dict(initial) if initial else {}
        # dict keys as an insertion-ordered set
        self._listeners: Dict[Listener, None] = {}

    def get_state(self) -> State:
        """Return the current state (not a copy)."""
        return self._state

    def set_state(self, partial: PartialState) -> None:
        """
        Apply ``partial`` and notify every listener once.

        Args:
            partial: A mapping to shallow-merge, or a mutator called with a
                draft of the current state. A mutator may write through the
                draft, return a mapping to merge, or both; write patches come
                first, then merge patches.

        Raises:
            TypeError: If ``partial`` is neither a mapping nor callable.
        """
        if callable(partial):
            state, patches = self._apply_mutator(partial)
        elif isinstance(partial, Mapping):
            state = dict(self._state)
            patches = merge_into(state, partial)
        else:
            raise TypeError(
                f"set_state expects a mapping or a callable, got {type(partial).__name__}"
            )

        self._state = state
        self._notify(patches)

    def _apply_mutator(self, mutator: Mutator) -> Tuple[State, List[Patch]]:
        previous = self._state
        state = dict(previous)

        # dependencies are not needed here and nested values stay raw
        with paused(TRACKING), paused(PACKING):
            patches, _, result = produce(state, mutator)

        result = to_raw(result)
        if isinstance(result, Mapping) and result is not state and result is not previous:
            patches.extend(merge_into(state, result))
        elif result is not None and not isinstance(result, Mapping):
            logger.debug(
                "Ignoring non-mapping mutator result of type %s", type(result).__name__
            )
        return state, patches

    def _notify(self, patches: List[Patch]) -> None:
        listeners = list(self._listeners)
        logger.debug(
            "Notifying %d listener(s) of %d patch(es)", len(listeners), len(patches)
        )
        for listener in listeners:
            # skip listeners removed earlier in this pass
            if listener in self._listeners:
                listener(self._state, patches)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register ``listener`` and return a function that removes it.

        Subscribing the same listener twice keeps a single registration.
        The returned function may be called any number of times.
        """
        self._listeners[listener] = None

        def unsubscribe() -> None:
            self._listeners.pop(listener, None)

        return unsubscribe

    def dispose(self) -> None:
        """Reset to an empty state and drop every listener."""
        self._state = {}
        self._listeners.clear()

    def __repr__(self) -> str:
        return f"Store({self._state!r}, listeners={len(self._listeners)})"
