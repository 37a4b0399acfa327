"""
pathstore Subscription - Selective Invalidation for Store Consumers
===================================================================

A consumer projects some part of a store's state and wants to hear about an
update only when that part may have changed. It keeps a dependency set of
paths and compares it against the patches of every update:

```python
store = Store({"user": {"name": "Ada"}, "theme": "dark"})

with Consumer(store, lambda s: s.user.name) as consumer:
    consumer.deps                                  # {"user": None, "user.name": None}
    store.set_state({"theme": "light"})            # ignored
    store.set_state({"user": {"name": "Grace"}})   # refreshed
    consumer.value                                 # "Grace"
```

Selectors come in three shapes, resolved once into a ``Selector``:

- ``None``: the whole state (``WholeState``)
- a string: a dotted path into the state (``KeySelector``)
- a callable: a function of the state, run through ``produce`` so the paths it
  reads become dependencies (``FunctionSelector``)

Relevance is decided per patch by ``is_under``: a patch at ``"a.b"`` is
relevant to a dependency on ``"a"``, a patch at ``"ab"`` is not, and a patch at
``"a"`` is not relevant to a dependency on ``"a.b"``.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .paths import get_in, is_under
from .produce import Patch, produce, track
from .raw import to_raw
from .store import Store

logger = logging.getLogger(__name__)

Getter = Callable[[], Any]
Setter = Callable[[Any], Any]


def is_affected(patches: Iterable[Patch], deps: Iterable[str]) -> bool:
    """True if any patch path is, or lies below, any dependency path."""
    deps = list(deps)
    return any(is_under(patch.path, dep) for patch in patches for dep in deps)


class Cell:
    """
    Lazily initialized value holder.

    ``initial`` may be a zero-argument callable, evaluated on first ``get``.
    """

    _UNSET = object()

    __slots__ = ("_initial", "_value")

    def __init__(self, initial: Any = None):
        self._initial = initial
        self._value = Cell._UNSET

    def get(self) -> Any:
        if self._value is Cell._UNSET:
            initial = self._initial
            self._value = initial() if callable(initial) else initial
        return self._value

    def set(self, value: Any) -> None:
        self._value = value

    def pair(self) -> Tuple[Getter, Setter]:
        return self.get, self.set


class Selector:
    """
    Maps a state to a projection and the paths that projection depends on.

    ``path`` is where the projection sits inside the state, when that is
    known; reads through a tracked view of the projection are recorded
    relative to it.
    """

    path: Optional[str] = None

    def resolve(self, state: Any) -> Tuple[Any, List[str]]:
        raise NotImplementedError

    def select(self, state: Any) -> Any:
        return self.resolve(state)[0]


class WholeState(Selector):
    path = ""

    def resolve(self, state: Any) -> Tuple[Any, List[str]]:
        return state, []

    def __repr__(self) -> str:
        return "WholeState()"


class KeySelector(Selector):
    def __init__(self, path: str):
        self.path = path

    def resolve(self, state: Any) -> Tuple[Any, List[str]]:
        return get_in(state, self.path, None), [self.path]

    def __repr__(self) -> str:
        return f"KeySelector({self.path!r})"


class FunctionSelector(Selector):
    def __init__(self, func: Callable[[Any], Any]):
        self.func = func

    def resolve(self, state: Any) -> Tuple[Any, List[str]]:
        _, deps, result = produce(state, self.func)
        return _unwrap(result), deps

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"FunctionSelector({name})"


def _unwrap(value: Any) -> Any:
    """Unwrap a selector result and the drafts directly inside it."""
    value = to_raw(value)
    if isinstance(value, (list, tuple)):
        return type(value)(to_raw(item) for item in value)
    if isinstance(value, dict):
        return {key: to_raw(item) for key, item in value.items()}
    return value


def as_selector(selector: Any = None) -> Selector:
    """Resolve a user-supplied selector into a ``Selector``."""
    if selector is None:
        return WholeState()
    if isinstance(selector, Selector):
        return selector
    if isinstance(selector, str):
        return KeySelector(selector)
    if callable(selector):
        return FunctionSelector(selector)
    raise TypeError(
        f"Selector must be None, a path string or a callable, got {type(selector).__name__}"
    )


class Consumer:
    """
    Keeps a cached projection of a store in step with the updates it reads.

    Args:
        store: The store to follow.
        selector: ``None``, a dotted path or a function of the state.
        deps: Dependency set to fill; pass a shared dict to keep dependencies
            across several consumers of the same identity.
        cell: ``(getter, setter)`` holding the projection; by default a
            ``Cell`` initialized from the current state on first read.

    ``start()`` collects the initial dependencies and subscribes; ``stop()``
    unsubscribes and is safe to call repeatedly. Used as a context manager,
    the consumer is started on entry and stopped on exit.

    A key consumer on an absent field holds ``None`` until the field is
    written. Function consumers have no location for their projection, so
    ``view()`` hands it back unwrapped: reads past the selector's result are
    not recorded, and such selectors must read every path they depend on.
    """

    def __init__(
        self,
        store: Store,
        selector: Any = None,
        deps: Optional[Dict[str, None]] = None,
        cell: Optional[Tuple[Getter, Setter]] = None,
    ):
        self.store = store
        self.selector = as_selector(selector)
        self.deps: Dict[str, None] = {} if deps is None else deps
        if cell is None:
            cell = Cell(lambda: self.selector.select(store.get_state())).pair()
        self._get, self._set = cell
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def value(self) -> Any:
        return self._get()

    def view(self) -> Any:
        """
        The projection, wrapped so further reads extend the dependency set.

        Projections with no known location in the state are returned as is.
        """
        if self.selector.path is None:
            return self.value
        return track(self.value, self.deps, self.selector.path)

    def collect(self) -> List[str]:
        """Add the selector's dependencies on the current state."""
        _, deps = self.selector.resolve(self.store.get_state())
        self._add_deps(deps)
        return deps

    def _add_deps(self, deps: Iterable[str]) -> None:
        for dep in deps:
            self.deps[dep] = None

    def is_affected(self, patches: List[Patch]) -> bool:
        return is_affected(patches, self.deps)

    def notify(self, state: Any, patches: List[Patch]) -> bool:
        """Store listener: refresh if the patches touch a dependency."""
        if not self.is_affected(patches):
            logger.debug("%r skipped %d unrelated patch(es)", self, len(patches))
            return False
        self.refresh(state)
        return True

    def refresh(self, state: Any = None) -> Any:
        """Re-apply the selector and push the projection into the cell."""
        if state is None:
            state = self.store.get_state()
        value, deps = self.selector.resolve(state)
        self._add_deps(deps)
        logger.debug("%r refreshed", self)
        self._set(value)
        return value

    def start(self) -> Callable[[], None]:
        if self._unsubscribe is None:
            self.collect()
            self._unsubscribe = self.store.subscribe(self.notify)
        return self.stop

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def __enter__(self) -> "Consumer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def __repr__(self) -> str:
        return f"Consumer({self.selector!r}, deps={list(self.deps)})"
