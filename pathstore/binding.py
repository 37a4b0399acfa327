"""
pathstore Binding - Hooking Stores into a Consumer Runtime
==========================================================

A UI runtime (or anything else that re-runs consumers) plugs into pathstore by
supplying a ``Runtime`` for the consumer that is currently running:

- ``create_state(initial)`` returns a ``(getter, setter)`` pair that persists
  across repeated runs of the same consumer and is initialized lazily;
  ``initial`` may be a zero-argument callable
- ``create_effect(setup)`` runs ``setup`` once per consumer lifetime; the
  teardown ``setup`` returns runs once when the consumer is disposed
- ``token`` identifies the consumer across runs

``bind(build)`` turns a runtime builder into a store factory, and the
factory's ``use_store(selector)`` returns the consumer's cached projection,
refreshed only when an update touches one of its dependency paths.

``Component`` is a small in-process runtime, and ``create`` is the factory
bound to it:

```python
use_counter = create(lambda set, get: {
    "count": 0,
    "inc": lambda: set(lambda s: {"count": s.count + 1}),
})

view = Component(lambda: use_counter("count"))
view.render()                      # 0
use_counter.get()["inc"]()
view.dirty                         # True, "count" changed
view.render()                      # 1
view.dispose()                     # unsubscribes
```
"""

import logging
import threading
from typing import Any, Callable, Dict, Hashable, List, NamedTuple, Optional, Tuple

from .store import Listener, PartialState, State, Store
from .subscription import Cell, Consumer, Getter, Setter, as_selector

logger = logging.getLogger(__name__)

Teardown = Callable[[], Any]
EffectSetup = Callable[[], Optional[Teardown]]
SetupFn = Callable[[Callable[[PartialState], None], Callable[[], State]], Any]


class Runtime(NamedTuple):
    """What a consumer runtime provides for the consumer being run."""

    create_state: Callable[[Any], Tuple[Getter, Setter]]
    create_effect: Callable[[EffectSetup], Any]
    token: Hashable


class UseStore:
    """
    Store accessor returned by a bound ``create``.

    Calling it from inside a running consumer returns that consumer's
    projection:

    - ``use_store()``: the whole state
    - ``use_store("user.name")``: the value at a dotted path
    - ``use_store(lambda s: ...)``: the selector's result

    Composite projections with a known location come back as read-only
    views whose reads add to the consumer's dependencies.
    """

    def __init__(self, store: Store, build: Callable[[], Runtime]):
        self.store = store
        self._build = build
        self._envs: Dict[Hashable, Dict[str, None]] = {}

    def set(self, partial: PartialState) -> None:
        self.store.set_state(partial)

    def get(self) -> State:
        return self.store.get_state()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def __call__(self, selector: Any = None) -> Any:
        runtime = self._build()
        selector = as_selector(selector)
        token = runtime.token

        deps = self._envs.setdefault(token, {})
        cell = runtime.create_state(lambda: selector.select(self.store.get_state()))
        consumer = Consumer(self.store, selector, deps=deps, cell=cell)

        def effect() -> Teardown:
            consumer.start()

            def teardown() -> None:
                consumer.stop()
                self._envs.pop(token, None)

            return teardown

        runtime.create_effect(effect)
        return consumer.view()


def bind(build: Optional[Callable[[], Runtime]]) -> Callable[[SetupFn], UseStore]:
    """
    Create a store factory for the runtime returned by ``build``.

    Raises:
        RuntimeError: If no runtime builder is given. This is checked here,
            not on first use.
    """
    if build is None:
        raise RuntimeError("No reactive runtime to bind: build must return a Runtime")
    if not callable(build):
        raise TypeError(f"build must be callable, got {type(build).__name__}")

    def create(setup: SetupFn) -> UseStore:
        """Build a store whose initial state is ``setup(set, get)``."""
        store = Store()
        use_store = UseStore(store, build)
        store.set_state(setup(use_store.set, use_store.get))
        return use_store

    logger.debug("Bound store factory to runtime builder %r", build)
    return create


class Component:
    """
    Minimal consumer host: runs a render function and keeps its hook state.

    State cells and effects are matched to calls by position, so a render
    function must call ``use_store`` the same number of times, in the same
    order, on every render. Effects set up during a render run right after
    it, on the first render only.

    Args:
        render: The consumer body.
        on_update: Called with the component whenever one of its cells is
            set, e.g. to schedule the next render.
    """

    _local = threading.local()

    def __init__(
        self,
        render: Callable[..., Any],
        on_update: Optional[Callable[["Component"], Any]] = None,
    ):
        self._render = render
        self._on_update = on_update
        self._cells: List[Cell] = []
        self._effects: List[EffectSetup] = []
        self._pending: List[EffectSetup] = []
        self._teardowns: List[Teardown] = []
        self._cell_cursor = 0
        self._effect_cursor = 0
        self.token = object()
        self.renders = 0
        self.dirty = False
        self.disposed = False

    @classmethod
    def _stack(cls) -> List["Component"]:
        if not hasattr(cls._local, "stack"):
            cls._local.stack = []
        return cls._local.stack

    @classmethod
    def current(cls) -> "Component":
        """The component rendering on this thread."""
        stack = cls._stack()
        if not stack:
            raise RuntimeError("use_store called outside of a rendering Component")
        return stack[-1]

    def runtime(self) -> Runtime:
        return Runtime(self._create_state, self._create_effect, self.token)

    def render(self, *args, **kwargs) -> Any:
        if self.disposed:
            raise RuntimeError("Cannot render a disposed Component")
        stack = self._stack()
        stack.append(self)
        self._cell_cursor = 0
        self._effect_cursor = 0
        self.dirty = False
        try:
            result = self._render(*args, **kwargs)
        finally:
            stack.pop()
        self.renders += 1
        self._run_pending_effects()
        return result

    def _create_state(self, initial: Any) -> Tuple[Getter, Setter]:
        index = self._cell_cursor
        self._cell_cursor += 1
        if index == len(self._cells):
            self._cells.append(Cell(initial))
        cell = self._cells[index]

        def set_value(value: Any) -> None:
            cell.set(value)
            self.dirty = True
            if self._on_update is not None:
                self._on_update(self)

        return cell.get, set_value

    def _create_effect(self, setup: EffectSetup) -> None:
        index = self._effect_cursor
        self._effect_cursor += 1
        if index == len(self._effects):
            self._effects.append(setup)
            self._pending.append(setup)

    def _run_pending_effects(self) -> None:
        pending, self._pending = self._pending, []
        for setup in pending:
            teardown = setup()
            if callable(teardown):
                self._teardowns.append(teardown)

    def dispose(self) -> None:
        """Run every effect teardown once, newest first."""
        if self.disposed:
            return
        self.disposed = True
        teardowns, self._teardowns = self._teardowns, []
        for teardown in reversed(teardowns):
            teardown()

    def __repr__(self) -> str:
        return f"Component({getattr(self._render, '__name__', '?')}, renders={self.renders})"


def component_runtime() -> Runtime:
    """Runtime builder for the ``Component`` currently rendering."""
    return Component.current().runtime()


create = bind(component_runtime)
