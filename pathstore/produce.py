"""
pathstore Produce - Path-Tracking Interception Engine
=====================================================

``produce`` hands a mutator a *draft* of some state. The draft looks like the
state (item access, attribute access, iteration) but every touch is recorded:

- reading a field adds its dotted path to the dependency set
- assigning a field writes through to the underlying value and appends a
  ``Patch`` describing the write

Nested composites are wrapped lazily, only when they are read, so a mutator
that touches two fields of a large document pays for two drafts.

```python
state = {"a": {"b": 1}, "c": 2}

produced = produce(state, lambda draft: draft.a.b + draft["c"])
produced.deps      # ["a", "a.b", "c"]
produced.result    # 3

def bump(draft):
    draft.a.b = 2

produce(state, bump).patches   # [Patch(path="a.b", value=2)]
state["a"]["b"]                # 2, drafts write through
```

What a draft does is gated by the flags in ``pathstore.flags``, consulted on
every access: ``tracking`` for dependency recording, ``triggering`` for patch
emission and ``packing`` for wrapping nested composites.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional

from .flags import is_packing, is_tracking, is_triggering
from .paths import is_composite, join_path, read_field, write_field
from .raw import register, to_raw


@dataclass(frozen=True)
class Patch:
    """One recorded write: the path written and the value assigned."""

    path: str
    value: Any


PatchCallback = Callable[[Patch], Any]


class Produced(NamedTuple):
    """Outcome of one ``produce`` call."""

    patches: List[Patch]
    deps: List[str]
    result: Any


class Recorder:
    """
    Collects the reads and writes of every draft built from one root.

    ``deps`` is an insertion-ordered set (a dict with ``None`` values) so that
    a path read many times is kept once, at the position of its first read.
    A read-only recorder refuses writes; it backs the views built by
    ``track``.
    """

    __slots__ = ("deps", "patches", "on_patch", "readonly")

    def __init__(
        self,
        deps: Optional[Dict[str, None]] = None,
        on_patch: Optional[PatchCallback] = None,
        readonly: bool = False,
    ):
        self.deps: Dict[str, None] = {} if deps is None else deps
        self.patches: List[Patch] = []
        self.on_patch = on_patch
        self.readonly = readonly

    def read(self, path: str) -> None:
        if is_tracking():
            self.deps[path] = None

    def write(self, path: str, value: Any) -> None:
        if not is_triggering():
            return
        patch = Patch(path, value)
        self.patches.append(patch)
        if self.on_patch is not None:
            self.on_patch(patch)


def _wrappable(value: Any) -> bool:
    return isinstance(value, Draft) or is_composite(value)


class Draft:
    """
    Recording handle over a composite value.

    Fields are reachable both as items (``draft["a"]``, ``draft[0]``) and as
    attributes (``draft.a``). Attribute access cannot reach keys that collide
    with the draft's own methods (``get``, ``keys``, ``values``, ``items``,
    ``append``) or that start with an underscore; use item access for those.

    Mappings iterate over their keys and sequences over their (recorded)
    elements.
    """

    __slots__ = ("_target", "_path", "_recorder", "__weakref__")

    def __init__(self, target: Any, path: str, recorder: Recorder):
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_path", path)
        object.__setattr__(self, "_recorder", recorder)
        register(self, target)

    # --- interception -------------------------------------------------

    def _read(self, field: Any) -> Any:
        # an absent field is still a dependency
        path = join_path(self._path, field)
        self._recorder.read(path)
        value = read_field(self._target, field)
        if _wrappable(value) and is_packing():
            return Draft(value, path, self._recorder)
        return value

    def _write(self, field: Any, value: Any) -> None:
        if self._recorder.readonly:
            raise TypeError(f"Cannot assign {field!r}: read-only view")
        value = to_raw(value)
        write_field(self._target, field, value)
        self._recorder.write(join_path(self._path, field), value)

    def __getitem__(self, field: Any) -> Any:
        return self._read(field)

    def __setitem__(self, field: Any, value: Any) -> None:
        self._write(field, value)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._read(name)
        except (KeyError, IndexError, ValueError) as e:
            raise AttributeError(
                f"{self._describe()} has no field {name!r}"
            ) from e

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            raise AttributeError(f"Cannot assign private attribute {name!r}")
        self._write(name, value)

    # --- container protocol -------------------------------------------

    def get(self, field: Any, default: Any = None) -> Any:
        if field not in self:
            self._recorder.read(join_path(self._path, field))
            return default
        return self._read(field)

    def keys(self):
        if not isinstance(to_raw(self._target), Mapping):
            raise TypeError(f"{self._describe()} has no keys")
        return self._target.keys()

    def values(self) -> Iterator[Any]:
        for key in list(self.keys()):
            yield self._read(key)

    def items(self) -> Iterator[Any]:
        for key in list(self.keys()):
            yield key, self._read(key)

    def append(self, value: Any) -> None:
        """Append to a sequence draft, recording a write at the new index."""
        if self._recorder.readonly:
            raise TypeError("Cannot append: read-only view")
        index = len(self._target)
        value = to_raw(value)
        self._target.append(value)
        self._recorder.write(join_path(self._path, index), value)

    def __iter__(self) -> Iterator[Any]:
        raw = to_raw(self._target)
        if isinstance(raw, Mapping):
            return iter(list(self.keys()))
        if isinstance(raw, Sequence):
            return (self._read(index) for index in range(len(self._target)))
        raise TypeError(f"{self._describe()} is not iterable")

    def __len__(self) -> int:
        return len(self._target)

    def __contains__(self, field: Any) -> bool:
        raw = to_raw(self._target)
        if isinstance(raw, Mapping):
            return field in raw
        if isinstance(raw, Sequence):
            return isinstance(field, int) and -len(raw) <= field < len(raw)
        return isinstance(field, str) and hasattr(raw, field)

    def __bool__(self) -> bool:
        return bool(self._target)

    def _describe(self) -> str:
        return f"Draft at {self._path!r}" if self._path else "Draft"

    def __repr__(self) -> str:
        return f"Draft({self._path or '<root>'}: {self._target!r})"


def produce(
    base: Any, mutator: Callable[[Any], Any], on_patch: Optional[PatchCallback] = None
) -> Produced:
    """
    Run ``mutator`` once against a draft of ``base``.

    Args:
        base: The composite value to wrap. Writes mutate it directly.
        mutator: Called synchronously with the root draft. Its return value
            is passed back as ``result`` unchanged, drafts included.
        on_patch: Called with each patch as it is recorded.

    Returns:
        ``Produced(patches, deps, result)`` where ``patches`` keeps every
        write in order (no compaction) and ``deps`` lists each path read,
        once, in first-read order. Reads of absent fields are included.

    Raises:
        TypeError: If ``base`` is not a composite value or a draft.
    """
    if not _wrappable(base):
        raise TypeError(
            f"Cannot produce from {type(base).__name__}: not a composite value"
        )
    recorder = Recorder(on_patch=on_patch)
    draft = Draft(base, "", recorder)
    result = mutator(draft)
    return Produced(recorder.patches, list(recorder.deps), result)


def track(value: Any, deps: Dict[str, None], path: str = "") -> Any:
    """
    Wrap ``value`` in a read-only draft that records reads into ``deps``.

    ``path`` is the location of ``value`` inside the state it was taken from,
    so recorded paths are absolute. Non-composite values are returned as is.
    """
    if not _wrappable(value):
        return value
    return Draft(value, path, Recorder(deps=deps, readonly=True))
