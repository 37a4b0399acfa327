"""
pathstore Flags - Stacked Control Flags for the Interception Engine
===================================================================

Three independent boolean flags gate what a draft does when it is touched:

- ``tracking``: reads add their path to the dependency set
- ``triggering``: writes emit patches
- ``packing``: composite values read through a draft come back wrapped

Each flag keeps a stack of its previous values so that pause/enable scopes
nest to any depth:

```python
pause_tracking()      # push True, set False
enable_tracking()     # push False, set True
resume_tracking()     # -> False
resume_tracking()     # -> True
resume_tracking()     # empty stack -> True
```

Prefer the scoped helpers, which always resume on exit:

```python
with paused("tracking"), paused("packing"):
    produce(state, mutator)
```

Flag stacks are thread-local: a pause in one thread is invisible to others.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

TRACKING = "tracking"
TRIGGERING = "triggering"
PACKING = "packing"

FLAG_NAMES = (TRACKING, TRIGGERING, PACKING)


class FlagStack:
    """A boolean with a stack of saved values."""

    __slots__ = ("name", "value", "_saved")

    def __init__(self, name: str):
        self.name = name
        self.value = True
        self._saved: List[bool] = []

    def pause(self) -> None:
        self._saved.append(self.value)
        self.value = False

    def enable(self) -> None:
        self._saved.append(self.value)
        self.value = True

    def resume(self) -> bool:
        """Restore the value saved by the matching pause/enable and return it."""
        self.value = self._saved.pop() if self._saved else True
        return self.value

    def reset(self) -> None:
        self._saved.clear()
        self.value = True

    @property
    def depth(self) -> int:
        return len(self._saved)

    def __bool__(self) -> bool:
        return self.value

    def __repr__(self) -> str:
        return f"FlagStack({self.name}={self.value}, depth={self.depth})"


class FlagContext:
    """Holds the per-thread flag stacks."""

    _local = threading.local()

    @classmethod
    def _get_flags(cls) -> Dict[str, FlagStack]:
        if not hasattr(cls._local, "flags"):
            cls._local.flags = {name: FlagStack(name) for name in FLAG_NAMES}
        return cls._local.flags

    @classmethod
    def get(cls, name: str) -> FlagStack:
        try:
            return cls._get_flags()[name]
        except KeyError:
            raise ValueError(
                f"Unknown flag {name!r}, expected one of {FLAG_NAMES}"
            ) from None

    @classmethod
    def _reset_state(cls) -> None:
        """Drop the calling thread's stacks (for testing)."""
        cls._local.__dict__.clear()


def is_tracking() -> bool:
    return FlagContext.get(TRACKING).value


def is_triggering() -> bool:
    return FlagContext.get(TRIGGERING).value


def is_packing() -> bool:
    return FlagContext.get(PACKING).value


def pause_tracking() -> None:
    FlagContext.get(TRACKING).pause()


def enable_tracking() -> None:
    FlagContext.get(TRACKING).enable()


def resume_tracking() -> bool:
    return FlagContext.get(TRACKING).resume()


def reset_tracking() -> None:
    FlagContext.get(TRACKING).reset()


def pause_triggering() -> None:
    FlagContext.get(TRIGGERING).pause()


def enable_triggering() -> None:
    FlagContext.get(TRIGGERING).enable()


def resume_triggering() -> bool:
    return FlagContext.get(TRIGGERING).resume()


def reset_triggering() -> None:
    FlagContext.get(TRIGGERING).reset()


def pause_packing() -> None:
    FlagContext.get(PACKING).pause()


def enable_packing() -> None:
    FlagContext.get(PACKING).enable()


def resume_packing() -> bool:
    return FlagContext.get(PACKING).resume()


def reset_packing() -> None:
    FlagContext.get(PACKING).reset()


def reset_all() -> None:
    """Clear every stack and force every flag back to True."""
    for name in FLAG_NAMES:
        FlagContext.get(name).reset()


@contextmanager
def paused(name: str) -> Iterator[None]:
    """Pause ``name`` for the duration of the block."""
    flag = FlagContext.get(name)
    flag.pause()
    try:
        yield
    finally:
        flag.resume()


@contextmanager
def enabled(name: str) -> Iterator[None]:
    """Enable ``name`` for the duration of the block."""
    flag = FlagContext.get(name)
    flag.enable()
    try:
        yield
    finally:
        flag.resume()
