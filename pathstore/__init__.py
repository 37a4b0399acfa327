"""
pathstore - Path-Tracking Reactive State

A reactive state container that records which fields a read touched and which
fields a write changed, so consumers are refreshed only when something they
depend on is written.
"""

from .binding import Component, Runtime, UseStore, bind, component_runtime, create
from .flags import (
    enable_packing,
    enable_tracking,
    enable_triggering,
    enabled,
    is_packing,
    is_tracking,
    is_triggering,
    pause_packing,
    pause_tracking,
    pause_triggering,
    paused,
    reset_all,
    reset_packing,
    reset_tracking,
    reset_triggering,
    resume_packing,
    resume_tracking,
    resume_triggering,
)
from .paths import get_in, is_under
from .produce import Draft, Patch, Produced, produce, track
from .raw import is_wrapped, to_raw
from .store import Store
from .subscription import (
    Cell,
    Consumer,
    FunctionSelector,
    KeySelector,
    Selector,
    WholeState,
    as_selector,
    is_affected,
)

__all__ = [
    # Engine
    "produce",
    "track",
    "Draft",
    "Patch",
    "Produced",
    # Raw resolution
    "to_raw",
    "is_wrapped",
    # Flags
    "pause_tracking",
    "enable_tracking",
    "resume_tracking",
    "reset_tracking",
    "pause_triggering",
    "enable_triggering",
    "resume_triggering",
    "reset_triggering",
    "pause_packing",
    "enable_packing",
    "resume_packing",
    "reset_packing",
    "is_tracking",
    "is_triggering",
    "is_packing",
    "paused",
    "enabled",
    "reset_all",
    # Store
    "Store",
    # Subscriptions
    "Consumer",
    "Cell",
    "Selector",
    "WholeState",
    "KeySelector",
    "FunctionSelector",
    "as_selector",
    "is_affected",
    "is_under",
    "get_in",
    # Binding
    "Runtime",
    "UseStore",
    "bind",
    "create",
    "Component",
    "component_runtime",
]
