"""Unit tests for raw resolution of drafts."""

import gc

import pytest

from pathstore import Draft, is_wrapped, produce, to_raw
from pathstore import raw
from pathstore.produce import Recorder


@pytest.mark.unit
def test_to_raw_is_identity_for_plain_values():
    value = {"a": 1}
    assert to_raw(value) is value
    assert to_raw(3) == 3
    assert to_raw(None) is None


@pytest.mark.unit
def test_is_wrapped_handles_unhashable_and_primitive_values():
    assert not is_wrapped({"a": 1})
    assert not is_wrapped([1, 2])
    assert not is_wrapped("text")
    assert not is_wrapped(None)


@pytest.mark.unit
def test_to_raw_resolves_deep_chains():
    """A draft of a draft of a draft unwraps to the original object"""
    base = {"a": 1}
    handle = base
    for _ in range(5):
        handle = produce(handle, lambda draft: draft).result

    assert is_wrapped(handle)
    assert to_raw(handle) is base


@pytest.mark.unit
def test_nested_drafts_are_registered_on_read():
    state = {"a": {"b": {"c": 1}}}

    deepest = produce(state, lambda draft: draft.a.b).result

    assert is_wrapped(deepest)
    assert to_raw(deepest) is state["a"]["b"]


@pytest.mark.unit
def test_association_does_not_keep_drafts_alive():
    """Entries disappear once their draft is unreachable"""
    gc.collect()
    before = len(raw._raw_by_handle)
    draft = Draft({"a": 1}, "", Recorder())
    assert len(raw._raw_by_handle) == before + 1

    del draft
    gc.collect()

    assert len(raw._raw_by_handle) == before
