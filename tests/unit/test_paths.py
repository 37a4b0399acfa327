"""Unit tests for path helpers."""

from dataclasses import dataclass

import pytest

from pathstore.paths import (
    get_in,
    has_field,
    is_composite,
    is_under,
    join_path,
    split_path,
)


@dataclass
class Box:
    content: dict


@pytest.mark.unit
def test_join_path_from_root_and_nested():
    assert join_path("", "a") == "a"
    assert join_path("a", "b") == "a.b"
    assert join_path("items", 0) == "items.0"


@pytest.mark.unit
def test_split_path():
    assert split_path("") == ()
    assert split_path("a") == ("a",)
    assert split_path("a.b.c") == ("a", "b", "c")


@pytest.mark.unit
@pytest.mark.parametrize(
    "path, dep, expected",
    [
        ("a", "a", True),
        ("a.b", "a", True),
        ("a.b.c", "a.b", True),
        ("ab", "a", False),
        ("a.bc", "a.b", False),
        ("a", "a.b", False),
        ("d", "a", False),
    ],
)
def test_is_under_respects_segment_boundaries(path, dep, expected):
    assert is_under(path, dep) is expected


@pytest.mark.unit
def test_is_composite():
    assert is_composite({})
    assert is_composite([])
    assert is_composite(Box({}))
    assert not is_composite(Box)
    assert not is_composite((1, 2))
    assert not is_composite("abc")
    assert not is_composite(1)
    assert not is_composite(None)


@pytest.mark.unit
def test_get_in_walks_mappings_sequences_and_attributes():
    state = {"rows": [{"box": Box({"k": "v"})}]}

    assert get_in(state, "rows.0.box.content.k") == "v"
    assert get_in(state, "") is state


@pytest.mark.unit
def test_get_in_through_none_raises():
    with pytest.raises(AttributeError):
        get_in({"a": None}, "a.b")
    with pytest.raises(KeyError):
        get_in({}, "a")


@pytest.mark.unit
def test_get_in_default_covers_only_the_last_segment():
    state = {"user": {"tags": ["x"]}, "empty": None}

    assert get_in(state, "later", None) is None
    assert get_in(state, "user.email", "none") == "none"
    assert get_in(state, "user.tags.3", 0) == 0
    assert get_in(state, "user.tags.0", None) == "x"
    with pytest.raises(KeyError):
        get_in(state, "missing.email", None)
    with pytest.raises(AttributeError):
        get_in(state, "empty.email", None)


@pytest.mark.unit
def test_has_field_per_container_kind():
    assert has_field({"a": 1}, "a")
    assert not has_field({"a": 1}, "b")
    assert has_field([1, 2], "1")
    assert not has_field([1, 2], "2")
    assert not has_field([1, 2], "x")
    assert has_field(Box({}), "content")
    assert not has_field(Box({}), "other")
