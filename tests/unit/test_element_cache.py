import pytest
from unittest.mock import MagicMock

from inspector_session.layers.sense.element_cache import (
    COLLECTION_MEMBER,
    SCALAR,
    CachedElement,
    ElementCache,
)


def _handle(element_id):
    handle = MagicMock()
    handle.value = element_id
    return handle


def test_scalar_entry_is_unnamed_until_assigned():
    cache = ElementCache()
    entry = cache.add_scalar(_handle("a"), "id", "submit")

    assert entry.kind == SCALAR
    assert entry.display_name is None
    assert entry.reference is None
    assert cache.scalar_counter == 1


def test_assign_name_if_absent_is_idempotent():
    cache = ElementCache()
    cache.add_scalar(_handle("a"), "id", "submit")

    first = cache.assign_name_if_absent("a")
    second = cache.assign_name_if_absent("a")

    assert first.display_name == "el1"
    assert second.display_name == "el1"
    assert cache.scalar_counter == 2
    assert cache.get("a") is second


def test_assign_name_returns_new_record():
    """Naming replaces the entry instead of mutating the original."""
    cache = ElementCache()
    original = cache.add_scalar(_handle("a"), "id", "submit")
    named = cache.assign_name_if_absent("a")

    assert original.display_name is None
    assert named.display_name == "el1"
    assert named.id == original.id
    assert named.handle is original.handle


def test_assign_name_unknown_id_raises_key_error():
    cache = ElementCache()
    with pytest.raises(KeyError):
        cache.assign_name_if_absent("missing")


def test_collection_members_named_immediately():
    cache = ElementCache()
    name, members = cache.add_collection([_handle("x"), _handle("y")], "class name", "row")

    assert name == "els1"
    assert [m.collection_index for m in members] == [0, 1]
    assert all(m.kind == COLLECTION_MEMBER for m in members)
    assert all(m.collection_name == "els1" for m in members)
    assert members[1].reference == "els1[1]"
    assert len(cache) == 2


def test_empty_collection_consumes_a_name():
    cache = ElementCache()
    first, members = cache.add_collection([], "class name", "nothing")
    second, _ = cache.add_collection([], "class name", "nothing")

    assert members == []
    assert (first, second) == ("els1", "els2")


def test_assigning_a_name_to_a_member_keeps_it():
    cache = ElementCache()
    cache.add_collection([_handle("x")], "class name", "row")

    entry = cache.assign_name_if_absent("x")

    assert entry.display_name == "els1"
    assert cache.scalar_counter == 1


def test_counters_are_independent():
    cache = ElementCache()
    cache.add_scalar(_handle("a"), "id", "a")
    cache.add_collection([_handle("b")], "id", "b")
    cache.assign_name_if_absent("a")
    cache.add_collection([], "id", "c")
    cache.add_scalar(_handle("d"), "id", "d")

    assert cache.assign_name_if_absent("d").display_name == "el2"
    assert cache.collection_counter == 3


def test_reset_names_keeps_entries():
    cache = ElementCache()
    cache.add_scalar(_handle("a"), "id", "submit")
    cache.assign_name_if_absent("a")
    cache.add_collection([_handle("b")], "xpath", "//row")

    before = {e.id: (e.strategy, e.selector, e.collection_name, e.collection_index) for e in cache}
    cache.reset_names()
    after = {e.id: (e.strategy, e.selector, e.collection_name, e.collection_index) for e in cache}

    assert before == after
    assert all(e.display_name is None for e in cache)
    assert cache.scalar_counter == 1
    assert cache.collection_counter == 1
    assert cache.assign_name_if_absent("a").display_name == "el1"


def test_reused_id_replaces_entry():
    cache = ElementCache()
    cache.add_scalar(_handle("a"), "id", "first")
    cache.assign_name_if_absent("a")
    cache.add_scalar(_handle("a"), "id", "second")

    assert len(cache) == 1
    assert cache.get("a").selector == "second"
    assert cache.get("a").display_name is None


def test_find_by_reference_skips_unassigned_names():
    cache = ElementCache()
    cache.add_scalar(_handle("a"), "id", "submit")

    assert cache.find_by_reference("el1") is None

    cache.assign_name_if_absent("a")
    assert cache.find_by_reference("el1").id == "a"


def test_find_by_reference_prefers_live_collection_after_reset():
    cache = ElementCache()
    cache.add_collection([_handle("a-0"), _handle("a-1")], "class name", "a")
    cache.reset_names()
    cache.add_collection([_handle("b-0")], "class name", "b")

    assert cache.find_by_reference("els1[0]").id == "b-0"
    assert cache.find_by_reference("els1[1]") is None


def test_to_dict_omits_handle_and_collection_fields_for_scalars():
    entry = CachedElement(id="a", handle=object(), strategy="id", selector="submit")
    data = entry.to_dict()

    assert data == {
        "id": "a",
        "strategy": "id",
        "selector": "submit",
        "kind": "scalar",
        "display_name": None,
    }
