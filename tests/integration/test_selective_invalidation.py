"""End-to-end selective invalidation across a store and several consumers."""

import pytest

from pathstore import Consumer, Patch, Store, produce


@pytest.fixture
def todo_store():
    return Store(
        {
            "filter": "all",
            "todos": [
                {"title": "write tests", "done": False},
                {"title": "ship", "done": False},
            ],
            "user": {"name": "Ada"},
        }
    )


def recording_consumer(store, selector):
    refreshed = []
    consumer = Consumer(store, selector, cell=(lambda: None, refreshed.append))
    consumer.start()
    return consumer, refreshed


@pytest.mark.integration
def test_each_consumer_refreshes_only_for_its_own_fields(todo_store):
    _, filter_updates = recording_consumer(todo_store, "filter")
    _, todo_updates = recording_consumer(
        todo_store, lambda s: [t.title for t in s.todos if not t.done]
    )
    _, user_updates = recording_consumer(todo_store, lambda s: s.user.name)

    todo_store.set_state({"filter": "active"})
    todo_store.set_state(
        lambda s: {"todos": [{"title": "write tests", "done": True}, s.todos[1]]}
    )

    assert filter_updates == ["active"]
    assert todo_updates == [["ship"]]
    assert user_updates == []


@pytest.mark.integration
def test_patches_from_produce_drive_consumers_directly(todo_store):
    """Patches recorded by produce can be replayed to a consumer's filter"""
    consumer, refreshed = recording_consumer(todo_store, lambda s: s.todos[0].done)

    state = todo_store.get_state()

    def finish_first(draft):
        draft.todos[0].done = True

    produced = produce(state, finish_first)

    assert produced.patches == [Patch("todos.0.done", True)]
    assert consumer.notify(state, produced.patches)
    assert refreshed == [True]


@pytest.mark.integration
def test_dispose_silences_all_consumers(todo_store):
    _, updates = recording_consumer(todo_store, "filter")

    todo_store.dispose()
    todo_store.set_state({"filter": "done"})

    assert updates == []
