# tests/test_task_store.py

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from todo_desk.tasks.task_store import (
    FailurePolicy,
    StoreConfig,
    TaskNotFoundError,
    TaskPersistenceError,
    TaskStore,
)


_DUPLICATE_IDS = json.dumps(
    {
        "format": "todo-desk/tasks",
        "version": 1,
        "tasks": [
            {"id": "a", "description": "one", "completed": False, "priority": 1},
            {"id": "a", "description": "two", "completed": False, "priority": 2},
        ],
    }
)


def _view(store: TaskStore) -> list[tuple[str, bool, int]]:
    return [(t.description, t.completed, t.priority) for t in store.list_tasks()]


def _assert_display_order(store: TaskStore) -> None:
    keys = [(t.completed, t.priority) for t in store.list_tasks()]
    assert keys == sorted(keys)


def test_add_sorts_lower_priority_first(store: TaskStore) -> None:
    store.add("Buy milk", 5)
    store.add("Write report", 1)

    assert _view(store) == [("Write report", False, 1), ("Buy milk", False, 5)]


def test_completed_task_moves_after_open_tasks(store: TaskStore) -> None:
    store.add("Write report", 1)
    store.add("Buy milk", 5)

    assert store.complete_task(0) is True

    assert _view(store) == [("Buy milk", False, 5), ("Write report", True, 1)]


def test_uncomplete_reverses_complete(store: TaskStore) -> None:
    store.add("Write report", 1)
    store.add("Buy milk", 5)

    store.complete_task(0)
    # completed task is now displayed last
    assert store.uncomplete_task(1) is True

    assert _view(store) == [("Write report", False, 1), ("Buy milk", False, 5)]


def test_equal_priorities_keep_insertion_order(store: TaskStore) -> None:
    for name in ("a", "b", "c"):
        store.add(name, 3)
    store.add("first", 1)

    assert [t.description for t in store.list_tasks()] == ["first", "a", "b", "c"]


def test_list_is_always_sorted_and_length_tracks_adds_and_deletes(store: TaskStore) -> None:
    priorities = [7, 3, 9, 1, 3, 10, 2]
    for i, p in enumerate(priorities):
        store.add(f"task {i}", p)
    _assert_display_order(store)

    store.complete_task(2)
    store.complete_task(0)
    _assert_display_order(store)

    assert store.delete_task(1) is True
    assert store.delete_task(len(store)) is False
    assert store.delete_task(-1) is False

    assert len(store.list_tasks()) == len(priorities) - 1
    _assert_display_order(store)


def test_index_addresses_display_order(store: TaskStore) -> None:
    store.add("low", 9)
    store.add("high", 1)

    # row 0 on screen is "high", even though it was inserted second
    store.delete_task(0)

    assert _view(store) == [("low", False, 9)]


def test_list_returns_copies(store: TaskStore) -> None:
    store.add("Buy milk", 5)

    shown = store.list_tasks()
    shown[0].completed = True
    shown.clear()

    assert _view(store) == [("Buy milk", False, 5)]


@pytest.mark.parametrize("index", [-1, 2, 100])
def test_out_of_range_index_is_a_silent_noop(store: TaskStore, tasks_path: Path, index: int) -> None:
    store.add("a", 1)
    store.add("b", 2)
    before = tasks_path.read_text("utf-8")

    assert store.complete_task(index) is False
    assert store.uncomplete_task(index) is False
    assert store.delete_task(index) is False

    assert _view(store) == [("a", False, 1), ("b", False, 2)]
    assert tasks_path.read_text("utf-8") == before


def test_round_trip_through_a_fresh_store(store: TaskStore, tasks_path: Path) -> None:
    store.add("Buy milk", 5)
    store.add("Write report", 1)
    store.add("Call mom", 3)
    store.complete_task(1)

    reloaded = TaskStore(StoreConfig(path=tasks_path))

    assert len(reloaded) == 3
    assert reloaded.list_tasks() == store.list_tasks()


def test_every_mutation_is_persisted(store: TaskStore, tasks_path: Path) -> None:
    task = store.add("Buy milk", 5)
    doc = json.loads(tasks_path.read_text("utf-8"))
    assert doc["tasks"] == [
        {"id": task.id, "description": "Buy milk", "completed": False, "priority": 5}
    ]

    store.complete(task.id)
    assert json.loads(tasks_path.read_text("utf-8"))["tasks"][0]["completed"] is True

    store.delete(task.id)
    assert json.loads(tasks_path.read_text("utf-8"))["tasks"] == []


def test_id_operations(store: TaskStore) -> None:
    milk = store.add("Buy milk", 5)
    report = store.add("Write report", 1)

    assert store.complete(milk.id) is True
    got = store.get(milk.id)
    assert got is not None and got.completed is True

    assert store.uncomplete(milk.id) is True
    assert store.delete(report.id) is True
    assert store.get(report.id) is None
    assert store.complete("missing") is False
    assert store.delete("missing") is False
    assert store.count() == 1


def test_store_does_not_validate_input(store: TaskStore) -> None:
    store.add("", 0)
    store.add("huge", 1000)

    assert _view(store) == [("", False, 0), ("huge", False, 1000)]


def test_missing_file_starts_empty(tmp_path: Path) -> None:
    store = TaskStore(StoreConfig(path=tmp_path / "nested" / "tasks.json"))
    assert store.list_tasks() == []
    assert not (tmp_path / "nested" / "tasks.json").exists()


@pytest.mark.parametrize(
    "content",
    [
        "not json at all",
        "[]",
        '{"format": "something-else", "version": 1, "tasks": []}',
        '{"format": "todo-desk/tasks", "version": 99, "tasks": []}',
        "[" * 200_000 + "]" * 200_000,
        '{"format": "todo-desk/tasks", "version": 1, "tasks": [{"id": "x", "description": "d", '
        '"completed": false, "priority": ' + "1" * 5000 + "}]}",
        _DUPLICATE_IDS,
    ],
)
def test_incompatible_file_loads_empty_and_logs(
    tasks_path: Path, content: str, caplog: pytest.LogCaptureFixture
) -> None:
    tasks_path.write_text(content, "utf-8")

    with caplog.at_level(logging.WARNING, logger="todo_desk.tasks.task_store"):
        store = TaskStore(StoreConfig(path=tasks_path))

    assert store.list_tasks() == []
    assert "Ignoring unreadable task file" in caplog.text


def test_save_failure_is_logged_and_state_kept(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", "utf-8")
    # parent "directory" is a regular file, so every save fails
    store = TaskStore(StoreConfig(path=blocker / "tasks.json"))

    with caplog.at_level(logging.ERROR, logger="todo_desk.tasks.task_store"):
        store.add("Buy milk", 5)

    assert _view(store) == [("Buy milk", False, 5)]
    assert "Failed to save tasks" in caplog.text


def test_raise_policy_surfaces_bad_index(strict_store: TaskStore) -> None:
    strict_store.add("a", 1)

    with pytest.raises(TaskNotFoundError):
        strict_store.complete_task(1)
    with pytest.raises(TaskNotFoundError):
        strict_store.delete("missing")
    assert strict_store.get("missing") is None


def test_raise_policy_surfaces_save_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", "utf-8")
    store = TaskStore(StoreConfig(path=blocker / "tasks.json", failure_policy=FailurePolicy.RAISE))

    with pytest.raises(TaskPersistenceError):
        store.add("Buy milk", 5)
    # the mutation still happened in memory
    assert len(store) == 1


def test_raise_policy_surfaces_corrupt_file(tasks_path: Path) -> None:
    tasks_path.write_text("{", "utf-8")

    with pytest.raises(TaskPersistenceError):
        TaskStore(StoreConfig(path=tasks_path, failure_policy=FailurePolicy.RAISE))


def test_failure_policy_from_env() -> None:
    assert FailurePolicy.from_env(None) is FailurePolicy.LOG
    assert FailurePolicy.from_env(" RAISE ") is FailurePolicy.RAISE
    assert FailurePolicy.from_env("bogus") is FailurePolicy.LOG
