# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_desk.core.state import AppState
from todo_desk.tasks.task_store import FailurePolicy, StoreConfig, TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap code.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="todo-test",
        log_level="DEBUG",
        log_to_file=False,
        data_dir=tmp_path,
        tasks_path=tmp_path / "tasks.json",
        failure_policy="log",
    )


@pytest.fixture()
def tasks_path(settings: SimpleNamespace) -> Path:
    return settings.tasks_path


@pytest.fixture()
def store(tasks_path: Path) -> TaskStore:
    return TaskStore(StoreConfig(path=tasks_path))


@pytest.fixture()
def strict_store(tasks_path: Path) -> TaskStore:
    return TaskStore(StoreConfig(path=tasks_path, failure_policy=FailurePolicy.RAISE))


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    """AppState wired to a real file-backed store under tmp_path."""
    return AppState(settings=settings, task_store=store)
