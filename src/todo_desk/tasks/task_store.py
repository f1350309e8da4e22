# src/todo_desk/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import os
from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path

from .task_codec import TaskFormatError, decode_tasks, encode_tasks
from .task_models import Task

logger = logging.getLogger(__name__)


class FailurePolicy(StrEnum):
    """
    What the store does when something goes wrong.

    - "log": log and carry on (bad index -> no-op, failed save -> state kept in memory,
      failed load -> empty list). Nothing is raised.
    - "raise": surface the same conditions as TaskStoreError subclasses.
    """

    LOG = "log"
    RAISE = "raise"

    @classmethod
    def from_env(cls, raw: str | None) -> FailurePolicy:
        if not raw:
            return cls.LOG
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.LOG


class TaskStoreError(Exception):
    """Base class for errors raised under FailurePolicy.RAISE."""


class TaskPersistenceError(TaskStoreError):
    """The task file could not be written or read back."""


class TaskNotFoundError(TaskStoreError, LookupError):
    """No task at the given display index / with the given id."""


@dataclass(frozen=True, slots=True)
class StoreConfig:
    path: Path
    failure_policy: FailurePolicy = FailurePolicy.LOG

    @staticmethod
    def from_settings(settings) -> StoreConfig:
        return StoreConfig(
            path=Path(settings.tasks_path),
            failure_policy=FailurePolicy.from_env(str(getattr(settings, "failure_policy", "log"))),
        )


class TaskStore:
    """
    JSON-file task store.

    The whole list lives in memory and is written back to one file after
    every successful mutation. The file is read once, at construction.

    Addressing:
    - positional operations take a *display index*: the row number in the
      list returned by list_tasks() (0-based). list_tasks() is a pure
      function of the current tasks, so index i always means "row i of what
      the user sees", whatever the insertion order is.
    - id-based operations take Task.id and are unaffected by sorting.
    """

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._path = Path(config.path)
        self._tasks: list[Task] = self.load()
        logger.info(
            "TaskStore ready path=%s total=%s policy=%s",
            self._path,
            len(self._tasks),
            config.failure_policy.value,
        )

    @property
    def path(self) -> Path:
        return self._path

    @property
    def failure_policy(self) -> FailurePolicy:
        return self._config.failure_policy

    def close(self) -> None:
        """Compatibility hook for shutdown (every mutation is already on disk)."""
        return

    # ---- low-level helpers ----

    def _raising(self) -> bool:
        return self._config.failure_policy is FailurePolicy.RAISE

    def _sorted_view(self) -> list[Task]:
        # list.sort is stable: equal (completed, priority) keep insertion order.
        return sorted(self._tasks, key=Task.sort_key)

    def _at(self, index: int) -> Task | None:
        view = self._sorted_view()
        if 0 <= index < len(view):
            return view[index]
        logger.debug("Task index out of range index=%s total=%s", index, len(view))
        if self._raising():
            raise TaskNotFoundError(f"no task at index {index} (total {len(view)})")
        return None

    def _by_id(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        logger.debug("Unknown task id=%s", task_id)
        if self._raising():
            raise TaskNotFoundError(f"no task with id {task_id!r}")
        return None

    def _set_completed(self, task: Task | None, completed: bool) -> bool:
        if task is None:
            return False
        task.completed = completed
        logger.debug("Task %s id=%s", "completed" if completed else "reopened", task.id)
        self.save()
        return True

    def _remove(self, task: Task | None) -> bool:
        if task is None:
            return False
        self._tasks = [t for t in self._tasks if t is not task]
        logger.debug("Task deleted id=%s", task.id)
        self.save()
        return True

    # ---- persistence ----

    def save(self) -> None:
        """Write the whole list to the configured path, replacing the previous file."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_name(self._path.name + ".tmp")
            tmp.write_text(encode_tasks(self._tasks), "utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            logger.error("Failed to save tasks to %s: %s", self._path, e)
            if self._raising():
                raise TaskPersistenceError(f"failed to save tasks to {self._path}") from e
            return
        logger.debug("Saved %d tasks to %s", len(self._tasks), self._path)

    def load(self) -> list[Task]:
        """
        Read the task file.

        A missing file means "no tasks yet" under every policy. An unreadable or
        incompatible file is logged and treated as empty (or raised under RAISE).
        """
        if not self._path.exists():
            return []
        try:
            tasks = decode_tasks(self._path.read_text("utf-8"))
        except (OSError, UnicodeDecodeError, TaskFormatError) as e:
            logger.warning("Ignoring unreadable task file %s: %s", self._path, e)
            if self._raising():
                raise TaskPersistenceError(f"failed to load tasks from {self._path}") from e
            return []
        logger.debug("Loaded %d tasks from %s", len(tasks), self._path)
        return tasks

    # ---- public API ----

    def __len__(self) -> int:
        return len(self._tasks)

    def count(self) -> int:
        return len(self._tasks)

    def add(self, description: str, priority: int) -> Task:
        task = Task(description=description, priority=int(priority))
        self._tasks.append(task)
        logger.debug("Task added id=%s priority=%s", task.id, task.priority)
        self.save()
        return replace(task)

    def list_tasks(self) -> list[Task]:
        """Tasks sorted for display: open first, then by ascending priority."""
        return [replace(t) for t in self._sorted_view()]

    def complete_task(self, index: int) -> bool:
        return self._set_completed(self._at(index), True)

    def uncomplete_task(self, index: int) -> bool:
        return self._set_completed(self._at(index), False)

    def delete_task(self, index: int) -> bool:
        return self._remove(self._at(index))

    def get(self, task_id: str) -> Task | None:
        with contextlib.suppress(TaskNotFoundError):
            task = self._by_id(task_id)
            return replace(task) if task is not None else None
        return None

    def complete(self, task_id: str) -> bool:
        return self._set_completed(self._by_id(task_id), True)

    def uncomplete(self, task_id: str) -> bool:
        return self._set_completed(self._by_id(task_id), False)

    def delete(self, task_id: str) -> bool:
        return self._remove(self._by_id(task_id))
