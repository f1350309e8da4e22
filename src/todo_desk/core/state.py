# src/todo_desk/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings object (todo_desk.config.Settings or a test stand-in).
    settings: object
    task_store: TaskStore
