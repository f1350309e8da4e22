# src/todo_desk/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Task:
    description: str
    priority: int
    completed: bool = False
    id: str = field(default_factory=new_task_id)

    def sort_key(self) -> tuple[bool, int]:
        """Incomplete before completed, then lower priority first."""
        return (self.completed, self.priority)
