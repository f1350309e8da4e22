# src/todo_desk/tasks/task_codec.py

"""
Versioned JSON encoding of the whole task list.

Document layout:

    {"format": "todo-desk/tasks", "version": 1, "tasks": [ {...}, ... ]}

Each task record carries: id, description, completed, priority.
Decoding is all-or-nothing: any malformed record, or two records sharing
an id, rejects the document.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from .task_models import Task

FORMAT_TAG = "todo-desk/tasks"
FORMAT_VERSION = 1


class TaskFormatError(ValueError):
    """Stored data is not a task list this version understands."""


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "description": task.description,
        "completed": task.completed,
        "priority": task.priority,
    }


def record_to_task(rec: Any) -> Task:
    if not isinstance(rec, dict):
        raise TaskFormatError(f"task record must be an object, got {type(rec).__name__}")

    task_id = rec.get("id")
    description = rec.get("description")
    completed = rec.get("completed")
    priority = rec.get("priority")

    if not isinstance(task_id, str) or not task_id:
        raise TaskFormatError("task record has no id")
    if not isinstance(description, str):
        raise TaskFormatError(f"task {task_id}: description must be a string")
    if not isinstance(completed, bool):
        raise TaskFormatError(f"task {task_id}: completed must be a boolean")
    # bool is a subclass of int; reject it explicitly.
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise TaskFormatError(f"task {task_id}: priority must be an integer")

    return Task(description=description, priority=priority, completed=completed, id=task_id)


def encode_tasks(tasks: Iterable[Task]) -> str:
    doc = {
        "format": FORMAT_TAG,
        "version": FORMAT_VERSION,
        "tasks": [task_to_record(t) for t in tasks],
    }
    return json.dumps(doc, ensure_ascii=False, indent=2)


def decode_tasks(text: str) -> list[Task]:
    try:
        doc = json.loads(text)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, oversized integer literals, runaway nesting
        raise TaskFormatError(f"not valid JSON: {e}") from e

    if not isinstance(doc, dict):
        raise TaskFormatError("top-level value must be an object")
    if doc.get("format") != FORMAT_TAG:
        raise TaskFormatError(f"unknown format tag: {doc.get('format')!r}")

    version = doc.get("version")
    if isinstance(version, bool) or version != FORMAT_VERSION:
        raise TaskFormatError(f"unsupported version: {version!r}")

    raw_tasks = doc.get("tasks")
    if not isinstance(raw_tasks, list):
        raise TaskFormatError("'tasks' must be a list")

    tasks = [record_to_task(r) for r in raw_tasks]
    seen: set[str] = set()
    for t in tasks:
        if t.id in seen:
            raise TaskFormatError(f"duplicate task id: {t.id}")
        seen.add(t.id)
    return tasks
