# src/todo_desk/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..core.state import AppState
from ..tasks.task_models import Task
from ..tasks.task_store import TaskNotFoundError, TaskPersistenceError

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str]

PRIORITY_MIN = 1
PRIORITY_MAX = 10
PRIORITY_DEFAULT = 1

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args, emit)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def format_task(task: Task) -> str:
    status = "[x] " if task.completed else "[ ] "
    return f"{status}(P{task.priority}) {task.description}"


def format_task_list(tasks: Iterable[Task]) -> str:
    lines = [f"{i}. {format_task(t)}" for i, t in enumerate(tasks, start=1)]
    if not lines:
        return "No tasks. Add one with /add <description>."
    return "\n".join(lines)


# ---- input validation ----


def parse_add_args(args: list[str]) -> tuple[str, int]:
    """
    Parse "/add" arguments: [-p N | --priority N] [--] description...

    Options are only read before the description; "--" ends them, so the
    rest is taken verbatim (the console uses this for plain text).

    Raises ValueError with a user-facing message on bad input.
    """
    priority = PRIORITY_DEFAULT

    rest = list(args)
    while rest:
        arg = rest[0]
        if arg == "--":
            rest = rest[1:]
            break
        if arg not in ("-p", "--priority"):
            break
        if len(rest) < 2:
            raise ValueError(f"Missing value after {arg}.")
        raw = rest[1]
        rest = rest[2:]
        try:
            priority = int(raw)
        except ValueError:
            raise ValueError(f"Priority must be a whole number, got {raw!r}.") from None

    description = " ".join(rest).strip()
    if not description:
        raise ValueError("Task description must not be empty.")
    if not PRIORITY_MIN <= priority <= PRIORITY_MAX:
        raise ValueError(f"Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}.")
    return description, priority


def _parse_row(args: list[str], verb: str) -> int:
    """1-based console row -> 0-based display index."""
    if not args:
        raise ValueError(f"Please select a task to {verb}. Usage: /{verb} <number>")
    raw = args[0]
    try:
        row = int(raw)
    except ValueError:
        raise ValueError(f"Task number must be a whole number, got {raw!r}.") from None
    return row - 1


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    store = state.task_store
    tasks = store.list_tasks()
    done = sum(1 for t in tasks if t.completed)
    return (
        "Status:\n"
        f"  Tasks: {len(tasks)} ({len(tasks) - done} open, {done} done)\n"
        f"  File: {store.path}\n"
        f"  Failure policy: {store.failure_policy.value}"
    )


def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return format_task_list(state.task_store.list_tasks())


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add Buy milk          -> priority 1
    /add -p 5 Buy milk     -> priority 5
    """
    try:
        description, priority = parse_add_args(args)
    except ValueError as e:
        return str(e)

    try:
        task = state.task_store.add(description, priority)
    except TaskPersistenceError as e:
        logger.warning("Add failed: %s", e)
        return f"Could not save tasks: {e}"

    logger.debug("Console added task id=%s", task.id)
    if emit:
        emit(f"Added: {format_task(task)}")
    return format_task_list(state.task_store.list_tasks())


def _row_command(
    state: AppState,
    args: list[str],
    verb: str,
    op: Callable[[int], bool],
) -> str:
    try:
        index = _parse_row(args, verb)
    except ValueError as e:
        return str(e)

    try:
        ok = op(index)
    except TaskNotFoundError:
        ok = False
    except TaskPersistenceError as e:
        logger.warning("/%s failed: %s", verb, e)
        return f"Could not save tasks: {e}"

    if not ok:
        return f"No task #{index + 1}."
    return format_task_list(state.task_store.list_tasks())


def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return _row_command(state, args, "complete", state.task_store.complete_task)


def cmd_undo(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return _row_command(state, args, "uncomplete", state.task_store.uncomplete_task)


def cmd_delete(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return _row_command(state, args, "delete", state.task_store.delete_task)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task counts and storage settings.")
registry.register("list", cmd_list, help_text="Show tasks (open first, then by priority).", aliases=["ls"])
registry.register(
    "add",
    cmd_add,
    help_text=f"Add a task: /add [-p {PRIORITY_MIN}-{PRIORITY_MAX}] <description>.",
    aliases=["a"],
)
registry.register("done", cmd_done, help_text="Mark task #N as completed: /done N.", aliases=["complete"])
registry.register("undo", cmd_undo, help_text="Mark task #N as not completed: /undo N.", aliases=["uncomplete"])
registry.register("del", cmd_delete, help_text="Delete task #N: /del N.", aliases=["delete", "rm"])
