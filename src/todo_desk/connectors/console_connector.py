# src/todo_desk/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import format_task_list
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("/exit", "/quit")


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _print_ts_block(text: str) -> None:
    ts = _ts_local()
    lines = text.splitlines() or [""]
    for i, line in enumerate(lines):
        # keep alignment for multi-line command output
        prefix = f"[{ts}] " if i == 0 else " " * (len(ts) + 3)
        print(prefix + line)


def run_console_loop(state: AppState, *, read_line: Callable[[str], str] = input) -> None:
    """
    Interactive task console.

    Lines starting with "/" are commands; anything else is added as a new
    task with the default priority. Ends on /exit, /quit, EOF or Ctrl+C.
    """
    logger.info("Console connector started (tasks=%s).", state.task_store.count())
    app_name = str(getattr(state.settings, "app_name", "todo-desk"))
    _print_ts(f"[{app_name}] Type a task to add it. Use /help for commands. Use /exit to quit.")
    _print_ts_block(format_task_list(state.task_store.list_tasks()))

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = read_line("todo> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in EXIT_COMMANDS:
            logger.info("Console exit command received.")
            break

        line = user_input if user_input.startswith("/") else f"/add -- {user_input}"

        try:
            cmd_response = command_registry.handle(state, line, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts_block(cmd_response)

    logger.info("Console connector finished.")

