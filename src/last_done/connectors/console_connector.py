# src/last_done/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import handle_line
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleMessenger:
    """OutboundMessenger that prints fired reminders into the terminal."""

    async def send_text(self, *, text: str) -> None:
        print()
        _print_ts(f"🔔 {text}")


def _prompt(state: AppState) -> str:
    if state.session is not None:
        return f"[edit: {state.session.draft.name}] > "
    return "> "


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    app_name = str(getattr(state.settings, "app_name", "last-done"))
    _print_ts(f"[{app_name}] Type a task name to add it. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(_prompt(state)).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = handle_line(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        print(reply)

    # Leaving with an open editor behaves like dismissing it without Done.
    if state.session is not None:
        state.session.close()
        state.session = None

    logger.info("Console connector finished.")
