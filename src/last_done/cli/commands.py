# src/last_done/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from .. import __version__
from ..config import describe
from ..core.state import AppState
from ..reminders.editing import EditSession, EditSessionError
from ..tasks.task_api import add_task, delete_task, list_tasks, open_editor, resolve_ref
from ..tasks.task_models import ReminderInterval, Task

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M"

_INTERVAL_NAMES = {
    "none": ReminderInterval.NONE,
    "off": ReminderInterval.NONE,
    "custom": ReminderInterval.CUSTOM,
    "week": ReminderInterval.WEEK,
    "1week": ReminderInterval.WEEK,
    "4weeks": ReminderInterval.FOUR_WEEKS,
    "month": ReminderInterval.FOUR_WEEKS,
    "3months": ReminderInterval.QUARTER,
    "quarter": ReminderInterval.QUARTER,
}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /list, ...)."""

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

    def handle(self, state: AppState, line: str) -> str | None:
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

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  Any other text adds a task done right now.")
        return "\n".join(lines)


registry = CommandRegistry()


def handle_line(state: AppState, line: str) -> str:
    """Entry point for one line of user input: a command, or a new task name."""
    try:
        reply = registry.handle(state, line)
    except EditSessionError as e:
        return str(e).capitalize() + "."
    if reply is not None:
        return reply

    try:
        task = add_task(state, line)
    except ValueError:
        return "Task name must not be empty."
    return f"Added: {task.name}"


# ---- parsing / rendering helpers ----


def parse_when(raw: str, now: datetime) -> datetime:
    """
    Parse a user-entered moment.

    Accepts "now", "today" (keeps the current time), "YYYY-MM-DD" (keeps the
    current time of day) and "YYYY-MM-DD HH:MM".
    """
    text = raw.strip().lower()
    if text in ("now", "today"):
        return now
    try:
        return datetime.strptime(text, DATE_FORMAT)
    except ValueError:
        pass
    day = datetime.strptime(text, "%Y-%m-%d")
    return day.replace(hour=now.hour, minute=now.minute, second=now.second)


def parse_interval(raw: str) -> ReminderInterval:
    key = raw.strip().lower().replace(" ", "")
    if key in _INTERVAL_NAMES:
        return _INTERVAL_NAMES[key]
    value = int(key)
    # Closed selector: reject anything outside the enum.
    return ReminderInterval(value)


def format_when(moment: datetime | None) -> str:
    return moment.strftime(DATE_FORMAT) if moment is not None else "-"


def render_row(index: int, task: Task, now: datetime) -> str:
    star = " ★" if task.reminder_active(now) else ""
    return f"{index:>3}. {task.name}{star}\n     Last time: {format_when(task.date)}"


def render_draft(draft: Task) -> str:
    lines = [
        "Edit Task",
        f"  Task name: {draft.name}",
        f"  Date: {format_when(draft.date)}",
        f"  Reminder interval: {draft.reminder_interval.label}",
    ]
    if draft.has_reminder:
        lines.append(f"  Notification date: {format_when(draft.notification_date)}")
        lines.append(f"  Notification text: {draft.notification_text}")
        if draft.notification_date is not None:
            lines.append(f"  Scheduled for: {format_when(draft.notification_date)}")
    return "\n".join(lines)


def _session(state: AppState) -> EditSession:
    if state.session is None:
        raise EditSessionError("no task is being edited, use /edit <n> first")
    return state.session


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_about(state: AppState, args: list[str]) -> str:
    app_name = str(getattr(state.settings, "app_name", "last-done"))
    return f"About this app\n  {app_name} v{__version__}\n  Keeps track of the last time you did things."


def cmd_status(state: AppState, args: list[str]) -> str:
    settings_line = describe(state.settings) if hasattr(state.settings, "storage_backend") else "-"
    granted = state.permission.granted
    perm = "unknown" if granted is None else ("granted" if granted else "denied")
    editing = state.session.draft.name if state.session is not None else "-"
    return (
        "Status:\n"
        f"  Settings: {settings_line}\n"
        f"  Tasks: {len(state.store)}\n"
        f"  Pending notifications: {len(state.center.pending())}\n"
        f"  Notification permission: {perm}\n"
        f"  Editing: {editing}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list          -> all tasks, most recently done first
    /list <query>  -> only tasks whose name contains query
    """
    query = " ".join(args)
    tasks = list_tasks(state, query)
    if not tasks:
        return f"No tasks matching {query!r}." if query else "No tasks yet. Type a name to add one."
    now = state.clock.now()
    return "\n".join(render_row(i, t, now) for i, t in enumerate(tasks, start=1))


def cmd_add(state: AppState, args: list[str]) -> str:
    try:
        task = add_task(state, " ".join(args))
    except ValueError:
        return "Usage: /add <task name>"
    return f"Added: {task.name}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <n>"
    task_id = resolve_ref(state, args[0])
    task = state.store.get(task_id) if task_id else None
    if task is None:
        return "Task not found."
    delete_task(state, task.id)
    return f"Deleted: {task.name}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /edit <n>"
    task_id = resolve_ref(state, args[0])
    session = open_editor(state, task_id) if task_id else None
    if session is None:
        return "Task not found."
    return render_draft(session.draft) + "\n(/name /date /interval /notify /text, then /done or /cancel)"


def cmd_name(state: AppState, args: list[str]) -> str:
    session = _session(state)
    draft = session.change_name(" ".join(args))
    return render_draft(draft)


def cmd_date(state: AppState, args: list[str]) -> str:
    session = _session(state)
    try:
        when = parse_when(" ".join(args), state.clock.now())
    except ValueError:
        return "Usage: /date YYYY-MM-DD [HH:MM] | now"
    return render_draft(session.change_date(when))


def cmd_interval(state: AppState, args: list[str]) -> str:
    session = _session(state)
    try:
        interval = parse_interval(" ".join(args))
    except ValueError:
        return "Usage: /interval none | custom | week | 4weeks | 3months"
    return render_draft(session.change_interval(interval))


def cmd_notify(state: AppState, args: list[str]) -> str:
    session = _session(state)
    try:
        when = parse_when(" ".join(args), state.clock.now())
    except ValueError:
        return "Usage: /notify YYYY-MM-DD [HH:MM]"
    return render_draft(session.change_notification_date(when))


def cmd_text(state: AppState, args: list[str]) -> str:
    session = _session(state)
    return render_draft(session.change_notification_text(" ".join(args)))


def cmd_show(state: AppState, args: list[str]) -> str:
    return render_draft(_session(state).draft)


def cmd_done(state: AppState, args: list[str]) -> str:
    session = _session(state)
    state.session = None
    task = session.commit()
    return f"Saved: {task.name}"


def cmd_cancel(state: AppState, args: list[str]) -> str:
    session = _session(state)
    state.session = None
    session.close()
    return "Edit discarded."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List tasks: /list [search text].", aliases=["ls", "search"])
registry.register("add", cmd_add, help_text="Add a task done right now: /add <name>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <n>.", aliases=["rm"])
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <n>.")
registry.register("name", cmd_name, help_text="(editing) Rename the task.")
registry.register("date", cmd_date, help_text="(editing) Set last done: /date YYYY-MM-DD [HH:MM].")
registry.register(
    "interval",
    cmd_interval,
    help_text="(editing) Reminder: none | custom | week | 4weeks | 3months.",
)
registry.register("notify", cmd_notify, help_text="(editing) Notification date: /notify YYYY-MM-DD [HH:MM].")
registry.register("text", cmd_text, help_text="(editing) Notification text.")
registry.register("show", cmd_show, help_text="(editing) Show the task being edited.")
registry.register("done", cmd_done, help_text="(editing) Save changes.")
registry.register("cancel", cmd_cancel, help_text="(editing) Discard changes.")
registry.register("about", cmd_about, help_text="About this app.")
registry.register("status", cmd_status, help_text="Show storage, permission and pending notifications.")
