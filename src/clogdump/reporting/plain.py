from __future__ import annotations

import sys
from typing import Any

from .base import (
    Reporter,
    TaskStatus,
    TaskTable,
    format_completion,
    get_verbosity,
)

ICONS = {
    TaskStatus.SUCCESS: "✔",
    TaskStatus.FAILED: "✖",
    TaskStatus.SKIPPED: "→",
}

# label, ANSI color
_LEVELS = {
    "info": ("INFO", "32"),
    "error": ("ERROR", "31"),
    "warning": ("WARN", "33"),
}


class PlainReporter(Reporter):
    """Line-oriented reporter on stderr; colors only on a TTY."""

    supports_progress = False

    def __init__(self, stream=None, use_color: bool | None = None):
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color
        self._tasks = TaskTable()

    def _paint(self, color: str, text: str) -> str:
        return f"\x1b[{color}m{text}\x1b[0m" if self.use_color else text

    def _write(self, text: str) -> None:
        self.stream.write(text + "\n")

    def _tagged(self, level: str, message: str) -> None:
        label, color = _LEVELS[level]
        self._write(f"{self._paint(color, label)}: {message}")

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._tasks.open(task_id, name, total, meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._tasks.step(task_id, step, meta)
        # per-page lines only when asked for
        if rec is None or get_verbosity() < 1:
            return
        current = meta.get("current_item") or f"#{rec.completed}"
        total = "?" if rec.total is None else rec.total
        self._write(f"   · {rec.name}: {current} ({rec.completed}/{total})")

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._tasks.close(task_id, status, final_meta)
        if rec is not None:
            self._write(" " + format_completion(rec, ICONS.get(status, "?")))

    def status(self, message: str, **fields: Any) -> None:
        self._tagged("info", message)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._write(f"{self._paint('36', f'VERB{level}')}: {message}")

    def error(self, message: str, **fields: Any) -> None:
        self._tagged("error", message)

    def warning(self, message: str, **fields: Any) -> None:
        self._tagged("warning", message)

    def section(self, title: str) -> None:
        self._write(f"\n[{title}]")
