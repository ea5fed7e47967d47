from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .base import (
    Reporter,
    TaskStatus,
    TaskTable,
    format_completion,
    get_verbosity,
)

_STATUS_ICON = {
    TaskStatus.SUCCESS: "[green]✔[/]",
    TaskStatus.FAILED: "[red]✖[/]",
    TaskStatus.SKIPPED: "→",
}


class RichReporter(Reporter):
    """Progress bars per tab on stderr, backed by rich."""

    supports_progress = True

    def __init__(self, console: Console | None = None):
        self.console = console or Console(
            stderr=True, highlight=False, soft_wrap=False
        )
        self._transient = os.getenv(
            "CLOGDUMP_PROGRESS_TRANSIENT", "0"
        ).lower() in ("1", "true", "yes")
        self.progress: Progress | None = None
        self._tasks = TaskTable()
        self._task_ids: Dict[str, Any] = {}
        self._transient_completions: List[str] = []

    def _ensure_progress(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(spinner_name="dots"),
                TextColumn("{task.fields[name]}", markup=False),
                BarColumn(bar_width=None),
                MofNCompleteColumn(),
                TextColumn(
                    "{task.fields[current]}", style="dim", markup=False
                ),
                TimeElapsedColumn(),
                transient=self._transient,
                console=self.console,
                expand=True,
            )
            self.progress.start()
        return self.progress

    def _stop_progress(self) -> None:
        if self.progress is None:
            return
        try:
            self.progress.stop()
        finally:
            self.progress = None
            self._task_ids.clear()
            if self._transient_completions:
                self.console.print("\n".join(self._transient_completions))
                self._transient_completions.clear()

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._tasks.open(task_id, name, total, meta)
        # Tasks without a known total are shown as a rule, not a bar.
        if total is None:
            self.console.rule(escape(name))
            return
        progress = self._ensure_progress()
        self._task_ids[task_id] = progress.add_task(
            "", total=total, name=name, current=""
        )

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._tasks.step(task_id, step, meta)
        if rec is None:
            return
        rid = self._task_ids.get(task_id)
        if rid is not None and self.progress is not None:
            self.progress.update(
                rid,
                completed=rec.completed,
                current=str(meta.get("current_item", "")),
            )

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._tasks.close(task_id, status, final_meta)
        if rec is None:
            return
        # task names come from the cache; only the icon is markup
        icon = _STATUS_ICON.get(status, "")
        line = f"{icon} {escape(format_completion(rec, '').lstrip())}"
        rid = self._task_ids.pop(task_id, None)
        if rid is not None and self.progress is not None:
            self.progress.update(rid, current="")
            if self._transient:
                self._transient_completions.append(line)
            else:
                self.progress.console.print(line)
        else:
            self.console.print(line)
        if not self._tasks:
            self._stop_progress()

    def status(self, message: str, **fields: Any) -> None:
        self.console.print(f"[green]INFO[/]: {escape(message)}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() < level:
            return
        self.console.print(f"[cyan]VERB{level}[/]: {escape(message)}")

    def error(self, message: str, **fields: Any) -> None:
        self.console.print(f"[bold red]ERROR[/]: {escape(message)}")

    def warning(self, message: str, **fields: Any) -> None:
        self.console.print(f"[yellow]WARN[/]: {escape(message)}")

    def section(self, title: str) -> None:
        self.console.rule(escape(title))

    def flush(self) -> None:
        self._stop_progress()
