"""JSON lines reporter: one event object per line on stdout.

Status lines that start with a known summary prefix
(``Cache summary: structs=3 enums=2 ...``) additionally produce a
``summary`` event carrying the ``key=value`` pairs as fields.
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict

from .base import Reporter, TaskStatus, TaskTable, get_verbosity

SUMMARY_PREFIXES: Dict[str, str] = {
    "cache summary": "cache",
    "collection log summary": "collection_log",
    "write summary": "write",
    "manifest summary": "manifest",
    "validate summary": "validate",
}


def _parse_kv(text: str) -> Dict[str, str]:
    return dict(
        token.split("=", 1) for token in text.split() if "=" in token
    )


def _summary_type(message: str) -> str | None:
    head = message.partition(":")[0].strip().lower()
    return SUMMARY_PREFIXES.get(head)


class JsonLinesReporter(Reporter):
    supports_progress = False

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self._tasks = TaskTable()

    def _event(self, event: str, **payload: Any) -> None:
        obj = {"event": event, **payload}
        self.stream.write(json.dumps(obj, sort_keys=True, default=str) + "\n")

    def _message(self, level: str, message: str, fields: Dict[str, Any]):
        self._event("status", message=message, level=level, **fields)

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._tasks.open(task_id, name, total, meta)
        self._event("task_start", id=task_id, name=name, total=total, **meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._tasks.step(task_id, step, meta)
        if rec is None:
            return
        self._event(
            "task_progress", id=task_id, completed=rec.completed, **meta
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
        self._event(
            "task_end",
            id=task_id,
            status=status.name.lower(),
            completed=rec.completed,
            total=rec.total,
            duration_seconds=rec.duration,
            **rec.meta,
        )

    def status(self, message: str, **fields: Any) -> None:
        stype = _summary_type(message)
        if stype is not None:
            self._event(
                "summary",
                summary_type=stype,
                raw=message,
                **_parse_kv(message.partition(":")[2]),
                **fields,
            )
        self._message("info", message, fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._message(f"verbose{level}", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._message("error", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._message("warning", message, fields)

    def section(self, title: str) -> None:
        self._event("section", title=title)
