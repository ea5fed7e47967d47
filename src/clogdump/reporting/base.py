from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "TaskTable",
    "Reporter",
    "STAT_KEYS",
    "format_completion",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "task",
]

# Task meta keys echoed on completion lines, in display order.
STAT_KEYS = ("pages", "items")


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time) if self.end_time else 0.0


class TaskTable:
    """Open tasks of a reporter, keyed by task id.

    Unknown ids are ignored so a reporter swapped mid-run never raises.
    """

    def __init__(self) -> None:
        self._open: Dict[str, TaskRecord] = {}

    def __len__(self) -> int:
        return len(self._open)

    def open(
        self, task_id: str, name: str, total: int | None, meta: Dict[str, Any]
    ) -> TaskRecord:
        rec = TaskRecord(task_id, name, total, meta=dict(meta))
        self._open[task_id] = rec
        return rec

    def step(
        self, task_id: str, step: int, meta: Dict[str, Any]
    ) -> Optional[TaskRecord]:
        rec = self._open.get(task_id)
        if rec is not None:
            rec.completed += step
            rec.meta.update(meta)
        return rec

    def close(
        self, task_id: str, status: TaskStatus, meta: Dict[str, Any]
    ) -> Optional[TaskRecord]:
        rec = self._open.pop(task_id, None)
        if rec is not None:
            rec.status = status
            rec.end_time = time.time()
            rec.meta.update(meta)
        return rec


def format_completion(rec: TaskRecord, icon: str) -> str:
    """One-line summary of a finished task: icon, name, count, time, stats."""
    total_part = (
        f" {rec.completed}/{rec.total}" if rec.total is not None else ""
    )
    stats = [f"{k}={rec.meta[k]}" for k in STAT_KEYS if k in rec.meta]
    stats_part = f" [{' '.join(stats)}]" if stats else ""
    return f"{icon} {rec.name}{total_part} ({rec.duration:.2f}s){stats_part}"


_VERBOSITY: int = 0  # set by CLI (-v repeats)


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    """Sink for task progress and status lines.

    Tasks are keyed by caller-chosen ids (``cache.load``, ``tab.0``);
    ``advance`` meta such as ``pages``/``items`` is echoed on completion.
    """

    supports_progress: bool = False

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        raise NotImplementedError

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        raise NotImplementedError

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        raise NotImplementedError

    def status(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        return None

    def error(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def section(self, title: str) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        from .plain import PlainReporter  # local import to avoid cycle

        _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
    return _ACTIVE_REPORTER


@contextmanager
def task(task_id: str, name: str, total: int | None = None, **meta: Any):
    """Run a block as a reporter task; marks it FAILED if the block raises."""
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    try:
        yield
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED)
        raise
    else:
        rep.end_task(task_id, TaskStatus.SUCCESS)
