"""Progress and status reporting backends.

The CLI installs one reporter per run (``--reporter``); library code reaches
it through ``get_reporter()`` and the ``task`` helper (sections go through
``clogdump.logging.section``).
"""

from .base import (
    Reporter,
    TaskStatus,
    get_reporter,
    get_verbosity,
    set_reporter,
    set_verbosity,
    task,
)
from .jsonl import JsonLinesReporter
from .plain import PlainReporter
from .rich_reporter import RichReporter
from .silent import SilentReporter

__all__ = [
    "Reporter",
    "TaskStatus",
    "get_reporter",
    "set_reporter",
    "get_verbosity",
    "set_verbosity",
    "task",
    "JsonLinesReporter",
    "PlainReporter",
    "RichReporter",
    "SilentReporter",
]
