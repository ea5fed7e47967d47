from __future__ import annotations

from typing import Any

from .base import Reporter


class SilentReporter(Reporter):
    """Discards everything (``--reporter silent``, and the test suite)."""

    def _discard(self, *args: Any, **kwargs: Any) -> None:
        return None

    start_task = _discard
    advance = _discard
    end_task = _discard
    status = _discard
    error = _discard
    warning = _discard
    section = _discard
