"""Paths inside a cache dump directory."""

from __future__ import annotations

from pathlib import Path

__all__ = ["contained_path"]


def contained_path(root: Path, relative: str) -> Path:
    """``root / relative`` resolved; ValueError unless it stays under root.

    Symlinks are resolved before the check, so a link pointing out of the
    dump is rejected as well.
    """
    root = root.resolve()
    target = (root / relative).resolve()
    if not target.is_relative_to(root):
        raise ValueError(f"{relative!r} is outside {root}")
    return target
