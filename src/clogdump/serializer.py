"""JSON rendering of the collection log.

Document shape (key order is significant and kept)::

    [{"tabId": 0, "pages": [{"name": "...", "items": [{"id": 1, "name": "..."}]}]}]
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from .errors import E_WRITE_IO, OutputError
from .logging import get_logger
from .models import CollectionLog

__all__ = [
    "to_document",
    "render_json",
    "write_atomic",
    "write_collection_log",
]


def to_document(log: CollectionLog) -> List[Dict[str, Any]]:
    return [
        {
            "tabId": tab.tab_id,
            "pages": [
                {
                    "name": page.name,
                    "items": [
                        {"id": item.id, "name": item.name}
                        for item in page.items
                    ],
                }
                for page in tab.pages
            ],
        }
        for tab in log.tabs
    ]


def render_json(log: CollectionLog) -> str:
    return json.dumps(to_document(log), indent=2, ensure_ascii=False) + "\n"


def _default_file_mode() -> int:
    # mkstemp creates 0600 files; give the result what open() would.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(target: Path, data: bytes) -> Path:
    """Replace ``target`` with ``data`` in one rename.

    The parent directory is created if needed. On failure the previous file
    (if any) is left in place and ``OutputError`` is raised.
    """
    tmp_name: str | None = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "wb") as f:
            if hasattr(os, "fchmod"):
                os.fchmod(f.fileno(), _default_file_mode())
            f.write(data)
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as e:
        raise OutputError(
            code=E_WRITE_IO,
            message=f"Unable to write {target}: {e}",
            context={"path": str(target)},
        ) from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    return target


def write_collection_log(
    log: CollectionLog, output_dir: Path, file_name: str
) -> Path:
    """Write ``log`` to ``output_dir/file_name``.

    The text is rendered before anything touches the disk.
    """
    data = render_json(log).encode("utf-8")
    target = write_atomic(output_dir / file_name, data)
    get_logger().debug("Wrote %s (%d bytes)", target, len(data))
    return target
