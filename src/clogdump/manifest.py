"""Dump manifest: an optional JSON summary written next to a dump.

Only produced when requested (``--emit-manifest``). Records what was dumped
(per-tab counts, labels and source struct ids), the policy in effect for
unresolved items, and the SHA-256 of the written document so consumers can
tell whether a re-dump changed anything.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .config import ExtractConfig
from .models import CollectionLog
from .serializer import write_atomic

__all__ = ["MANIFEST_VERSION", "manifest_dict", "build_manifest"]

MANIFEST_VERSION = 1


def manifest_dict(
    log: CollectionLog,
    config: ExtractConfig,
    *,
    output_file: str,
    sha256: str,
) -> dict[str, Any]:
    tabs = [
        {
            "tab_id": tab.tab_id,
            "label": config.tab_label(tab.tab_id),
            "struct_id": tab.struct_id,
            "pages": len(tab.pages),
            "items": tab.item_count,
        }
        for tab in log.tabs
    ]
    d: dict[str, Any] = {
        "version": MANIFEST_VERSION,
        "output_file": output_file,
        "sha256": sha256,
        "counts": {
            "tabs": len(log.tabs),
            "pages": log.page_count,
            "items": log.item_count,
            "unique_items": log.unique_item_count,
        },
        "tabs": tabs,
        "missing_items": config.missing_items.value,
    }
    if log.placeholder_items:
        d["placeholder_items"] = list(log.placeholder_items)
    return d


def build_manifest(
    log: CollectionLog,
    config: ExtractConfig,
    output_path: Path,
    *,
    output_file: str,
    sha256: str,
) -> Path:
    data = manifest_dict(log, config, output_file=output_file, sha256=sha256)
    text = json.dumps(data, indent=2, sort_keys=True) + "\n"
    return write_atomic(Path(output_path), text.encode("utf-8"))
