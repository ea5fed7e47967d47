"""High-level API for clogdump.

These are the operations behind the CLI subcommands; each one loads the
cache dump, does its work, and either returns or raises an ``ExtractError``.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List

from .builder import CollectionLogBuilder
from .cache import RecordStore, load_store
from .config import DEFAULT_CONFIG, ExtractConfig
from .errors import ExtractError, config_error
from .logging import get_logger
from .manifest import build_manifest
from .models import CollectionLog
from .reporting import get_reporter, task
from .resolve import EnumResolver
from .serializer import write_collection_log

__all__ = [
    "DumpOptions",
    "DumpResult",
    "RECORD_KINDS",
    "dump_collection_log",
    "validate_cache",
    "describe_record",
    "inspect_record",
]

RECORD_KINDS = ("struct", "enum", "item")


@dataclass(slots=True)
class DumpOptions:
    cache_dir: Path
    output_dir: Path
    config: ExtractConfig = DEFAULT_CONFIG
    # Optional; when set a manifest JSON is written after the dump
    manifest_path: Path | None = None


@dataclass(slots=True)
class DumpResult:
    output_file: Path
    bytes_written: int
    sha256: str
    log: CollectionLog
    manifest_file: Path | None = None


def dump_collection_log(options: DumpOptions) -> DumpResult:
    """Load the cache, rebuild the collection log and write it as JSON.

    Nothing is written unless the whole log resolved.
    """
    logger = get_logger()
    rep = get_reporter()
    store = load_store(options.cache_dir)
    log = CollectionLogBuilder(store, options.config).build()
    with task("write", "Write collection log"):
        output_file = write_collection_log(
            log, Path(options.output_dir), options.config.output_name
        )
    data = output_file.read_bytes()
    digest = hashlib.sha256(data).hexdigest()
    rep.status(
        "Write summary: "
        + f"file={output_file.name} bytes={len(data)} sha256={digest[:12]}"
    )
    manifest_file = None
    if options.manifest_path is not None:
        with task("manifest", "Emit manifest"):
            manifest_file = build_manifest(
                log,
                options.config,
                options.manifest_path,
                output_file=output_file.name,
                sha256=digest,
            )
        rep.status(
            "Manifest summary: "
            + f"file={manifest_file.name} tabs={len(log.tabs)} "
            + f"placeholders={len(log.placeholder_items)}"
        )
    logger.debug("Dump complete: %s", output_file)
    return DumpResult(
        output_file=output_file,
        bytes_written=len(data),
        sha256=digest,
        log=log,
        manifest_file=manifest_file,
    )


def validate_cache(
    cache_dir: str | Path, config: ExtractConfig = DEFAULT_CONFIG
) -> List[ExtractError]:
    """Every resolution error in the cache; an empty list means dumpable.

    Load errors (missing dir, malformed index) still raise.
    """
    store = load_store(cache_dir)
    errors = CollectionLogBuilder(store, config).collect_errors()
    get_reporter().status(f"Validate summary: errors={len(errors)}")
    return errors


def describe_record(
    store: RecordStore, kind: str, record_id: int
) -> dict[str, Any]:
    if kind == "struct":
        return store.get_struct(record_id).to_dict()
    if kind == "item":
        return store.get_item(record_id).to_dict()
    if kind == "enum":
        return EnumResolver(store.enum_batch).decode(record_id).to_dict()
    raise config_error(
        f"Unknown record kind '{kind}'", {"kinds": list(RECORD_KINDS)}
    )


def inspect_record(
    cache_dir: str | Path, kind: str, record_id: int
) -> dict[str, Any]:
    return describe_record(load_store(cache_dir), kind, record_id)
