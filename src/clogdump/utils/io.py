"""IO helpers for reading record payloads out of a cache dump."""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any

import yaml

from .paths import contained_path

__all__ = [
    "DataError",
    "INDEX_SUFFIXES",
    "find_index_file",
    "load_document",
    "safe_read_file",
    "read_payload",
]

# Largest single record payload accepted from the dump.
MAX_PAYLOAD_SIZE = 16 * 1024 * 1024
INDEX_SUFFIXES = (".json", ".yaml", ".yml")


class DataError(RuntimeError):
    pass


def find_index_file(directory: Path, stem: str) -> Path | None:
    """Return ``<stem>.json|yaml|yml`` in ``directory``; DataError if several."""
    found = [
        directory / f"{stem}{suffix}"
        for suffix in INDEX_SUFFIXES
        if (directory / f"{stem}{suffix}").is_file()
    ]
    if len(found) > 1:
        raise DataError(
            f"Ambiguous {stem} index: {', '.join(p.name for p in found)}"
        )
    return found[0] if found else None


def load_document(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DataError(f"{path.name}: not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise DataError(f"{path.name}: {e.strerror or e}") from e
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            return yaml.safe_load(text)
        return json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise DataError(f"{path.name}: {e}") from e


def safe_read_file(path: Path, max_size: int = MAX_PAYLOAD_SIZE) -> bytes:
    if not path.is_file():
        raise DataError(f"File not found: {path}")
    size = path.stat().st_size
    if size > max_size:
        raise DataError(f"File too large: {size}>{max_size}")
    try:
        return path.read_bytes()
    except OSError as e:
        raise DataError(f"{path.name}: {e.strerror or e}") from e


def read_payload(entry: dict[str, Any], base_dir: Path) -> bytes:
    """Raw bytes of a record entry given as ``data_hex`` or ``file``/``path``."""
    sources = [k for k in ("data_hex", "file", "path") if k in entry]
    if not sources:
        raise DataError("No payload source (data_hex|file|path) provided")
    if len(sources) > 1:
        raise DataError(f"Multiple payload sources: {sources}")
    src = sources[0]
    if src == "data_hex":
        raw = entry["data_hex"]
        if not isinstance(raw, str):
            raise DataError("data_hex must be string")
        h = "".join(raw.split())
        if len(h) > 2 * MAX_PAYLOAD_SIZE:
            raise DataError("hex string too long")
        if len(h) % 2:
            raise DataError("hex string must have even length")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise DataError(f"invalid hex: {e}") from e
    p = entry[src]
    if not isinstance(p, str):
        raise DataError(f"{src} path must be string")
    try:
        resolved = contained_path(base_dir, p)
    except ValueError as e:
        raise DataError(f"{src} escapes cache directory: {p}") from e
    return safe_read_file(resolved)
