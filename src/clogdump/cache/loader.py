"""Cache dump loading (JSON/YAML index files plus raw payload files).

Layout of a cache dump directory::

    structs.json|yaml|yml   {"<id>": {"params": {"<param>": int|str}}
                             | {"data_hex": "..."} | {"file": "rel/path"}}
    items.json|yaml|yml     {"<id>": {"name": "...", ...} | "<name>"}
    enums.json|yaml|yml     {"<id>": {"values": [...]} | payload entry}
    enums/<id>.dat          raw enum payloads

Structs and items are required; enums may come from the index, the
``enums/`` directory, or both (but never the same id twice).
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List

from ..errors import E_CACHE_FORMAT, config_error, decode_failure
from ..logging import get_logger
from ..reporting import get_reporter, task
from ..utils.io import (
    DataError,
    find_index_file,
    load_document,
    read_payload,
    safe_read_file,
)
from .codec import decode_struct
from .models import EnumEntry, ItemRecord, StructRecord
from .store import RecordStore

__all__ = ["load_store", "ENUM_PAYLOAD_DIR", "ENUM_PAYLOAD_SUFFIX"]

ENUM_PAYLOAD_DIR = "enums"
ENUM_PAYLOAD_SUFFIX = ".dat"
_PAYLOAD_KEYS = ("data_hex", "file", "path")


def _format_error(kind: str, record_id: Any, reason: str, **ctx: Any):
    return decode_failure(
        kind, record_id, reason, code=E_CACHE_FORMAT, context=ctx or None
    )


def _parse_id(key: Any, kind: str) -> int:
    if isinstance(key, bool):
        raise _format_error(kind, key, "id must be an integer")
    if isinstance(key, int):
        return key
    try:
        return int(str(key), 10)
    except ValueError:
        raise _format_error(kind, key, "id must be an integer") from None


def _read_index(base: Path, stem: str, *, required: bool) -> Dict[Any, Any]:
    try:
        path = find_index_file(base, stem)
    except DataError as e:
        raise config_error(str(e), {"cache_dir": str(base)}) from e
    if path is None:
        if required:
            raise config_error(
                f"Cache dump has no {stem} index",
                {"cache_dir": str(base), "expected": f"{stem}.json"},
            )
        return {}
    try:
        data = load_document(path)
    except DataError as e:
        raise _format_error(stem, path.name, str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _format_error(stem, path.name, "root must be an object")
    get_logger().debug("Read %s (%d entries)", path.name, len(data))
    return data


def _has_payload(entry: Dict[str, Any]) -> bool:
    return any(k in entry for k in _PAYLOAD_KEYS)


def _payload(kind: str, record_id: int, entry: Dict[str, Any], base: Path):
    try:
        return read_payload(entry, base)
    except DataError as e:
        raise _format_error(kind, record_id, str(e)) from e


def _load_structs(base: Path) -> List[StructRecord]:
    records: List[StructRecord] = []
    for key, entry in _read_index(base, "structs", required=True).items():
        struct_id = _parse_id(key, "struct")
        if not isinstance(entry, dict):
            raise _format_error("struct", struct_id, "entry must be an object")
        if _has_payload(entry):
            payload = _payload("struct", struct_id, entry, base)
            records.append(decode_struct(struct_id, payload))
            continue
        raw_params = entry.get("params", {})
        if not isinstance(raw_params, dict):
            raise _format_error("struct", struct_id, "params must be an object")
        params: Dict[int, Any] = {}
        for pkey, value in raw_params.items():
            param_id = _parse_id(pkey, "param")
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise _format_error(
                    "struct",
                    struct_id,
                    f"param {param_id} must be an integer or string",
                )
            params[param_id] = value
        records.append(
            StructRecord(id=struct_id, params=MappingProxyType(params))
        )
    return records


def _load_items(base: Path) -> List[ItemRecord]:
    records: List[ItemRecord] = []
    for key, entry in _read_index(base, "items", required=True).items():
        item_id = _parse_id(key, "item")
        if isinstance(entry, str):
            records.append(ItemRecord(id=item_id, name=entry))
            continue
        if not isinstance(entry, dict) or not isinstance(
            entry.get("name"), str
        ):
            raise _format_error("item", item_id, "missing or invalid name")
        attributes = {k: v for k, v in entry.items() if k not in ("id", "name")}
        if "id" in entry and entry["id"] != item_id:
            raise _format_error(
                "item", item_id, f"id field {entry['id']!r} does not match key"
            )
        records.append(
            ItemRecord(
                id=item_id,
                name=entry["name"],
                attributes=MappingProxyType(attributes),
            )
        )
    return records


def _load_enums(base: Path) -> List[EnumEntry]:
    entries: Dict[int, EnumEntry] = {}
    for key, entry in _read_index(base, "enums", required=False).items():
        enum_id = _parse_id(key, "enum")
        if not isinstance(entry, dict):
            raise _format_error("enum", enum_id, "entry must be an object")
        if "values" in entry:
            if _has_payload(entry):
                raise _format_error(
                    "enum", enum_id, "both values and payload given"
                )
            values = entry["values"]
            if not isinstance(values, list):
                raise _format_error("enum", enum_id, "values must be a list")
            entries[enum_id] = EnumEntry(
                id=enum_id, values=tuple(values), source="index"
            )
        else:
            entries[enum_id] = EnumEntry(
                id=enum_id,
                payload=_payload("enum", enum_id, entry, base),
                source="index",
            )
    payload_dir = base / ENUM_PAYLOAD_DIR
    if payload_dir.is_dir():
        files = [
            p
            for p in payload_dir.iterdir()
            if p.is_file() and p.suffix == ENUM_PAYLOAD_SUFFIX
        ]
        for path in sorted(files, key=lambda p: _parse_id(p.stem, "enum")):
            enum_id = _parse_id(path.stem, "enum")
            if enum_id in entries:
                raise _format_error(
                    "enum",
                    enum_id,
                    "declared in both the enums index and the enums directory",
                )
            try:
                data = safe_read_file(path)
            except DataError as e:
                raise _format_error("enum", enum_id, str(e)) from e
            entries[enum_id] = EnumEntry(
                id=enum_id,
                payload=data,
                source=f"{ENUM_PAYLOAD_DIR}/{path.name}",
            )
    return list(entries.values())


def load_store(cache_dir: str | Path) -> RecordStore:
    """Load a cache dump directory into an immutable ``RecordStore``."""
    base = Path(cache_dir)
    if not base.is_dir():
        raise config_error(
            "Cache directory not found", {"cache_dir": str(base)}
        )
    with task("cache.load", "Load cache dump"):
        store = RecordStore(
            structs=_load_structs(base),
            items=_load_items(base),
            enums=_load_enums(base),
        )
    counts = store.summary()
    get_reporter().status(
        "Cache summary: "
        + " ".join(f"{k}={v}" for k, v in counts.items())
        + f" dir={base.name}"
    )
    return store
