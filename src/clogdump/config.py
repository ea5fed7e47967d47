"""Extraction configuration.

The ids that anchor the collection log inside the cache change between cache
revisions, so they live here instead of in the traversal code. Defaults match
the current reference deployment; a JSON or YAML file given with ``--config``
overrides any subset of them.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Tuple

from .errors import config_error
from .utils.io import DataError, load_document

__all__ = [
    "MissingItemPolicy",
    "ExtractConfig",
    "DEFAULT_CONFIG",
    "load_config",
]


class MissingItemPolicy(str, Enum):
    ABORT = "abort"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True, slots=True)
class ExtractConfig:
    tab_struct_ids: Tuple[int, ...] = (471, 472, 473, 474, 475)
    tab_labels: Tuple[str, ...] = (
        "Bosses",
        "Raids",
        "Clues",
        "Minigames",
        "Other",
    )
    tab_enum_param: int = 683
    page_name_param: int = 689
    page_items_enum_param: int = 690
    output_name: str = "collection_log_info.json"
    missing_items: MissingItemPolicy = MissingItemPolicy.ABORT
    # Name emitted for unresolved items under the placeholder policy.
    placeholder_name: str = "null"

    def tab_label(self, tab_id: int) -> str:
        if 0 <= tab_id < len(self.tab_labels):
            return self.tab_labels[tab_id]
        return f"Tab {tab_id}"

    def with_overrides(self, **changes: Any) -> "ExtractConfig":
        return _validated(replace(self, **changes))


DEFAULT_CONFIG = ExtractConfig()

_INT_FIELDS = ("tab_enum_param", "page_name_param", "page_items_enum_param")
_STR_FIELDS = ("output_name", "placeholder_name")


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _validated(cfg: ExtractConfig) -> ExtractConfig:
    if not cfg.tab_struct_ids:
        raise config_error("tab_struct_ids must not be empty")
    if not all(_is_int(v) for v in cfg.tab_struct_ids):
        raise config_error(
            "tab_struct_ids must be integers",
            {"tab_struct_ids": list(cfg.tab_struct_ids)},
        )
    for name in _INT_FIELDS:
        if not _is_int(getattr(cfg, name)):
            raise config_error(f"{name} must be an integer")
    for name in _STR_FIELDS:
        if not isinstance(getattr(cfg, name), str):
            raise config_error(f"{name} must be a string")
    name = cfg.output_name
    if not name or Path(name).name != name:
        raise config_error(
            "output_name must be a plain file name", {"output_name": name}
        )
    return cfg


def _coerce(data: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(ExtractConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise config_error("Unknown config keys", {"keys": unknown})
    out = dict(data)
    for key in ("tab_struct_ids", "tab_labels"):
        if key in out:
            if not isinstance(out[key], list):
                raise config_error(f"{key} must be a list")
            out[key] = tuple(out[key])
    if "tab_labels" in out and not all(
        isinstance(v, str) for v in out["tab_labels"]
    ):
        raise config_error("tab_labels must be strings")
    if "missing_items" in out:
        try:
            out["missing_items"] = MissingItemPolicy(out["missing_items"])
        except ValueError:
            raise config_error(
                "missing_items must be one of: "
                + ", ".join(p.value for p in MissingItemPolicy),
                {"missing_items": out["missing_items"]},
            ) from None
    return out


def load_config(path: str | Path | None) -> ExtractConfig:
    """Load a config file on top of the defaults (defaults when ``None``)."""
    if path is None:
        return DEFAULT_CONFIG
    p = Path(path)
    if not p.is_file():
        raise config_error("Config file not found", {"path": str(p)})
    try:
        data = load_document(p)
    except DataError as e:
        raise config_error(str(e), {"path": str(p)}) from e
    if not isinstance(data, dict):
        raise config_error(
            "Root of config must be an object", {"path": str(p)}
        )
    return DEFAULT_CONFIG.with_overrides(**_coerce(data))
