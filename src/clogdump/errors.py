"""Error definitions for clogdump.

Every failure of an extraction run is an ``ExtractError`` carrying a stable
code, a human message and a context dict naming the offending identifier and
the traversal level (tab/page/item) it was reached from.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_CONFIG = "E_CONFIG"
E_NOT_FOUND = "E_NOT_FOUND"
E_DECODE = "E_DECODE"
E_PARAM_TYPE = "E_PARAM_TYPE"
E_CACHE_FORMAT = "E_CACHE_FORMAT"
E_MISSING_PARAM = "E_MISSING_PARAM"
E_WRITE_IO = "E_WRITE_IO"


@dataclass
class ExtractError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class ConfigError(ExtractError):
    pass


class RecordNotFound(ExtractError):
    pass


class ItemNotFound(RecordNotFound):
    pass


class DecodeFailure(ExtractError):
    pass


class MissingParameter(ExtractError):
    pass


class OutputError(ExtractError):
    pass


def config_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> ConfigError:
    return ConfigError(code=E_CONFIG, message=message, context=context)


def not_found(
    kind: str, record_id: int, context: Optional[Dict[str, Any]] = None
) -> RecordNotFound:
    ctx = {"kind": kind, "id": record_id, **(context or {})}
    cls = ItemNotFound if kind == "item" else RecordNotFound
    return cls(
        code=E_NOT_FOUND,
        message=f"Unable to find {kind} with id {record_id}",
        context=ctx,
    )


def decode_failure(
    kind: str,
    record_id: Any,
    reason: str,
    *,
    code: str = E_DECODE,
    context: Optional[Dict[str, Any]] = None,
) -> DecodeFailure:
    ctx = {"kind": kind, "id": record_id, **(context or {})}
    return DecodeFailure(
        code=code,
        message=f"Unable to decode {kind} {record_id}: {reason}",
        context=ctx,
    )


__all__ = [
    "ExtractError",
    "ConfigError",
    "RecordNotFound",
    "ItemNotFound",
    "DecodeFailure",
    "MissingParameter",
    "OutputError",
    "config_error",
    "not_found",
    "decode_failure",
    "E_CONFIG",
    "E_NOT_FOUND",
    "E_DECODE",
    "E_PARAM_TYPE",
    "E_CACHE_FORMAT",
    "E_MISSING_PARAM",
    "E_WRITE_IO",
]
