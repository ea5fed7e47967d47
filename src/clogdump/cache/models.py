"""Typed, read-only cache records."""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

ParamValue = Union[int, str]

_EMPTY: Mapping[Any, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class StructRecord:
    id: int
    params: Mapping[int, ParamValue] = field(default_factory=lambda: _EMPTY)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "params": {str(k): v for k, v in self.params.items()},
        }


@dataclass(frozen=True, slots=True)
class EnumRecord:
    id: int
    key_type: Optional[str] = None
    val_type: Optional[str] = None
    default_int: int = -1
    default_string: str = "null"
    keys: Tuple[int, ...] = ()
    int_values: Optional[Tuple[int, ...]] = None
    string_values: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "key_type": self.key_type,
            "val_type": self.val_type,
            "default_int": self.default_int,
            "default_string": self.default_string,
            "keys": list(self.keys),
            "int_values": (
                list(self.int_values) if self.int_values is not None else None
            ),
            "string_values": (
                list(self.string_values)
                if self.string_values is not None
                else None
            ),
        }


@dataclass(frozen=True, slots=True)
class ItemRecord:
    id: int
    name: str
    attributes: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, **dict(self.attributes)}


@dataclass(frozen=True, slots=True)
class EnumEntry:
    """Undecoded enumeration entry as found in the dump.

    Exactly one of ``payload`` (raw opcode bytes) or ``values`` (already
    decoded by the dump tool, unchecked) is set.
    """

    id: int
    payload: Optional[bytes] = None
    values: Optional[Tuple[Any, ...]] = None
    source: str = ""


__all__ = [
    "ParamValue",
    "StructRecord",
    "EnumRecord",
    "ItemRecord",
    "EnumEntry",
]
