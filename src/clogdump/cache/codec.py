"""Decoders for enum and struct config payloads.

Both record kinds are stored as big-endian opcode streams terminated by a
zero opcode:

Enum opcodes
    1  key type      u8 (type char)
    2  value type    u8 (type char)
    3  default str   string
    4  default int   i32
    5  string map    u16 count, count x (i32 key, string value)
    6  int map       u16 count, count x (i32 key, i32 value)

Struct opcodes
    249 params       u8 count, count x (u8 is_string, u24 key, string|i32)

Strings are NUL-terminated CP1252. A payload consisting of a single zero
byte is an empty slot and decodes to ``None``.
"""

from __future__ import annotations

import struct
from types import MappingProxyType
from typing import Dict, List, Optional

from ..errors import decode_failure
from .models import EnumRecord, ParamValue, StructRecord

__all__ = [
    "Buffer",
    "TruncatedPayload",
    "decode_enum",
    "decode_struct",
]

_EMPTY_SLOT = b"\x00"
_PARAMS_OPCODE = 249


class TruncatedPayload(ValueError):
    pass


class Buffer:
    """Big-endian cursor over a record payload."""

    __slots__ = ("data", "offset")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def remaining(self) -> int:
        return len(self.data) - self.offset

    def _take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise TruncatedPayload(
                f"read of {size} bytes at offset {self.offset} "
                f"past end ({len(self.data)})"
            )
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def u8(self) -> int:
        return self._take(1)[0]

    def u16(self) -> int:
        return struct.unpack(">H", self._take(2))[0]

    def u24(self) -> int:
        hi, lo = struct.unpack(">BH", self._take(3))
        return (hi << 16) | lo

    def i32(self) -> int:
        return struct.unpack(">i", self._take(4))[0]

    def string(self) -> str:
        end = self.data.find(b"\x00", self.offset)
        if end < 0:
            raise TruncatedPayload(
                f"unterminated string at offset {self.offset}"
            )
        raw = self._take(end - self.offset)
        self.offset += 1
        # Bytes undefined in cp1252 (0x81, 0x8d, ...) read as '?'.
        return raw.decode("cp1252", errors="replace").replace("\ufffd", "?")


def decode_enum(enum_id: int, data: bytes) -> Optional[EnumRecord]:
    if data == _EMPTY_SLOT:
        return None
    buf = Buffer(data)
    fields: Dict[str, object] = {}
    try:
        while True:
            opcode = buf.u8()
            if opcode == 0:
                break
            if opcode == 1:
                fields["key_type"] = chr(buf.u8())
            elif opcode == 2:
                fields["val_type"] = chr(buf.u8())
            elif opcode == 3:
                fields["default_string"] = buf.string()
            elif opcode == 4:
                fields["default_int"] = buf.i32()
            elif opcode in (5, 6):
                size = buf.u16()
                keys: List[int] = []
                values: List[object] = []
                for _ in range(size):
                    keys.append(buf.i32())
                    values.append(buf.string() if opcode == 5 else buf.i32())
                fields["keys"] = tuple(keys)
                target = "string_values" if opcode == 5 else "int_values"
                fields[target] = tuple(values)
            else:
                raise decode_failure(
                    "enum",
                    enum_id,
                    f"unknown opcode {opcode} at offset {buf.offset - 1}",
                )
    except TruncatedPayload as e:
        raise decode_failure("enum", enum_id, str(e)) from e
    if buf.remaining():
        raise decode_failure(
            "enum", enum_id, f"{buf.remaining()} trailing bytes"
        )
    return EnumRecord(id=enum_id, **fields)  # type: ignore[arg-type]


def decode_struct(struct_id: int, data: bytes) -> StructRecord:
    buf = Buffer(data)
    params: Dict[int, ParamValue] = {}
    try:
        while True:
            opcode = buf.u8()
            if opcode == 0:
                break
            if opcode != _PARAMS_OPCODE:
                raise decode_failure(
                    "struct",
                    struct_id,
                    f"unknown opcode {opcode} at offset {buf.offset - 1}",
                )
            for _ in range(buf.u8()):
                is_string = buf.u8() == 1
                key = buf.u24()
                params[key] = buf.string() if is_string else buf.i32()
    except TruncatedPayload as e:
        raise decode_failure("struct", struct_id, str(e)) from e
    if buf.remaining():
        raise decode_failure(
            "struct", struct_id, f"{buf.remaining()} trailing bytes"
        )
    return StructRecord(id=struct_id, params=MappingProxyType(params))
