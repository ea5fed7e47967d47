"""Read-only record store over a loaded cache dump."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..errors import not_found
from .models import EnumEntry, ItemRecord, StructRecord

__all__ = ["RecordStore"]


class RecordStore:
    """Immutable snapshot of the struct, enum and item records of a cache.

    Struct and item records are fully decoded at load time. Enum entries are
    kept in the order the dump declared them and decoded on demand by the
    enum resolver.
    """

    __slots__ = ("_structs", "_items", "_enums")

    def __init__(
        self,
        structs: Iterable[StructRecord] = (),
        items: Iterable[ItemRecord] = (),
        enums: Iterable[EnumEntry] = (),
    ) -> None:
        self._structs: Mapping[int, StructRecord] = MappingProxyType(
            {s.id: s for s in structs}
        )
        self._items: Mapping[int, ItemRecord] = MappingProxyType(
            {i.id: i for i in items}
        )
        self._enums: Tuple[EnumEntry, ...] = tuple(enums)

    @property
    def struct_count(self) -> int:
        return len(self._structs)

    @property
    def item_count(self) -> int:
        return len(self._items)

    @property
    def enum_batch(self) -> Tuple[EnumEntry, ...]:
        return self._enums

    def find_struct(self, struct_id: int) -> Optional[StructRecord]:
        return self._structs.get(struct_id)

    def get_struct(self, struct_id: int) -> StructRecord:
        rec = self._structs.get(struct_id)
        if rec is None:
            raise not_found("struct", struct_id)
        return rec

    def find_item(self, item_id: int) -> Optional[ItemRecord]:
        return self._items.get(item_id)

    def get_item(self, item_id: int) -> ItemRecord:
        rec = self._items.get(item_id)
        if rec is None:
            raise not_found("item", item_id)
        return rec

    def summary(self) -> Dict[str, int]:
        return {
            "structs": len(self._structs),
            "enums": len(self._enums),
            "items": len(self._items),
        }
