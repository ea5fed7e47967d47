"""Enumeration lookup over the batch of enum entries from the cache."""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

from ..cache.codec import decode_enum
from ..cache.models import EnumEntry, EnumRecord
from ..errors import decode_failure, not_found

__all__ = ["EnumResolver"]


class EnumResolver:
    """Resolve enum ids to their ordered integer values.

    The id -> entry map is built once from the batch; entries are decoded on
    each lookup, so resolving is a pure read of the batch.
    """

    def __init__(self, batch: Iterable[EnumEntry]) -> None:
        self._by_id: Dict[int, EnumEntry] = {}
        for entry in batch:
            # First entry wins, same as a front-to-back scan of the batch.
            self._by_id.setdefault(entry.id, entry)

    def __contains__(self, enum_id: int) -> bool:
        return enum_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def decode(self, enum_id: int) -> EnumRecord:
        """Full decoded record; ``RecordNotFound`` / ``DecodeFailure``."""
        entry = self._by_id.get(enum_id)
        if entry is None:
            raise not_found("enum", enum_id)
        if entry.values is not None:
            return EnumRecord(
                id=enum_id,
                val_type="i",
                keys=tuple(range(len(entry.values))),
                int_values=entry.values,
            )
        record = decode_enum(enum_id, entry.payload or b"")
        if record is None:
            raise decode_failure(
                "enum",
                enum_id,
                "unable to load enum definition",
                context={"source": entry.source},
            )
        return record

    def resolve(self, enum_id: int) -> Tuple[int, ...]:
        """Integer values of ``enum_id`` in declared order."""
        record = self.decode(enum_id)
        values = record.int_values
        if values is None:
            raise decode_failure(
                "enum", enum_id, "enum has no integer values"
            )
        bad = [
            v for v in values if isinstance(v, bool) or not isinstance(v, int)
        ]
        if bad:
            raise decode_failure(
                "enum",
                enum_id,
                f"non-integer values {bad[:5]!r}",
            )
        return values
