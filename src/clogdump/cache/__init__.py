"""Cache dump access: typed records, payload decoders and the record store."""

from .codec import decode_enum, decode_struct
from .loader import load_store
from .models import EnumEntry, EnumRecord, ItemRecord, StructRecord
from .store import RecordStore

__all__ = [
    "decode_enum",
    "decode_struct",
    "load_store",
    "EnumEntry",
    "EnumRecord",
    "ItemRecord",
    "StructRecord",
    "RecordStore",
]
