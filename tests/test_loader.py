"""Cache dump directory loading."""

import json
from dataclasses import MISSING, fields

import pytest

from clogdump.cache import load_store
from clogdump.cache.models import (
    EnumEntry,
    EnumRecord,
    ItemRecord,
    StructRecord,
)
from clogdump.errors import E_CACHE_FORMAT, ConfigError, DecodeFailure
from clogdump.resolve import EnumResolver

from cache_helper import (
    hex_entry,
    int_enum,
    scenario_one,
    struct_payload,
    write_cache,
)


def test_load_scenario(tmp_path):
    store = load_store(write_cache(tmp_path, **scenario_one()))
    assert store.summary() == {"structs": 2, "enums": 2, "items": 2}
    assert store.get_struct(501).params[689] == "Page A"
    assert store.get_item(10).name == "Sword"


def test_load_yaml_indexes(tmp_path):
    store = load_store(write_cache(tmp_path, fmt="yaml", **scenario_one()))
    assert store.get_struct(471).params[683] == 1001
    assert EnumResolver(store.enum_batch).resolve(1002) == (10, 11)


def test_struct_payload_entries_are_decoded(tmp_path):
    cache = scenario_one()
    cache["structs"]["501"] = hex_entry(
        struct_payload({689: "Page A", 690: 1002})
    )
    store = load_store(write_cache(tmp_path, **cache))
    assert dict(store.get_struct(501).params) == {689: "Page A", 690: 1002}


def test_payload_file_entries(tmp_path):
    cache = scenario_one()
    cache["enums"]["1002"] = {"file": "raw/1002.bin"}
    cache_dir = write_cache(tmp_path, **cache)
    (cache_dir / "raw").mkdir()
    (cache_dir / "raw" / "1002.bin").write_bytes(int_enum([11, 10]))
    store = load_store(cache_dir)
    assert EnumResolver(store.enum_batch).resolve(1002) == (11, 10)


def test_payload_file_cannot_escape_cache_dir(tmp_path):
    cache = scenario_one()
    cache["enums"]["1002"] = {"file": "../outside.bin"}
    (tmp_path / "outside.bin").write_bytes(int_enum([1]))
    with pytest.raises(DecodeFailure) as exc:
        load_store(write_cache(tmp_path, **cache))
    assert exc.value.code == E_CACHE_FORMAT


def test_enum_directory(tmp_path):
    cache = scenario_one()
    enums = cache.pop("enums")
    files = {int(k): bytes.fromhex(v["data_hex"]) for k, v in enums.items()}
    store = load_store(write_cache(tmp_path, enum_files=files, **cache))
    batch = store.enum_batch
    assert [e.id for e in batch] == [1001, 1002]
    assert batch[0].source == "enums/1001.dat"


def test_enum_declared_twice_is_rejected(tmp_path):
    cache = scenario_one()
    with pytest.raises(DecodeFailure) as exc:
        load_store(
            write_cache(tmp_path, enum_files={1001: int_enum([501])}, **cache)
        )
    assert exc.value.context["id"] == 1001


def test_enums_are_optional(tmp_path):
    cache = scenario_one()
    del cache["enums"]
    assert load_store(write_cache(tmp_path, **cache)).enum_batch == ()


def test_item_name_shorthand_and_attributes(tmp_path):
    cache = scenario_one()
    cache["items"] = {"10": "Sword", "11": {"name": "Shield", "members": True}}
    store = load_store(write_cache(tmp_path, **cache))
    assert store.get_item(10).name == "Sword"
    assert store.get_item(11).to_dict() == {
        "id": 11,
        "name": "Shield",
        "members": True,
    }


def test_item_without_name_is_rejected(tmp_path):
    cache = scenario_one()
    cache["items"]["11"] = {"members": True}
    with pytest.raises(DecodeFailure):
        load_store(write_cache(tmp_path, **cache))


def test_non_numeric_id_is_rejected(tmp_path):
    cache = scenario_one()
    cache["structs"]["abc"] = {"params": {}}
    with pytest.raises(DecodeFailure) as exc:
        load_store(write_cache(tmp_path, **cache))
    assert exc.value.context["id"] == "abc"


def test_float_param_is_rejected(tmp_path):
    cache = scenario_one()
    cache["structs"]["501"]["params"]["690"] = 1.5
    with pytest.raises(DecodeFailure):
        load_store(write_cache(tmp_path, **cache))


def test_malformed_json_index(tmp_path):
    cache_dir = write_cache(tmp_path, **scenario_one())
    (cache_dir / "items.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(DecodeFailure) as exc:
        load_store(cache_dir)
    assert exc.value.code == E_CACHE_FORMAT


def test_index_that_is_not_utf8(tmp_path):
    cache_dir = write_cache(tmp_path, **scenario_one())
    (cache_dir / "items.json").write_bytes(b'{"10": {"name": "Sw\xff"}}')
    with pytest.raises(DecodeFailure) as exc:
        load_store(cache_dir)
    assert exc.value.code == E_CACHE_FORMAT
    assert "UTF-8" in exc.value.message


def test_missing_cache_dir_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_store(tmp_path / "nope")


def test_missing_structs_index_is_config_error(tmp_path):
    cache_dir = write_cache(tmp_path, **scenario_one())
    (cache_dir / "structs.json").unlink()
    with pytest.raises(ConfigError):
        load_store(cache_dir)


def test_ambiguous_index_is_config_error(tmp_path):
    cache_dir = write_cache(tmp_path, **scenario_one())
    (cache_dir / "items.yaml").write_text(
        json.dumps({"1": "x"}), encoding="utf-8"
    )
    with pytest.raises(ConfigError):
        load_store(cache_dir)


def test_record_defaults():
    assert dict(StructRecord(1).params) == {}
    assert dict(ItemRecord(2, "Sword").attributes) == {}
    # dataclasses refuse unhashable plain defaults on newer interpreters
    for cls in (StructRecord, EnumRecord, ItemRecord, EnumEntry):
        for f in fields(cls):
            if f.default is not MISSING:
                hash(f.default)
