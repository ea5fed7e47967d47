"""Programmatic API: dump results, manifest and record inspection."""

import hashlib
import json

import pytest

from clogdump.api import (
    DumpOptions,
    describe_record,
    dump_collection_log,
    inspect_record,
    validate_cache,
)
from clogdump.cache import load_store
from clogdump.config import MissingItemPolicy
from clogdump.errors import ConfigError, ItemNotFound, OutputError

from cache_helper import SINGLE_TAB, scenario_one, write_cache


def test_dump_result(tmp_path):
    cache_dir = write_cache(tmp_path, **scenario_one())
    result = dump_collection_log(
        DumpOptions(cache_dir, tmp_path / "out", config=SINGLE_TAB)
    )
    data = result.output_file.read_bytes()
    assert result.output_file.name == "collection_log_info.json"
    assert result.bytes_written == len(data)
    assert result.sha256 == hashlib.sha256(data).hexdigest()
    assert result.log.item_count == 2
    assert result.manifest_file is None


def test_custom_output_name(tmp_path):
    cache_dir = write_cache(tmp_path, **scenario_one())
    config = SINGLE_TAB.with_overrides(output_name="clog.json")
    result = dump_collection_log(
        DumpOptions(cache_dir, tmp_path / "out", config=config)
    )
    assert result.output_file == tmp_path / "out" / "clog.json"


def test_manifest_lists_placeholders(tmp_path):
    cache = scenario_one()
    del cache["items"]["11"]
    cache_dir = write_cache(tmp_path, **cache)
    config = SINGLE_TAB.with_overrides(
        missing_items=MissingItemPolicy.PLACEHOLDER
    )
    result = dump_collection_log(
        DumpOptions(
            cache_dir,
            tmp_path / "out",
            config=config,
            manifest_path=tmp_path / "meta" / "manifest.json",
        )
    )
    manifest = json.loads(result.manifest_file.read_text(encoding="utf-8"))
    assert manifest["placeholder_items"] == [11]
    assert manifest["missing_items"] == "placeholder"
    assert manifest["sha256"] == result.sha256


def test_failed_dump_writes_nothing(tmp_path):
    cache = scenario_one()
    del cache["items"]["11"]
    cache_dir = write_cache(tmp_path, **cache)
    manifest = tmp_path / "manifest.json"
    with pytest.raises(ItemNotFound):
        dump_collection_log(
            DumpOptions(
                cache_dir,
                tmp_path / "out",
                config=SINGLE_TAB,
                manifest_path=manifest,
            )
        )
    assert not (tmp_path / "out").exists()
    assert not manifest.exists()


def test_validate_cache_default_tabs_reports_missing_structs(tmp_path):
    cache_dir = write_cache(tmp_path, **scenario_one())
    errors = validate_cache(cache_dir)
    # 471 resolves; 472..475 are not in the dump.
    assert [e.context["id"] for e in errors] == [472, 473, 474, 475]


def test_describe_records(tmp_path):
    store = load_store(write_cache(tmp_path, **scenario_one()))
    assert describe_record(store, "struct", 501) == {
        "id": 501,
        "params": {"689": "Page A", "690": 1002},
    }
    assert describe_record(store, "item", 10) == {"id": 10, "name": "Sword"}
    with pytest.raises(ConfigError):
        describe_record(store, "sprite", 1)


def test_inspect_record_decodes_enum(tmp_path):
    cache_dir = write_cache(tmp_path, **scenario_one())
    record = inspect_record(cache_dir, "enum", 1001)
    assert record["int_values"] == [501]
    assert record["key_type"] == "i"


def test_manifest_write_failure_is_output_error(tmp_path):
    cache_dir = write_cache(tmp_path, **scenario_one())
    blocked = tmp_path / "manifest.json"
    blocked.mkdir()
    with pytest.raises(OutputError) as exc:
        dump_collection_log(
            DumpOptions(
                cache_dir,
                tmp_path / "out",
                config=SINGLE_TAB,
                manifest_path=blocked,
            )
        )
    assert exc.value.code == "E_WRITE_IO"
    assert exc.value.context["path"] == str(blocked)
