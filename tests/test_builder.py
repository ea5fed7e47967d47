"""Collection log traversal: ordering, no dedup, and failure reporting."""

from pathlib import Path

import pytest

from clogdump.builder import CollectionLogBuilder, build_collection_log
from clogdump.cache import load_store
from clogdump.config import DEFAULT_CONFIG, MissingItemPolicy
from clogdump.errors import (
    DecodeFailure,
    ItemNotFound,
    MissingParameter,
    RecordNotFound,
)
from clogdump.models import CollectionLog, Item, Page, Tab

from cache_helper import (
    SINGLE_TAB,
    hex_entry,
    int_enum,
    page,
    scenario_one,
    tab,
    write_cache,
)


def _store(tmp_path: Path, **cache):
    return load_store(write_cache(tmp_path, **cache))


def _five_tabs():
    structs = {}
    enums = {}
    items = {str(i): {"name": f"Item {i}"} for i in range(100, 140)}
    for n, struct_id in enumerate(DEFAULT_CONFIG.tab_struct_ids):
        # Pages declared in descending struct id order on purpose.
        page_ids = [600 + 10 * n + k for k in (2, 1, 0)]
        structs[str(struct_id)] = tab(2000 + n)
        enums[str(2000 + n)] = {"values": page_ids}
        for k, page_id in enumerate(page_ids):
            enum_id = 3000 + page_id
            structs[str(page_id)] = page(f"Tab{n} Page{k}", enum_id)
            enums[str(enum_id)] = {"values": [139 - n - k, 100 + n + k]}
    return {"structs": structs, "enums": enums, "items": items}


def test_scenario_one_tree(tmp_path):
    log = build_collection_log(_store(tmp_path, **scenario_one()), SINGLE_TAB)
    assert log == CollectionLog(
        tabs=(
            Tab(
                tab_id=0,
                pages=(
                    Page(
                        name="Page A",
                        items=(Item(10, "Sword"), Item(11, "Shield")),
                    ),
                ),
            ),
        )
    )
    assert log.tabs[0].struct_id == 471
    assert log.tabs[0].pages[0].struct_id == 501


def test_order_preserved_at_every_level(tmp_path):
    log = build_collection_log(_store(tmp_path, **_five_tabs()))
    assert [t.tab_id for t in log.tabs] == [0, 1, 2, 3, 4]
    assert [t.struct_id for t in log.tabs] == [471, 472, 473, 474, 475]
    for n, t in enumerate(log.tabs):
        assert [p.struct_id for p in t.pages] == [
            602 + 10 * n,
            601 + 10 * n,
            600 + 10 * n,
        ]
        assert [p.name for p in t.pages] == [
            f"Tab{n} Page0",
            f"Tab{n} Page1",
            f"Tab{n} Page2",
        ]
        for k, p in enumerate(t.pages):
            assert [i.id for i in p.items] == [139 - n - k, 100 + n + k]
    assert log.page_count == 15
    assert log.item_count == 30


def test_same_item_on_two_pages_is_kept_twice(tmp_path):
    cache = scenario_one()
    cache["structs"]["502"] = page("Page B", 1003)
    cache["enums"]["1001"] = hex_entry(int_enum([501, 502]))
    cache["enums"]["1003"] = {"values": [10]}
    log = build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    pages = log.tabs[0].pages
    assert pages[0].items[0] == Item(10, "Sword")
    assert pages[1].items == (Item(10, "Sword"),)
    assert log.item_count == 3
    assert log.unique_item_count == 2


def test_same_item_twice_on_one_page(tmp_path):
    cache = scenario_one()
    cache["enums"]["1002"] = {"values": [11, 10, 11]}
    log = build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    assert [i.id for i in log.tabs[0].pages[0].items] == [11, 10, 11]


def test_build_twice_gives_equal_trees(tmp_path):
    builder = CollectionLogBuilder(_store(tmp_path, **_five_tabs()))
    assert builder.build() == builder.build()


def test_empty_tab_enum_gives_tab_without_pages(tmp_path):
    cache = scenario_one()
    cache["enums"]["1001"] = hex_entry(int_enum([]))
    log = build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    assert log.tabs == (Tab(tab_id=0, pages=()),)


def test_missing_tab_struct(tmp_path):
    cache = scenario_one()
    del cache["structs"]["471"]
    with pytest.raises(RecordNotFound) as exc:
        build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    ctx = exc.value.context
    assert ctx["level"] == "tab"
    assert ctx["kind"] == "struct"
    assert ctx["id"] == 471


def test_missing_tab_enum_param(tmp_path):
    cache = scenario_one()
    cache["structs"]["471"] = {"params": {}}
    with pytest.raises(MissingParameter) as exc:
        build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    assert exc.value.context["struct_id"] == 471
    assert exc.value.context["level"] == "tab"


@pytest.mark.parametrize("param", ["689", "690"])
def test_missing_page_param_names_struct(tmp_path, param):
    cache = scenario_one()
    del cache["structs"]["501"]["params"][param]
    with pytest.raises(MissingParameter) as exc:
        build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    ctx = exc.value.context
    assert ctx["level"] == "page"
    assert ctx["struct_id"] == 501
    assert ctx["page_struct_id"] == 501
    assert ctx["param_id"] == int(param)


def test_missing_page_struct(tmp_path):
    cache = scenario_one()
    del cache["structs"]["501"]
    with pytest.raises(RecordNotFound) as exc:
        build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    assert exc.value.context["level"] == "page"
    assert exc.value.context["id"] == 501


def test_missing_items_enum(tmp_path):
    cache = scenario_one()
    del cache["enums"]["1002"]
    with pytest.raises(RecordNotFound) as exc:
        build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    ctx = exc.value.context
    assert (ctx["kind"], ctx["id"], ctx["level"]) == ("enum", 1002, "page")


def test_missing_tab_enum(tmp_path):
    cache = scenario_one()
    del cache["enums"]["1001"]
    with pytest.raises(RecordNotFound) as exc:
        build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    ctx = exc.value.context
    assert (ctx["kind"], ctx["id"], ctx["level"]) == ("enum", 1001, "tab")
    assert ctx["tab_struct_id"] == 471


def test_undecodable_tab_enum(tmp_path):
    cache = scenario_one()
    cache["enums"]["1001"] = hex_entry(b"\x00")
    with pytest.raises(DecodeFailure) as exc:
        build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    assert exc.value.context["level"] == "tab"


def test_missing_item_aborts_by_default(tmp_path):
    cache = scenario_one()
    del cache["items"]["11"]
    with pytest.raises(ItemNotFound) as exc:
        build_collection_log(_store(tmp_path, **cache), SINGLE_TAB)
    ctx = exc.value.context
    assert ctx["level"] == "item"
    assert ctx["id"] == 11
    assert ctx["page"] == "Page A"
    assert ctx["page_struct_id"] == 501


def test_missing_item_placeholder_policy(tmp_path):
    cache = scenario_one()
    del cache["items"]["11"]
    config = SINGLE_TAB.with_overrides(
        missing_items=MissingItemPolicy.PLACEHOLDER
    )
    log = build_collection_log(_store(tmp_path, **cache), config)
    assert log.tabs[0].pages[0].items == (Item(10, "Sword"), Item(11, "null"))
    assert log.placeholder_items == (11,)


def test_collect_errors_reports_every_failure(tmp_path):
    cache = _five_tabs()
    del cache["structs"]["472"]  # tab 1 struct
    del cache["items"]["139"]  # first item of tab 0 / page 0
    del cache["structs"]["620"]["params"]["689"]  # tab 2, last page
    errors = CollectionLogBuilder(_store(tmp_path, **cache)).collect_errors()
    assert [type(e) for e in errors] == [
        ItemNotFound,
        RecordNotFound,
        MissingParameter,
    ]
    assert errors[0].context["id"] == 139
    assert errors[1].context["tab_id"] == 1
    assert errors[2].context["page_struct_id"] == 620


def test_collect_errors_empty_for_good_cache(tmp_path):
    store = _store(tmp_path, **scenario_one())
    builder = CollectionLogBuilder(store, SINGLE_TAB)
    assert builder.collect_errors() == []
