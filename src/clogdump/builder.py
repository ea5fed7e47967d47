"""Collection log reconstruction.

The collection log is not stored in the cache directly. It is rebuilt by
following a fixed chain of references:

    tab struct --tab-enum-id--> enum of page struct ids
    page struct --page-name--> display name
                --page-items-enum-id--> enum of item ids
    item id --item table--> item name

Order is preserved at every level and nothing is deduplicated: an item listed
on two pages is resolved twice. The builder only reads the store, so building
twice from the same store gives equal trees.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from .cache.store import RecordStore
from .config import DEFAULT_CONFIG, ExtractConfig, MissingItemPolicy
from .errors import ExtractError, not_found
from .logging import get_logger, section
from .models import CollectionLog, Item, Page, Tab
from .reporting import get_reporter, task
from .resolve import EnumResolver, ParameterResolver

__all__ = ["CollectionLogBuilder", "build_collection_log"]


@contextmanager
def _located(**ctx: Any) -> Iterator[None]:
    """Tag errors raised in the block with where the traversal was."""
    try:
        yield
    except ExtractError as e:
        e.context = {**ctx, **(e.context or {})}
        raise


class CollectionLogBuilder:
    def __init__(
        self, store: RecordStore, config: ExtractConfig = DEFAULT_CONFIG
    ) -> None:
        self._store = store
        self._config = config
        self._params = ParameterResolver(store)
        self._enums = EnumResolver(store.enum_batch)

    def build(self) -> CollectionLog:
        """Build the full tree, raising on the first resolution failure."""
        return self._run(errors=None)

    def collect_errors(self) -> List[ExtractError]:
        """Walk the whole log and return every failure instead of raising.

        Failed tabs and pages are skipped so their children are not visited;
        the partial tree is discarded.
        """
        errors: List[ExtractError] = []
        self._run(errors=errors)
        return errors

    # Traversal ----------------------------------------------------------------
    def _run(self, errors: Optional[List[ExtractError]]) -> CollectionLog:
        tabs: List[Tab] = []
        placeholders: List[int] = []
        with section("Build collection log"):
            for tab_id, struct_id in enumerate(self._config.tab_struct_ids):
                try:
                    tab = self._build_tab(
                        tab_id, struct_id, errors, placeholders
                    )
                except ExtractError as e:
                    if errors is None:
                        raise
                    errors.append(e)
                    continue
                tabs.append(tab)
        log = CollectionLog(
            tabs=tuple(tabs), placeholder_items=tuple(placeholders)
        )
        if errors is None:
            get_reporter().status(
                "Collection log summary: "
                + f"tabs={len(log.tabs)} pages={log.page_count} "
                + f"items={log.item_count} "
                + f"unique_items={log.unique_item_count}"
            )
        return log

    def _build_tab(
        self,
        tab_id: int,
        struct_id: int,
        errors: Optional[List[ExtractError]],
        placeholders: List[int],
    ) -> Tab:
        cfg = self._config
        with _located(level="tab", tab_id=tab_id, tab_struct_id=struct_id):
            enum_id = self._params.require(
                struct_id, cfg.tab_enum_param, int, param="tab-enum-id"
            )
            page_ids = self._enums.resolve(enum_id)

        rep = get_reporter()
        task_id = f"tab.{tab_id}"
        pages: List[Page] = []
        items_seen = 0
        with task(task_id, cfg.tab_label(tab_id), total=len(page_ids)):
            for page_struct_id in page_ids:
                try:
                    page = self._build_page(
                        tab_id, page_struct_id, errors, placeholders
                    )
                except ExtractError as e:
                    if errors is None:
                        raise
                    errors.append(e)
                    rep.advance(task_id, current_item=f"#{page_struct_id}")
                    continue
                pages.append(page)
                items_seen += len(page.items)
                rep.advance(
                    task_id,
                    current_item=page.name,
                    pages=len(pages),
                    items=items_seen,
                )
        return Tab(tab_id=tab_id, pages=tuple(pages), struct_id=struct_id)

    def _build_page(
        self,
        tab_id: int,
        struct_id: int,
        errors: Optional[List[ExtractError]],
        placeholders: List[int],
    ) -> Page:
        cfg = self._config
        with _located(level="page", tab_id=tab_id, page_struct_id=struct_id):
            name = self._params.require(
                struct_id, cfg.page_name_param, str, param="page-name"
            )
            items_enum_id = self._params.require(
                struct_id,
                cfg.page_items_enum_param,
                int,
                param="page-items-enum-id",
            )
            item_ids = self._enums.resolve(items_enum_id)

        items: List[Item] = []
        for item_id in item_ids:
            try:
                items.append(
                    self._build_item(
                        tab_id, struct_id, name, item_id, placeholders
                    )
                )
            except ExtractError as e:
                if errors is None:
                    raise
                errors.append(e)
        return Page(name=name, items=tuple(items), struct_id=struct_id)

    def _build_item(
        self,
        tab_id: int,
        page_struct_id: int,
        page_name: str,
        item_id: int,
        placeholders: List[int],
    ) -> Item:
        record = self._store.find_item(item_id)
        if record is not None:
            return Item(id=record.id, name=record.name)
        ctx = {
            "level": "item",
            "tab_id": tab_id,
            "page_struct_id": page_struct_id,
            "page": page_name,
        }
        if self._config.missing_items is MissingItemPolicy.ABORT:
            raise not_found("item", item_id, ctx)
        get_logger().warning(
            "Item %d on page '%s' (struct %d) not found; emitting '%s'",
            item_id,
            page_name,
            page_struct_id,
            self._config.placeholder_name,
        )
        placeholders.append(item_id)
        return Item(id=item_id, name=self._config.placeholder_name)


def build_collection_log(
    store: RecordStore, config: ExtractConfig = DEFAULT_CONFIG
) -> CollectionLog:
    return CollectionLogBuilder(store, config).build()
