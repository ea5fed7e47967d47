"""Collection log tree: tabs, pages and items."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

__all__ = ["Item", "Page", "Tab", "CollectionLog"]


@dataclass(frozen=True, slots=True)
class Item:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Page:
    name: str
    items: Tuple[Item, ...] = ()
    # Diagnostics only; not part of the serialized document.
    struct_id: int = field(default=-1, compare=False)


@dataclass(frozen=True, slots=True)
class Tab:
    tab_id: int
    pages: Tuple[Page, ...] = ()
    struct_id: int = field(default=-1, compare=False)

    @property
    def item_count(self) -> int:
        return sum(len(p.items) for p in self.pages)


@dataclass(frozen=True, slots=True)
class CollectionLog:
    tabs: Tuple[Tab, ...] = ()
    # Item ids emitted with the placeholder name, in traversal order.
    placeholder_items: Tuple[int, ...] = field(default=(), compare=False)

    @property
    def page_count(self) -> int:
        return sum(len(t.pages) for t in self.tabs)

    @property
    def item_count(self) -> int:
        return sum(t.item_count for t in self.tabs)

    @property
    def unique_item_count(self) -> int:
        return len(
            {i.id for t in self.tabs for p in t.pages for i in p.items}
        )
