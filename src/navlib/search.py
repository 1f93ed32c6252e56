"""Substring search over the visible section/item/sub-item tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, List, Optional

from .cursor import Address

if TYPE_CHECKING:
    from .adapter import BuildingAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    section: int
    item: Optional[int]
    sub_item: Optional[int]
    name: str

    @property
    def address(self) -> Address:
        return Address(self.section, self.item, self.sub_item)


class SearchIndex:
    """Flatten an adapter's tree into named addresses.

    Nothing is kept between searches: names are fetched from the adapter on
    every call because the tree changes as the game runs. Sub-sub-items are
    not searched.
    """

    def __init__(self, adapter: "BuildingAdapter") -> None:
        self.adapter = adapter

    def entries(self) -> Iterator[SearchResult]:
        """Yield every named address in tree order."""
        adapter = self.adapter
        for s in range(len(adapter.sections())):
            name = adapter.section_name(s)
            if name:
                yield SearchResult(s, None, None, name)
            for i in range(adapter.item_count(s)):
                name = adapter.item_name(s, i)
                if name:
                    yield SearchResult(s, i, None, name)
                for j in range(adapter.sub_item_count(s, i)):
                    name = adapter.sub_item_name(s, i, j)
                    if name:
                        yield SearchResult(s, i, j, name)

    def search(self, query: str) -> List[SearchResult]:
        """Case-insensitive substring match, results in tree order."""
        needle = (query or "").strip().lower()
        if not needle:
            return []
        results = [entry for entry in self.entries() if needle in entry.name.lower()]
        logger.debug("search %r: %d results", query, len(results))
        return results
