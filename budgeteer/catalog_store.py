from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Set

from loguru import logger

from .catalog_build import load_catalog_items
from .config import SEARCH_MAX_RESULTS, SEARCH_MIN_SCORE, CatalogItem
from .pipeline_types import ScoredItem
from .scoring import score_item


class CatalogStore:
    """
    In-memory, read-only catalog.

    All lookups scan the full set in load order and return new lists;
    records themselves are frozen, so sharing the store across requests
    needs no locking.
    """

    def __init__(self, items: Iterable[CatalogItem] = ()):
        self._items: List[CatalogItem] = list(items)

    @classmethod
    def from_csv(cls, path: Optional[Path] = None) -> "CatalogStore":
        store = cls(load_catalog_items(path))
        logger.info("Catalog store ready with {} items", store.count)
        return store

    @property
    def count(self) -> int:
        return len(self._items)

    def all_items(self) -> List[CatalogItem]:
        return list(self._items)

    # ---------------------------
    # Structural lookups
    # ---------------------------

    def find_by_id(self, product_id: int) -> List[CatalogItem]:
        return [it for it in self._items if it.product_id == product_id]

    def find_by_name(self, fragment: str) -> List[CatalogItem]:
        frag = (fragment or "").strip().lower()
        if not frag:
            return []
        return [it for it in self._items if frag in it.name.lower()]

    def find_by_source(self, source: str) -> List[CatalogItem]:
        return [it for it in self._items if it.source == source]

    def find_by_category(self, tag: str) -> List[CatalogItem]:
        return [it for it in self._items if it.has_category(tag)]

    def find_by_price_range(self, min_price: float, max_price: float) -> List[CatalogItem]:
        if min_price < 0 or max_price < 0 or min_price > max_price:
            logger.warning("Invalid price range [{}, {}]; returning no items", min_price, max_price)
            return []
        return [it for it in self._items if min_price <= it.price <= max_price]

    # ---------------------------
    # Fuzzy search
    # ---------------------------

    def search_scored(self, term: str) -> List[ScoredItem]:
        """Ranked (item, score) pairs above the threshold, capped."""
        if not term or not term.strip():
            return []
        scored = []
        for it in self._items:
            s = score_item(it, term)
            if s > SEARCH_MIN_SCORE:
                scored.append(ScoredItem(item=it, score=s))
        # sorted() is stable, so equal scores keep load order
        scored = sorted(scored, key=lambda si: si.score, reverse=True)
        return scored[:SEARCH_MAX_RESULTS]

    def search(self, term: str) -> List[CatalogItem]:
        results = [si.item for si in self.search_scored(term)]
        logger.debug("search({!r}) -> {} items", term, len(results))
        return results

    def search_source(self, source: str, term: str) -> List[CatalogItem]:
        return [it for it in self.search(term) if it.source == source]

    def compare_prices(self, term: str) -> List[CatalogItem]:
        """Search results ordered cheapest first."""
        return sorted(self.search(term), key=lambda it: it.price)

    # ---------------------------
    # Statistics
    # ---------------------------

    def _prices(self, product_id: int) -> List[float]:
        return [it.price for it in self.find_by_id(product_id)]

    def average_price(self, product_id: int) -> float:
        prices = self._prices(product_id)
        return sum(prices) / len(prices) if prices else 0.0

    def min_price(self, product_id: int) -> float:
        prices = self._prices(product_id)
        return min(prices) if prices else 0.0

    def max_price(self, product_id: int) -> float:
        prices = self._prices(product_id)
        return max(prices) if prices else 0.0

    def all_sources(self) -> Set[str]:
        return {it.source for it in self._items}

    def all_categories(self) -> Set[str]:
        out: Set[str] = set()
        for it in self._items:
            out.update(it.categories)
        return out
