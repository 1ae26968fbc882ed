from __future__ import annotations

"""
Ranking strategies and plain-text rendering of resolved item sets.
"""

from typing import Dict, List

from .config import CatalogItem, RankedResult
from .constants import NO_DATA_MESSAGE, NO_ITEMS_MESSAGE, NO_RESULTS_MESSAGE
from .pipeline_types import Mode

MIXED_LABEL = "Mixed"

_TABLE_HEADER = (
    "| Store     | Item                          | Price   | Notes              |\n"
    "|-----------|-------------------------------|---------|--------------------|\n"
)


def by_cheapest_mix(items: List[CatalogItem]) -> RankedResult:
    """Cheapest record per product name; groups keep first-seen order."""
    cheapest: Dict[str, CatalogItem] = {}
    for it in items:
        current = cheapest.get(it.name)
        if current is None or it.price < current.price:
            cheapest[it.name] = it
    picked = list(cheapest.values())
    return RankedResult(
        label=MIXED_LABEL,
        items=picked,
        total_cost=sum(it.price for it in picked),
    )


def by_single_source(items: List[CatalogItem]) -> List[RankedResult]:
    """One group per source, cheapest total first (ties broken by source name)."""
    groups: Dict[str, List[CatalogItem]] = {}
    for it in items:
        groups.setdefault(it.source, []).append(it)
    results = [
        RankedResult(label=source, items=group, total_cost=sum(it.price for it in group))
        for source, group in groups.items()
    ]
    results.sort(key=lambda r: (r.total_cost, r.label))
    return results


def budget_insight(items: List[CatalogItem]) -> str:
    if not items:
        return NO_ITEMS_MESSAGE

    total = sum(it.price for it in items)
    best = by_single_source(items)[0]
    lines = [
        "Budget Insight:",
        f"- Total items: {len(items)}",
        f"- Average price per item: ${total / len(items):.2f}",
        f"- Cheapest single-store option: {best.label} (${best.total_cost:.2f})",
        f"- Potential savings: ${total - best.total_cost:.2f} by shopping at {best.label}",
    ]
    return "\n".join(lines)


def format_table(items: List[CatalogItem]) -> str:
    """Markdown table of store / item / price rows."""
    if not items:
        return NO_RESULTS_MESSAGE
    rows = [
        f"| {it.source:<9} | {it.name[:29]:<29} | ${it.price:>6.2f} | {'In stock':<18} |"
        for it in items
    ]
    return "\n" + _TABLE_HEADER + "\n".join(rows) + "\n"


def format_response(items: List[CatalogItem], mode: Mode = Mode.CHEAPEST_MIX) -> str:
    if not items:
        return NO_DATA_MESSAGE

    if mode == Mode.CHEAPEST_MIX:
        ranked = by_cheapest_mix(items)
        return (
            "Here are the cheapest options across all stores:\n"
            + format_table(ranked.items)
            + f"\nTotal: ${ranked.total_cost:.2f}"
        )
    if mode == Mode.SINGLE_SOURCE:
        best = by_single_source(items)[0]
        return (
            f"Best single-store option: {best.label}\n"
            + format_table(best.items)
            + f"\nTotal: ${best.total_cost:.2f}"
        )
    return budget_insight(items)
