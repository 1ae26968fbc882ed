import pytest

from budgeteer.config import CatalogItem
from budgeteer.pipeline_types import Mode
from budgeteer.ranking import (
    budget_insight,
    by_cheapest_mix,
    by_single_source,
    format_response,
    format_table,
)


def _item(product_id, name, price, source):
    return CatalogItem(product_id=product_id, name=name, price=price, source=source)


MILK_WALMART = _item(1, "2% Milk (2L)", 4.99, "Walmart")
MILK_LOBLAWS = _item(1, "2% Milk (2L)", 5.49, "Loblaws")


def test_cheapest_mix_picks_lowest_price_per_name():
    ranked = by_cheapest_mix([MILK_LOBLAWS, MILK_WALMART])
    assert ranked.label == "Mixed"
    assert len(ranked.items) == 1
    assert ranked.items[0].source == "Walmart"
    assert ranked.total_cost == pytest.approx(4.99)


def test_cheapest_mix_keeps_first_seen_order():
    eggs = _item(5, "Eggs", 4.19, "Loblaws")
    ranked = by_cheapest_mix([eggs, MILK_LOBLAWS, MILK_WALMART])
    assert [it.name for it in ranked.items] == ["Eggs", "2% Milk (2L)"]
    assert ranked.total_cost == pytest.approx(4.19 + 4.99)


def test_single_source_sorted_by_total():
    groups = by_single_source([MILK_LOBLAWS, MILK_WALMART])
    assert [g.label for g in groups] == ["Walmart", "Loblaws"]
    assert [g.total_cost for g in groups] == [pytest.approx(4.99), pytest.approx(5.49)]


def test_single_source_ties_break_on_name():
    a = _item(1, "Bread", 2.0, "Zehrs")
    b = _item(1, "Bread", 2.0, "Costco")
    assert [g.label for g in by_single_source([a, b])] == ["Costco", "Zehrs"]


def test_budget_insight_text():
    text = budget_insight([MILK_WALMART, MILK_LOBLAWS])
    assert text.splitlines() == [
        "Budget Insight:",
        "- Total items: 2",
        "- Average price per item: $5.24",
        "- Cheapest single-store option: Walmart ($4.99)",
        "- Potential savings: $5.49 by shopping at Walmart",
    ]


def test_budget_insight_empty():
    assert budget_insight([]) == "No items to analyze."


def test_format_table_rows():
    table = format_table([MILK_WALMART])
    assert "| Store" in table
    assert "Walmart" in table
    assert "$  4.99" in table
    assert "In stock" in table
    assert format_table([]) == "No items found matching your criteria."


def test_format_response_modes():
    items = [MILK_LOBLAWS, MILK_WALMART]
    mix = format_response(items, Mode.CHEAPEST_MIX)
    assert mix.startswith("Here are the cheapest options across all stores:")
    assert mix.endswith("Total: $4.99")

    single = format_response(items, Mode.SINGLE_SOURCE)
    assert single.startswith("Best single-store option: Walmart")

    insight = format_response(items, Mode.BUDGET_INSIGHT)
    assert insight.startswith("Budget Insight:")

    assert format_response([], Mode.CHEAPEST_MIX) == "No data available for your query."
