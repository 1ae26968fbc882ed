import json

import pytest
from pydantic import ValidationError

from budgeteer.config import (
    CatalogItem,
    HealthResponse,
    ItemsResponse,
    RankedResult,
    load_category_expansions,
)


def _item(**overrides):
    data = dict(product_id=1, name="2% Milk (2L)", price=4.99, source="Walmart")
    data.update(overrides)
    return CatalogItem(**data)


def test_catalog_item_defaults_and_categories():
    item = _item(categories={"dairy", "milk"})
    assert item.description == ""
    assert item.has_category("dairy")
    assert not item.has_category("snacks")
    assert isinstance(item.categories, frozenset)


def test_catalog_item_rejects_negative_price():
    with pytest.raises(ValidationError):
        _item(price=-1.0)


def test_catalog_item_rejects_blank_source():
    with pytest.raises(ValidationError):
        _item(source="   ")
    with pytest.raises(ValidationError):
        _item(source="")


def test_catalog_item_is_frozen():
    item = _item()
    with pytest.raises(ValidationError):
        item.price = 1.0


def test_response_models_structure():
    item = _item()
    resp = ItemsResponse(count=1, items=[item])
    assert resp.success is True
    ranked = RankedResult(label="Mixed", items=[item], total_cost=4.99)
    assert ranked.total_cost == pytest.approx(4.99)
    assert HealthResponse(status="healthy").items == 0


def test_load_category_expansions_defaults():
    expansions = load_category_expansions(path="")
    assert expansions["dairy"] == ["milk", "cheese", "yogurt", "butter", "cream"]
    assert "snacks" in expansions


def test_load_category_expansions_override(tmp_path):
    path = tmp_path / "expansions.json"
    path.write_text(json.dumps({"Baking": ["flour", "sugar"], "dairy": ["milk"]}), encoding="utf-8")

    expansions = load_category_expansions(str(path))
    assert expansions["baking"] == ["flour", "sugar"]
    assert expansions["dairy"] == ["milk"]
    # untouched defaults survive
    assert "beverages" in expansions


def test_load_category_expansions_rejects_non_object(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_category_expansions(str(path))
