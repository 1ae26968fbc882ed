import pandas as pd
import pytest

from budgeteer.catalog_build import (
    load_catalog_items,
    normalize_catalog_df,
    parse_categories,
    parse_price,
)


CSV_TEXT = """item_id,item_name,item_description,current_price,store,category_tags,image_url,price_date
1,2% Milk (2L),Partly skimmed milk,4.99,Walmart,"dairy,milk",http://img/1.png,2025-01-15
1,2% Milk (2L),Partly skimmed milk,5.49,Loblaws,"dairy,milk",,2025-01-15
2,Broken Row,No price here,,Walmart,dairy,,2025-01-15
3,Negative,Bad price,-2.00,Walmart,dairy,,2025-01-15
4,No Store,Missing vendor,1.00,,dairy,,2025-01-15
"""


def test_parse_price():
    assert parse_price("4.99") == pytest.approx(4.99)
    assert parse_price("$1,299.00") == pytest.approx(1299.0)
    with pytest.raises(ValueError):
        parse_price("")
    with pytest.raises(ValueError):
        parse_price("abc")


def test_parse_categories():
    assert parse_categories("dairy, milk") == frozenset({"dairy", "milk"})
    assert parse_categories("") == frozenset()


def test_normalize_catalog_df_alternate_headers():
    raw = pd.DataFrame(
        {
            "ID": ["7"],
            "Name": ["Cheddar Cheese (400g)"],
            "Description": ["  Aged   cheddar "],
            "Price": ["$7.99"],
            "Vendor": ["Costco"],
            "Categories": ["dairy,cheese"],
        }
    )
    items = normalize_catalog_df(raw)
    assert len(items) == 1
    item = items[0]
    assert item.product_id == 7
    assert item.description == "Aged cheddar"
    assert item.price == pytest.approx(7.99)
    assert item.source == "Costco"
    assert item.categories == frozenset({"dairy", "cheese"})
    assert item.image_ref == ""


def test_load_catalog_items_skips_bad_rows(tmp_path):
    path = tmp_path / "catalog.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")

    items = load_catalog_items(path)

    # only the two well-formed milk rows survive, in file order
    assert [it.source for it in items] == ["Walmart", "Loblaws"]
    assert all(it.price >= 0 and it.source for it in items)
    assert items[0].image_ref == "http://img/1.png"
    assert items[0].price_date == "2025-01-15"


def test_load_catalog_items_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_catalog_items(tmp_path / "nope.csv")
