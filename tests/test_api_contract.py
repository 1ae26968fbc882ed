from fastapi.testclient import TestClient

from budgeteer import api
from budgeteer.api import app
from budgeteer.assistant import ShoppingAssistant
from budgeteer.catalog_store import CatalogStore
from budgeteer.config import CatalogItem
from budgeteer.constants import DEFAULT_CATEGORY_EXPANSIONS


client = TestClient(app)


def _item(product_id, name, price, source, categories=()):
    return CatalogItem(
        product_id=product_id,
        name=name,
        price=price,
        source=source,
        categories=frozenset(categories),
    )


def _store():
    return CatalogStore(
        [
            _item(1, "2% Milk (2L)", 4.99, "Walmart", {"dairy"}),
            _item(1, "2% Milk (2L)", 5.49, "Loblaws", {"dairy"}),
            _item(2, "All-Purpose Flour (5kg)", 8.99, "Walmart", {"baking"}),
            _item(3, "Large Eggs (12 pack)", 4.19, "Loblaws", {"dairy", "eggs"}),
        ]
    )


class Offline:
    def can_call(self):
        return False

    def complete(self, prompt):
        return ""


def _install(monkeypatch):
    store = _store()
    assistant = ShoppingAssistant(store, Offline(), expansions=DEFAULT_CATEGORY_EXPANSIONS)
    monkeypatch.setattr(api, "_store", store)
    monkeypatch.setattr(api, "get_assistant", lambda: assistant)
    return store


def test_health_endpoint(monkeypatch):
    _install(monkeypatch)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "items": 4, "remote_reasoning": False}


def test_catalog_not_loaded_is_500(monkeypatch):
    monkeypatch.setattr(api, "_store", None)
    resp = client.get("/search", params={"q": "milk"})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Catalog not loaded"


def test_items_filters(monkeypatch):
    _install(monkeypatch)
    data = client.get("/items").json()
    assert data["success"] is True
    assert data["count"] == 4

    data = client.get("/items", params={"store": "Loblaws", "category": "dairy"}).json()
    assert [it["name"] for it in data["items"]] == ["2% Milk (2L)", "Large Eggs (12 pack)"]

    data = client.get("/items", params={"name": "flour"}).json()
    assert data["count"] == 1


def test_items_by_id_and_price_range(monkeypatch):
    _install(monkeypatch)
    assert client.get("/items/1").json()["count"] == 2
    assert client.get("/items/99").status_code == 404

    data = client.get("/items/price-range", params={"min": 4.0, "max": 5.0}).json()
    assert sorted(it["price"] for it in data["items"]) == [4.19, 4.99]

    data = client.get("/items/price-range", params={"min": 5.0, "max": 4.0}).json()
    assert data["count"] == 0


def test_search_and_compare(monkeypatch):
    _install(monkeypatch)
    data = client.get("/search", params={"q": "milk"}).json()
    assert data["count"] == 2

    prices = [it["price"] for it in client.get("/compare", params={"q": "milk"}).json()["items"]]
    assert prices == [4.99, 5.49]

    assert client.get("/search", params={"q": "  "}).status_code == 422


def test_stats_stores_categories(monkeypatch):
    _install(monkeypatch)
    stats = client.get("/stats/1").json()
    assert stats["min_price"] == 4.99
    assert stats["max_price"] == 5.49
    assert client.get("/stats/42").status_code == 404

    assert client.get("/stores").json() == {"stores": ["Loblaws", "Walmart"]}
    assert client.get("/categories").json() == {"categories": ["baking", "dairy", "eggs"]}


def test_llm_query_requires_non_empty(monkeypatch):
    _install(monkeypatch)
    assert client.post("/api/llm/query", json={"query": " "}).status_code == 422
    assert client.post("/api/llm/query", json={"query": ""}).status_code == 422


def test_llm_query_returns_text(monkeypatch):
    _install(monkeypatch)
    resp = client.post("/api/llm/query", json={"query": "find milk", "mode": "single_source"})
    assert resp.status_code == 200
    assert resp.json()["response"].startswith("Best single-store option: Walmart")


def test_llm_shopping_list_and_insight(monkeypatch):
    _install(monkeypatch)
    resp = client.post("/api/llm/shopping-list", json={"request": "restock the dairy shelf at home"})
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert "2% Milk (2L)" in [it["name"] for it in items]

    resp = client.post("/api/llm/insight", json={"items": items})
    assert resp.status_code == 200
    assert resp.json()["response"].startswith("Budget Insight:")

    resp = client.post("/api/llm/insight", json={"items": []})
    assert resp.json()["response"] == "No items to analyze."
