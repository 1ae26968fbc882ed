from __future__ import annotations

"""
FastAPI application for Budgeteer.

- Catalog routes are plain store lookups (no remote calls)
- /api/llm/* routes go through the shopping assistant, which falls back
  to local heuristics whenever remote reasoning is off or out of budget
"""

from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from ._singletons import get_assistant, get_catalog_store
from .catalog_store import CatalogStore
from .config import (
    LOG_DIR,
    LOG_LEVEL,
    CatalogItem,
    HealthResponse,
    ItemsResponse,
    StatsResponse,
    TextResponse,
)
from .pipeline_types import Mode


# -----------------------
# Request bodies
# -----------------------

class QueryRequest(BaseModel):
    query: str = Field(..., min_length=1)
    mode: Optional[Mode] = None


class ShoppingListRequest(BaseModel):
    request: str = Field(..., min_length=1)


class InsightRequest(BaseModel):
    items: List[CatalogItem]


# -----------------------
# FastAPI app + startup
# -----------------------

app = FastAPI(title="Budgeteer")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_store: Optional[CatalogStore] = None
_log_sink_id: Optional[int] = None


@app.on_event("startup")
def startup_event() -> None:
    global _store, _log_sink_id
    if _log_sink_id is None:
        _log_sink_id = logger.add(
            LOG_DIR / "budgeteer.log",
            rotation="10 MB",
            retention=5,
            level=LOG_LEVEL,
        )
    logger.info("Starting app warmup...")
    try:
        _store = get_catalog_store()
    except FileNotFoundError as e:
        _store = None
        logger.error("Catalog unavailable: {}", e)
        return
    logger.info("Loaded catalog with {} items", _store.count)


def _require_store() -> CatalogStore:
    if _store is None:
        raise HTTPException(status_code=500, detail="Catalog not loaded")
    return _store


def _non_empty(text: str, what: str = "Query") -> str:
    text = (text or "").strip()
    if not text:
        raise HTTPException(status_code=422, detail=f"{what} must be non-empty")
    return text


def _items(items: List[CatalogItem]) -> ItemsResponse:
    return ItemsResponse(count=len(items), items=items)


# -----------------------
# Catalog routes
# -----------------------

@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    if _store is None:
        return HealthResponse(status="healthy")
    return HealthResponse(
        status="healthy",
        items=_store.count,
        remote_reasoning=get_assistant().reasoner.can_call(),
    )


@app.get("/items", response_model=ItemsResponse)
def list_items(
    name: Optional[str] = None,
    store: Optional[str] = None,
    category: Optional[str] = None,
) -> ItemsResponse:
    catalog = _require_store()
    items = catalog.find_by_name(name) if name else catalog.all_items()
    if store:
        items = [it for it in items if it.source == store]
    if category:
        items = [it for it in items if it.has_category(category)]
    return _items(items)


# Registered before /items/{item_id} so the literal path wins.
@app.get("/items/price-range", response_model=ItemsResponse)
def items_by_price_range(
    min_price: float = Query(..., alias="min"),
    max_price: float = Query(..., alias="max"),
) -> ItemsResponse:
    return _items(_require_store().find_by_price_range(min_price, max_price))


@app.get("/items/{item_id}", response_model=ItemsResponse)
def items_by_id(item_id: int) -> ItemsResponse:
    items = _require_store().find_by_id(item_id)
    if not items:
        raise HTTPException(status_code=404, detail="Item not found")
    return _items(items)


@app.get("/search", response_model=ItemsResponse)
def search(q: str = "") -> ItemsResponse:
    term = _non_empty(q, "Search term")
    return _items(_require_store().search(term))


@app.get("/compare", response_model=ItemsResponse)
def compare(q: str = "") -> ItemsResponse:
    term = _non_empty(q, "Search term")
    return _items(_require_store().compare_prices(term))


@app.get("/stats/{item_id}", response_model=StatsResponse)
def stats(item_id: int) -> StatsResponse:
    catalog = _require_store()
    if not catalog.find_by_id(item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return StatsResponse(
        product_id=item_id,
        average_price=catalog.average_price(item_id),
        min_price=catalog.min_price(item_id),
        max_price=catalog.max_price(item_id),
    )


@app.get("/stores")
def stores() -> dict:
    return {"stores": sorted(_require_store().all_sources())}


@app.get("/categories")
def categories() -> dict:
    return {"categories": sorted(_require_store().all_categories())}


# -----------------------
# Assistant routes
# -----------------------

@app.post("/api/llm/query", response_model=TextResponse)
def llm_query(req: QueryRequest) -> TextResponse:
    query = _non_empty(req.query)
    _require_store()
    return TextResponse(response=get_assistant().resolve_query(query, req.mode))


@app.post("/api/llm/shopping-list", response_model=ItemsResponse)
def llm_shopping_list(req: ShoppingListRequest) -> ItemsResponse:
    request = _non_empty(req.request, "Request")
    _require_store()
    return _items(get_assistant().build_shopping_list(request))


@app.post("/api/llm/insight", response_model=TextResponse)
def llm_insight(req: InsightRequest) -> TextResponse:
    return TextResponse(response=get_assistant().insight(req.items))
