# budgeteer/_singletons.py
from functools import lru_cache

from .assistant import ShoppingAssistant
from .catalog_store import CatalogStore
from .config import DAILY_QUERY_LIMIT, load_category_expansions
from .llm_client import QueryBudget, ReasoningClient


@lru_cache(maxsize=1)
def get_catalog_store() -> CatalogStore:
    return CatalogStore.from_csv()


@lru_cache(maxsize=1)
def get_budget() -> QueryBudget:
    return QueryBudget(DAILY_QUERY_LIMIT)


@lru_cache(maxsize=1)
def get_reasoning_client() -> ReasoningClient:
    return ReasoningClient(budget=get_budget())


@lru_cache(maxsize=1)
def get_assistant() -> ShoppingAssistant:
    return ShoppingAssistant(
        get_catalog_store(),
        get_reasoning_client(),
        expansions=load_category_expansions(),
    )
