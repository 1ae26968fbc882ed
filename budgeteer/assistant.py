from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

from loguru import logger

from . import prompts
from .config import MAX_REFINEMENT_ITERATIONS, QUERY_ANALYSIS_MAX_TERMS, CatalogItem, load_category_expansions
from .constants import UNPROCESSABLE_MESSAGE
from .llm_client import parse_json_payload
from .normalize import clean_query_text
from .pipeline_types import Intent, Mode
from .query_analysis import dedupe_terms, detect_intent, is_simple, local_search_terms
from .ranking import budget_insight, format_response
from .refinement import Reasoner, RefinementEngine, Searcher, dedupe_by_name


def _unique_records(items: Iterable[CatalogItem]) -> List[CatalogItem]:
    # same record reached through several search terms
    seen = set()
    out: List[CatalogItem] = []
    for it in items:
        key = (it.product_id, it.name, it.source, it.price_date)
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out


class ShoppingAssistant:
    """
    Query entrypoint consumed by the API and the CLI.

    Simple queries are answered from a direct catalog search; anything
    else goes through term analysis and the refinement engine.
    """

    def __init__(
        self,
        store: Searcher,
        reasoner: Reasoner,
        expansions: Optional[Mapping[str, List[str]]] = None,
        max_iterations: int = MAX_REFINEMENT_ITERATIONS,
    ):
        self.store = store
        self.reasoner = reasoner
        self.expansions: Dict[str, List[str]] = (
            {k: list(v) for k, v in expansions.items()} if expansions is not None else load_category_expansions()
        )
        self.engine = RefinementEngine(store, reasoner, max_iterations=max_iterations)

    def add_category_expansion(self, category: str, products: Iterable[str]) -> None:
        self.expansions[category.lower()] = list(products)

    # ---------------------------
    # Term resolution
    # ---------------------------

    def _remote_terms(self, query: str) -> List[str]:
        prompt = prompts.QUERY_ANALYSIS.format(query=query, max_terms=QUERY_ANALYSIS_MAX_TERMS)
        data = parse_json_payload(self.reasoner.complete(prompt))
        if isinstance(data, dict):
            raw = data.get("search_terms")
        else:
            raw = data
        if not isinstance(raw, list):
            return []
        terms = dedupe_terms([str(t) for t in raw if isinstance(t, str)])
        return terms[:QUERY_ANALYSIS_MAX_TERMS]

    def initial_terms(self, query: str) -> List[str]:
        if not is_simple(query) and self.reasoner.can_call():
            terms = self._remote_terms(query)
            if terms:
                logger.info("Query analysis terms: {}", terms)
                return terms
            logger.info("Query analysis gave nothing usable; using local terms")
        terms = local_search_terms(query, self.expansions)
        logger.info("Local search terms: {}", terms)
        return terms

    def _search_all(self, terms: List[str]) -> List[CatalogItem]:
        items: List[CatalogItem] = []
        for term in terms:
            items.extend(self.store.search(term))
        return _unique_records(items)

    # ---------------------------
    # Produced surface
    # ---------------------------

    def build_shopping_list(self, request: str) -> List[CatalogItem]:
        query = clean_query_text(request)
        if not query:
            return []

        working = dedupe_by_name(self._search_all(self.initial_terms(query)))
        if not working:
            logger.info("No catalog items for {!r}", query)
            return []
        return self.engine.run(query, working).items

    def resolve_query(self, text: str, mode: Optional[Mode] = None) -> str:
        """
        Answer a free-text query. Without an explicit mode, budget-style
        questions get the budget insight and everything else the cheapest mix.
        """
        query = clean_query_text(text)
        if not query:
            return UNPROCESSABLE_MESSAGE

        intent = detect_intent(query)
        if mode is None:
            mode = Mode.BUDGET_INSIGHT if intent == Intent.BUDGET else Mode.CHEAPEST_MIX
        if is_simple(query):
            logger.info("Query {!r}: intent={} simple -> direct search", query, intent.value)
            items = self._search_all(local_search_terms(query, self.expansions))
        else:
            logger.info("Query {!r}: intent={} -> shopping list", query, intent.value)
            items = self.build_shopping_list(query)
        return format_response(items, mode)

    def insight(self, items: List[CatalogItem]) -> str:
        return budget_insight(items)
