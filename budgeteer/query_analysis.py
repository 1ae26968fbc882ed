"""Heuristic query parsing: intent, specificity, routing and term extraction."""

from __future__ import annotations

import re
from typing import Dict, List, Mapping

from .config import SIMPLE_QUERY_MAX_LEN, SPECIFIC_QUERY_MAX_LEN
from .constants import (
    BUDGET_KEYWORDS,
    COMMAND_PHRASES,
    COMPARE_KEYWORDS,
    DIRECT_SEARCH_KEYWORDS,
    NAME_NORMALIZATIONS,
    SEARCH_KEYWORDS,
    SHOPPING_LIST_KEYWORDS,
    SPECIFIC_INDICATORS,
    STOPWORDS,
)
from .normalize import clean_query_text
from .pipeline_types import Intent

# ---------------------------------------------------------------------------
# Ordered rule table: first category with a keyword hit wins
# ---------------------------------------------------------------------------

_INTENT_RULES = [
    (Intent.SEARCH, SEARCH_KEYWORDS),
    (Intent.COMPARE, COMPARE_KEYWORDS),
    (Intent.SHOPPING_LIST, SHOPPING_LIST_KEYWORDS),
    (Intent.BUDGET, BUDGET_KEYWORDS),
]

_TRAILING_PUNCT_RX = re.compile(r"[\s?!.,;:]+$")


def _contains_any(text: str, keywords: List[str]) -> bool:
    return any(k in text for k in keywords)


def detect_intent(query: str) -> Intent:
    q = (query or "").lower()
    for intent, keywords in _INTENT_RULES:
        if _contains_any(q, keywords):
            return intent
    return Intent.GENERIC


def is_specific(query: str) -> bool:
    """Brand name or unit marker present (plain containment)."""
    return _contains_any((query or "").lower(), SPECIFIC_INDICATORS)


def is_generic(query: str) -> bool:
    return not is_specific(query)


def is_simple(query: str) -> bool:
    """
    Short, unambiguous queries that can go straight to a catalog search
    without spending a remote call.
    """
    q = (query or "").lower()
    if len(q) < SIMPLE_QUERY_MAX_LEN and _contains_any(q, DIRECT_SEARCH_KEYWORDS):
        return True
    return is_specific(q) and len(q) < SPECIFIC_QUERY_MAX_LEN


def expand_category(category: str, expansions: Mapping[str, List[str]]) -> List[str]:
    """Known category -> its product terms; unknown -> [category]."""
    terms = expansions.get((category or "").lower())
    if terms:
        return list(terms)
    return [category]


def normalize_product_name(name: str) -> str:
    """Swap colloquial words ("coke", "tv") for catalog names, whole words only."""
    out = name
    for colloquial, canonical in NAME_NORMALIZATIONS.items():
        rx = re.compile(r"\b" + re.escape(colloquial) + r"\b", re.I)
        out = rx.sub(canonical, out)
    return out


def extract_search_term(query: str) -> str:
    """
    Strip a leading command phrase ("find me", "how much is", ...) and
    filler words so that the remainder can be fed to catalog search.

    Falls back to the cleaned query when nothing would be left.
    """
    q = clean_query_text(query).lower()
    q = _TRAILING_PUNCT_RX.sub("", q)
    if not q:
        return ""

    best_end = -1
    best_start = len(q) + 1
    for phrase in COMMAND_PHRASES:
        m = re.search(r"(?<![a-z])" + re.escape(phrase) + r"(?![a-z])", q)
        if m is None:
            continue
        # earliest phrase wins; longer phrase wins at the same position
        if m.start() < best_start or (m.start() == best_start and m.end() > best_end):
            best_start, best_end = m.start(), m.end()

    rest = q[best_end:] if best_end >= 0 else q
    words = rest.split()
    while words and words[0] in STOPWORDS:
        words.pop(0)
    term = " ".join(words).strip()
    return term or q


def local_search_terms(query: str, expansions: Mapping[str, List[str]]) -> List[str]:
    """
    Deterministic term expansion used when remote reasoning is off:
    a known category in the query expands to its product terms, otherwise
    the extracted (and, for specific queries, normalised) term is used.
    """
    q = (query or "").lower()
    for category, terms in expansions.items():
        if category in q:
            return list(terms)

    term = extract_search_term(query)
    if not term:
        return []
    if is_specific(query):
        term = normalize_product_name(term)
    return [term]


def dedupe_terms(terms: List[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for t in terms:
        t = (t or "").strip()
        if t and t.lower() not in seen:
            seen[t.lower()] = None
    return list(seen)
