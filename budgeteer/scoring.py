from __future__ import annotations

"""
Relevance signals for catalog search.

Every signal is a pure function of (term, item) so that a score can be
re-derived for any returned item. `score_item` sums them.
"""

import re

from rapidfuzz.distance import Levenshtein

from .config import (
    MIN_WORD_LENGTH,
    SCORE_DESC_CONTAINS,
    SCORE_EXACT_NAME,
    SCORE_NAME_CONTAINS,
    SCORE_NAME_PREFIX,
    SCORE_SIMILARITY_WEIGHT,
    SCORE_WORD_IN_DESC,
    SCORE_WORD_IN_NAME,
    SIMILARITY_SKIP_AT,
    CatalogItem,
)


def name_similarity(term: str, name: str) -> float:
    """1 - levenshtein(term, name) / max(len); 0.0 when either side is empty."""
    if not term or not name:
        return 0.0
    return float(Levenshtein.normalized_similarity(term, name))


def _contains_at_word_start(term: str, text: str) -> bool:
    # "flour" inside "sunflower" does not count
    rx = re.compile(r"(?<![a-z0-9])" + re.escape(term))
    return rx.search(text) is not None


def name_match_signal(term: str, name: str) -> float:
    """Exact > prefix (term + ' ' / term + ' (') > contains. Inputs lowercased."""
    if name == term:
        return SCORE_EXACT_NAME
    if name.startswith(term + " ") or name.startswith(term + " ("):
        return SCORE_NAME_PREFIX
    if _contains_at_word_start(term, name):
        return SCORE_NAME_CONTAINS
    return 0.0


def word_signals(term: str, name: str, description: str) -> float:
    """Per-word permissive substring hits for whitespace-delimited words of 3+ chars."""
    score = 0.0
    for word in term.split():
        if len(word) < MIN_WORD_LENGTH:
            continue
        if word in name:
            score += SCORE_WORD_IN_NAME
        if word in description:
            score += SCORE_WORD_IN_DESC
    return score


def score_item(item: CatalogItem, term: str) -> float:
    t = term.strip().lower()
    if not t:
        return 0.0
    name = item.name.lower()
    desc = item.description.lower()

    score = name_match_signal(t, name)
    if t in desc:
        score += SCORE_DESC_CONTAINS
    if score < SIMILARITY_SKIP_AT:
        score += name_similarity(t, name) * SCORE_SIMILARITY_WEIGHT
    score += word_signals(t, name, desc)
    return score
