"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .config import CatalogItem


class Intent(str, Enum):
    SEARCH = "SEARCH"
    COMPARE = "COMPARE"
    SHOPPING_LIST = "SHOPPING_LIST"
    BUDGET = "BUDGET"
    GENERIC = "GENERIC"


class Mode(str, Enum):
    CHEAPEST_MIX = "cheapest_mix"
    SINGLE_SOURCE = "single_source"
    BUDGET_INSIGHT = "budget_insight"


class Phase(str, Enum):
    CHERRY_PICK = "cherry_pick"
    REASON = "reason"
    APPLY = "apply"
    VALIDATE = "validate"
    DONE = "done"


@dataclass
class ScoredItem:
    """Catalog item paired with its relevance score for one search call."""

    item: CatalogItem
    score: float


@dataclass
class ReasoningOutcome:
    is_complete: bool
    reasoning: str = ""
    missing_terms: List[str] = field(default_factory=list)
    unnecessary_names: List[str] = field(default_factory=list)

    @property
    def has_suggestions(self) -> bool:
        return bool(self.missing_terms or self.unnecessary_names)


@dataclass
class RefinementResult:
    items: List[CatalogItem]
    iterations: int = 0
    phases: List[Phase] = field(default_factory=list)
