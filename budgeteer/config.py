from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, FrozenSet, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_CATEGORY_EXPANSIONS


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"
CATALOG_CSV_PATH = Path(
    os.getenv("BUDGETEER_CATALOG_PATH", str(DATA_DIR / "catalog.csv"))
)
CATEGORY_EXPANSIONS_PATH = os.getenv("BUDGETEER_CATEGORY_EXPANSIONS_PATH", "")


# ---------------------------
# Search scoring
# ---------------------------

SCORE_EXACT_NAME = 200.0
SCORE_NAME_PREFIX = 150.0
SCORE_NAME_CONTAINS = 100.0
SCORE_DESC_CONTAINS = 40.0
SCORE_SIMILARITY_WEIGHT = 60.0
SCORE_WORD_IN_NAME = 25.0
SCORE_WORD_IN_DESC = 10.0

SIMILARITY_SKIP_AT = 100.0   # edit distance only for weak matches
MIN_WORD_LENGTH = 3

SEARCH_MIN_SCORE = 15.0      # strict: score must exceed this
SEARCH_MAX_RESULTS = 50


# ---------------------------
# Remote reasoning (OpenAI-compatible chat completions)
# ---------------------------

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "500"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.3"))

DAILY_QUERY_LIMIT = int(os.getenv("DAILY_QUERY_LIMIT", "100"))

HTTP_CONNECT_TIMEOUT = float(os.getenv("HTTP_CONNECT_TIMEOUT", "5.0"))
HTTP_READ_TIMEOUT = float(os.getenv("HTTP_READ_TIMEOUT", "20.0"))

HTTP_USER_AGENT = "budgeteer/1.0"


# ---------------------------
# Refinement pipeline
# ---------------------------

MAX_REFINEMENT_ITERATIONS = int(os.getenv("MAX_REFINEMENT_ITERATIONS", "3"))

CHERRY_PICK_SKIP_AT = 20          # |W| <= this -> no cherry-pick
CHERRY_PICK_FALLBACK_SIZE = 20
CHERRY_PICK_MAX_CANDIDATES = 50

REASONING_MAX_NAMES_SHOWN = 30
REASONING_MAX_SUGGESTIONS = 4

GOOD_MATCH_SHORT_TERM_MAX = 5

QUERY_ANALYSIS_MAX_TERMS = 8

# Query classifier length gates
SIMPLE_QUERY_MAX_LEN = 30
SPECIFIC_QUERY_MAX_LEN = 50


# ---------------------------
# Logging / observability
# ---------------------------

LOG_DIR = PROJECT_ROOT / "logs"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def load_category_expansions(path: str | None = None) -> Dict[str, List[str]]:
    """
    Category → product-term mapping used for generic queries.

    Defaults come from constants; a JSON object file (category -> [terms])
    named by BUDGETEER_CATEGORY_EXPANSIONS_PATH overrides or extends them.
    """
    expansions = {k: list(v) for k, v in DEFAULT_CATEGORY_EXPANSIONS.items()}
    path = path if path is not None else CATEGORY_EXPANSIONS_PATH
    if not path:
        return expansions

    with Path(path).open("r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Category expansions file must hold a JSON object: {path}")
    for category, terms in raw.items():
        expansions[str(category).lower()] = [str(t) for t in terms]
    return expansions


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class CatalogItem(BaseModel):
    """
    One priced product record tied to a source and a price date.

    product_id is shared across sources/dates, so it is not a unique key.
    """

    model_config = ConfigDict(frozen=True)

    product_id: int
    name: str
    description: str = ""
    price: float = Field(ge=0)
    source: str = Field(min_length=1)
    categories: FrozenSet[str] = frozenset()
    image_ref: str = ""
    price_date: str = ""

    @field_validator("source")
    @classmethod
    def _source_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("source must be non-empty")
        return v

    def has_category(self, tag: str) -> bool:
        return tag in self.categories


class RankedResult(BaseModel):
    """A named group of items ("Mixed" or a single source) with its total."""

    label: str
    items: List[CatalogItem]
    total_cost: float


class ItemsResponse(BaseModel):
    success: bool = True
    count: int
    items: List[CatalogItem]


class StatsResponse(BaseModel):
    product_id: int
    average_price: float
    min_price: float
    max_price: float


class TextResponse(BaseModel):
    response: str


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
    items: int = 0
    remote_reasoning: bool = False
