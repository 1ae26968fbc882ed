from __future__ import annotations

"""
Iterative refinement of a candidate shopping list.

The engine is a small state machine over a working set W:

    CHERRY_PICK -> REASON <-> APPLY -> VALIDATE -> DONE

Each remote-assisted phase has exactly one local fallback, so a missing
API key, an exhausted budget or garbage output only ever degrades the
answer:

* cherry-pick  -> first CHERRY_PICK_FALLBACK_SIZE items of W
* reason       -> treat W as complete, leave the loop
* validate     -> W unchanged
"""

import re
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from loguru import logger

from . import prompts
from .config import (
    CHERRY_PICK_FALLBACK_SIZE,
    CHERRY_PICK_MAX_CANDIDATES,
    CHERRY_PICK_SKIP_AT,
    GOOD_MATCH_SHORT_TERM_MAX,
    MAX_REFINEMENT_ITERATIONS,
    REASONING_MAX_NAMES_SHOWN,
    REASONING_MAX_SUGGESTIONS,
    CatalogItem,
)
from .llm_client import parse_json_payload
from .normalize import name_key, unique_names
from .pipeline_types import Phase, ReasoningOutcome, RefinementResult


class Reasoner(Protocol):
    def can_call(self) -> bool: ...

    def complete(self, prompt: str) -> str: ...


class Searcher(Protocol):
    def search(self, term: str) -> List[CatalogItem]: ...


# ---------------------------
# Helpers
# ---------------------------

def dedupe_by_name(items: Sequence[CatalogItem]) -> List[CatalogItem]:
    """Keep the first record per case-insensitive name."""
    seen = set()
    out: List[CatalogItem] = []
    for it in items:
        key = name_key(it.name)
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out


def is_good_match(name: str, term: str) -> bool:
    """
    Boundary-aware check used before re-adding a missing item:

    - name starts with the term, or
    - term sits between spaces/parentheses (or the ends) inside the name, or
    - short terms (<= 5 chars) with non-alphanumeric neighbours.

    "Sunflower Oil" is not a match for "flour".
    """
    n = (name or "").strip().lower()
    t = (term or "").strip().lower()
    if not t or not n:
        return False
    if n.startswith(t):
        return True
    esc = re.escape(t)
    if re.search(r"(?:^|[\s(])" + esc + r"(?:$|[\s)])", n):
        return True
    if len(t) <= GOOD_MATCH_SHORT_TERM_MAX and re.search(r"(?<![a-z0-9])" + esc + r"(?![a-z0-9])", n):
        return True
    return False


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


def _names_from_payload(data: Any, *keys: str) -> Optional[List[str]]:
    """Accept a bare JSON array, or an object holding one under `keys`."""
    if isinstance(data, list):
        return _string_list(data)
    if isinstance(data, dict):
        for k in keys:
            if isinstance(data.get(k), list):
                return _string_list(data[k])
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    return bool(value)


# ---------------------------
# Engine
# ---------------------------

class RefinementEngine:
    def __init__(
        self,
        store: Searcher,
        reasoner: Reasoner,
        max_iterations: int = MAX_REFINEMENT_ITERATIONS,
    ):
        self.store = store
        self.reasoner = reasoner
        self.max_iterations = max(0, int(max_iterations))

    # ---- phases -------------------------------------------------------

    def cherry_pick(self, query: str, items: List[CatalogItem]) -> List[CatalogItem]:
        if len(items) <= CHERRY_PICK_SKIP_AT:
            return list(items)

        fallback = list(items[:CHERRY_PICK_FALLBACK_SIZE])
        if not self.reasoner.can_call():
            logger.info("Cherry-pick: remote unavailable, keeping first {} items", len(fallback))
            return fallback

        names = unique_names(it.name for it in items)[:CHERRY_PICK_MAX_CANDIDATES]
        prompt = prompts.CHERRY_PICK.format(query=query, names=prompts.bullet_list(names))
        selected = _names_from_payload(
            parse_json_payload(self.reasoner.complete(prompt)), "selected", "items"
        )
        if not selected:
            logger.info("Cherry-pick: no usable selection, keeping first {} items", len(fallback))
            return fallback

        chosen = [s.lower() for s in selected]
        picked = [
            it for it in items
            if any(it.name.lower() in s or s in it.name.lower() for s in chosen)
        ]
        if not picked:
            logger.info("Cherry-pick: selection matched nothing, keeping first {} items", len(fallback))
            return fallback

        logger.info("Cherry-pick: {} -> {} items", len(items), len(picked))
        return picked

    def reason(self, query: str, items: List[CatalogItem]) -> Optional[ReasoningOutcome]:
        """Ask whether W is complete; None means "no usable answer"."""
        if not self.reasoner.can_call():
            return None

        names = unique_names(it.name for it in items)
        prompt = prompts.COMPLETENESS.format(
            query=query,
            names=prompts.bullet_list(names, limit=REASONING_MAX_NAMES_SHOWN),
            max_suggestions=REASONING_MAX_SUGGESTIONS,
        )
        data = parse_json_payload(self.reasoner.complete(prompt))
        if not isinstance(data, dict) or "is_complete" not in data:
            logger.info("Reasoning: malformed or empty reply, treating list as complete")
            return None

        outcome = ReasoningOutcome(
            is_complete=_as_bool(data.get("is_complete")),
            reasoning=str(data.get("reasoning") or ""),
            missing_terms=_string_list(data.get("missing_items"))[:REASONING_MAX_SUGGESTIONS],
            unnecessary_names=_string_list(data.get("unnecessary_items"))[:REASONING_MAX_SUGGESTIONS],
        )
        logger.info(
            "Reasoning: complete={} missing={} unnecessary={}",
            outcome.is_complete,
            outcome.missing_terms,
            outcome.unnecessary_names,
        )
        return outcome

    def apply(
        self, items: List[CatalogItem], outcome: ReasoningOutcome
    ) -> Tuple[List[CatalogItem], bool]:
        """Drop unnecessary names, add one good match per missing term."""
        drop = {name_key(n) for n in outcome.unnecessary_names}
        kept = [it for it in items if name_key(it.name) not in drop]
        changed = len(kept) != len(items)

        for term in outcome.missing_terms:
            if any(is_good_match(it.name, term) for it in kept):
                continue
            present = {name_key(it.name) for it in kept}
            added = None
            for cand in self.store.search(term):
                if name_key(cand.name) in present:
                    continue
                if is_good_match(cand.name, term):
                    added = cand
                    break
            if added is None:
                logger.info("Apply: no good match for missing term {!r}", term)
                continue
            kept.append(added)
            changed = True

        return kept, changed

    def validate(self, query: str, items: List[CatalogItem]) -> List[CatalogItem]:
        if not items or not self.reasoner.can_call():
            return list(items)

        names = unique_names(it.name for it in items)
        prompt = prompts.FINAL_VALIDATION.format(query=query, names=prompts.bullet_list(names))
        removals = _names_from_payload(
            parse_json_payload(self.reasoner.complete(prompt)), "remove", "items"
        )
        if not removals:
            return list(items)

        drop = {name_key(n) for n in removals}
        kept = [it for it in items if name_key(it.name) not in drop]
        if not kept:
            logger.warning("Validation would remove every item; keeping list unchanged")
            return list(items)
        logger.info("Validation removed {} items", len(items) - len(kept))
        return kept

    # ---- driver -------------------------------------------------------

    def run(self, query: str, items: Sequence[CatalogItem]) -> RefinementResult:
        working = dedupe_by_name(items)
        phases: List[Phase] = []
        iterations = 0
        outcome: Optional[ReasoningOutcome] = None
        phase = Phase.CHERRY_PICK

        while phase != Phase.DONE:
            phases.append(phase)

            if phase == Phase.CHERRY_PICK:
                working = self.cherry_pick(query, working)
                phase = Phase.REASON if self.max_iterations > 0 else Phase.VALIDATE

            elif phase == Phase.REASON:
                iterations += 1
                outcome = self.reason(query, working)
                if outcome is None or (outcome.is_complete and not outcome.has_suggestions):
                    phase = Phase.VALIDATE
                else:
                    phase = Phase.APPLY

            elif phase == Phase.APPLY:
                working, changed = self.apply(working, outcome)
                if not changed or iterations >= self.max_iterations:
                    phase = Phase.VALIDATE
                else:
                    phase = Phase.REASON

            elif phase == Phase.VALIDATE:
                working = self.validate(query, working)
                phase = Phase.DONE

        phases.append(Phase.DONE)
        final = dedupe_by_name(working)
        logger.info("Refinement finished: {} items after {} iterations", len(final), iterations)
        return RefinementResult(items=final, iterations=iterations, phases=phases)
