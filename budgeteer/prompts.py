from __future__ import annotations

"""
Prompt templates for the remote reasoning service.

Templates are filled with str.format; literal JSON braces are doubled.
Each one asks for a single raw JSON value with no prose around it.
"""

SYSTEM_PROMPT = (
    "You are a grocery and household shopping assistant. "
    "You answer with a single raw JSON value only: no prose, no markdown."
)

QUERY_ANALYSIS = """Analyze this shopping request and list the concrete products to search for.

Request: "{query}"

Rules:
- Use short, generic product names that a grocery catalog would contain (e.g. "flour", "eggs").
- If the request is a dish or task, list the ingredients or supplies it needs.
- At most {max_terms} search terms.

Respond ONLY with a JSON object:
{{"intent": "SEARCH|COMPARE|SHOPPING_LIST|BUDGET|GENERIC", "search_terms": ["term", "..."]}}
"""

CHERRY_PICK = """A shopper asked: "{query}"

These catalog product names were found by a broad search:
{names}

Select ONLY the names that are directly relevant to the request. Drop unrelated products.

Respond ONLY with a JSON array of the selected names, copied exactly:
["name", "..."]
"""

COMPLETENESS = """A shopper asked: "{query}"

The current shopping list contains:
{names}

Is this list logically complete for what the shopper wants to do (for example, all the
ingredients of a recipe)? Suggest at most {max_suggestions} missing items as short generic
search terms, and at most {max_suggestions} listed items that are unnecessary (copy the names exactly).

Respond ONLY with a JSON object:
{{"is_complete": true, "reasoning": "one sentence", "missing_items": [], "unnecessary_items": []}}
"""

FINAL_VALIDATION = """A shopper asked: "{query}"

Final shopping list:
{names}

Identify items that are OBVIOUSLY wrong for this request. Be lenient: keep anything
plausibly related. Copy names exactly. Return an empty array when nothing is wrong.

Respond ONLY with a JSON array of names to remove:
["name", "..."]
"""


def bullet_list(names, limit: int | None = None) -> str:
    """Render names as '- name' lines, summarising any overflow."""
    names = list(names)
    shown = names if limit is None else names[:limit]
    lines = [f"- {n}" for n in shown]
    hidden = len(names) - len(shown)
    if hidden > 0:
        lines.append(f"... and {hidden} more")
    return "\n".join(lines)
