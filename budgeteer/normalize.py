from __future__ import annotations

"""
Text normalisation helpers shared across catalog loading and querying.

Public helpers:

* basic_clean(text) -> str
    Light-weight clean used when loading catalog fields.

* clean_query_text(text) -> str
    Whitespace collapse + hard length cap for incoming queries.

* name_key(name) -> str
    Case-insensitive identity used for de-duplicating item names.
"""

import re
import unicodedata
from typing import Iterable, List

MAX_INPUT_CHARS = 2_000

_WS_RX = re.compile(r"\s+")


def _normalise_unicode(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("‘", "'").replace("’", "'")
    text = text.replace("“", '"').replace("”", '"')
    text = text.replace("–", "-").replace("—", "-")
    return text


def basic_clean(text: str | None) -> str:
    """Normalise unicode and whitespace; keep casing for display."""
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    text = _normalise_unicode(text)
    return _WS_RX.sub(" ", text).strip()


def clean_query_text(q: str | None, max_len: int = MAX_INPUT_CHARS) -> str:
    """
    Minimal, safe query normaliser:
    - collapse whitespace/newlines
    - trim
    - hard cap
    """
    q = basic_clean(q)
    if len(q) > max_len:
        q = q[:max_len]
    return q


def name_key(name: str) -> str:
    return basic_clean(name).casefold()


def split_tags(raw: str | None) -> List[str]:
    """Split a comma-separated tag field, dropping blanks and repeats."""
    if not raw:
        return []
    out: List[str] = []
    for part in str(raw).split(","):
        tag = part.strip()
        if tag and tag not in out:
            out.append(tag)
    return out


def unique_names(names: Iterable[str]) -> List[str]:
    """De-duplicate names case-insensitively, keeping first spelling and order."""
    seen = set()
    out: List[str] = []
    for n in names:
        key = name_key(n)
        if key and key not in seen:
            seen.add(key)
            out.append(n)
    return out
