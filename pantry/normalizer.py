"""
Ingredient normalizer: raw pantry text -> canonical English search terms.

Stages per item (in order):
    1. lowercase + trim
    2. punctuation -> space, collapse whitespace
    3. digit typo fix (0→o, 1→l, 3→e, 4→a, 5→s, 7→t)
    4. exact Filipino -> English translation
    5. singularization (irregular map, then trailing "s" on single words)
    6. brand / vague term rejection
Then the list is deduplicated (first occurrence wins) and capped.

Pure function, no I/O. Never raises for any input.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from pantry.knowledgebase import (
    BRAND_AND_VAGUE_TERMS,
    DIGIT_TYPOS,
    FILIPINO_TO_ENGLISH,
    IRREGULAR_SINGULARS,
)

DEFAULT_MAX_TERMS = 6

_NON_WORD_RE = re.compile(r"[^a-z0-9\s]")
_SPACES_RE = re.compile(r"\s+")
_TYPO_TABLE = str.maketrans(dict(DIGIT_TYPOS))


def _clean(text: str) -> str:
    # ASCII-only lowercase; the vocabulary is ASCII
    s = "".join(chr(ord(c) + 32) if "A" <= c <= "Z" else c for c in text).strip()
    if not s:
        return ""
    s = _NON_WORD_RE.sub(" ", s)
    return _SPACES_RE.sub(" ", s).strip()


def _fix_typos(text: str) -> str:
    return text.translate(_TYPO_TABLE)


def _translate(text: str) -> str:
    return FILIPINO_TO_ENGLISH.get(text, text)


def _singularize(text: str) -> str:
    if text in IRREGULAR_SINGULARS:
        return IRREGULAR_SINGULARS[text]
    # multi-word phrases ("string beans") are left alone
    if " " not in text and len(text) > 3 and text.endswith("s"):
        return text[:-1]
    return text


def normalize_one(raw) -> Optional[str]:
    """Run stages 1-6 on a single item. Returns None when the item is dropped."""
    if not isinstance(raw, str):
        return None
    s = _clean(raw)
    if not s:
        return None
    s = _singularize(_translate(_fix_typos(s)))
    if s in BRAND_AND_VAGUE_TERMS:
        return None
    return s


def normalize(inputs: Iterable[str] | None, max_items: int = DEFAULT_MAX_TERMS) -> List[str]:
    """
    Normalize raw ingredient strings into at most `max_items` unique search terms,
    preserving first-occurrence order.

    Example:
        normalize(["t0mat0", "onions", "bawang"]) -> ["tomato", "onion", "garlic"]
    """
    if not inputs or max_items <= 0:
        return []
    out: List[str] = []
    seen = set()
    for raw in inputs:
        term = normalize_one(raw)
        if term is None or term in seen:
            continue
        seen.add(term)
        out.append(term)
        if len(out) >= max_items:
            break
    return out
