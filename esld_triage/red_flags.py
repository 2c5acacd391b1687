# esld_triage/red_flags.py
"""
Free-text red-flag scanner for journal entries and assistant prompts.

Keyword matching with a small negation window. This is a heuristic, not a
parser: a negation more than four words before the keyword is missed, and a
negation that spans clauses without punctuation or a contrast word will still
suppress the keyword.
"""
from __future__ import annotations

import re
from typing import Any, List, Optional

from esld_triage.config import NEGATION_WINDOW_WORDS
from esld_triage.models import TriageLevel

# Order is significant: scan results are returned in this order.
RED_FLAG_KEYWORDS = [
    "vomited blood",
    "throwing up blood",
    "black stool",
    "black stools",
    "black tarry stools",
    "bloody stool",
    "confusion",
    "severe abdominal pain",
    "severe belly pain",
    "high fever",
    "cannot wake",
    "passing out",
    "shortness of breath",
    "severe shortness of breath",
]

# Everything else in the vocabulary is emergency-tier.
URGENT_TIER_RED_FLAGS = frozenset({"confusion", "high fever", "shortness of breath"})

NEGATION_TERMS = [
    "no",
    "not",
    "never",
    "denies",
    "denied",
    "without",
    "isn't",
    "don't",
    "doesn't",
    "didn't",
]

# Words that end the scope of a preceding negation.
SCOPE_BREAKERS = ["but", "however", "although", "though", "yet", "except"]

_WINDOW_WORD = r"(?!(?:%s)\b)[\w']+" % "|".join(SCOPE_BREAKERS)
# Line breaks end a negation scope, like punctuation.
_NEGATED_TAIL = re.compile(
    r"\b(?:%s)\b(?:[ \t]+%s){0,%d}[ \t]+$"
    % ("|".join(re.escape(t) for t in NEGATION_TERMS), _WINDOW_WORD, NEGATION_WINDOW_WORDS)
)
# Longest tail of a prefix that is searched for a negation. Longer words in
# the window mean the negation is missed and the keyword is kept.
_TAIL_CHARS = 200


def _normalize(text: str) -> str:
    return text.lower().replace("’", "'")


def _is_negated(prefix: str) -> bool:
    # Only the last few words can hold the negation; never rescan the whole prefix.
    if len(prefix) > _TAIL_CHARS:
        tail = prefix[-_TAIL_CHARS:]
        # drop the partial word at the cut so "xno" cannot read as "no"
        cut = re.search(r"\s", tail)
        if cut is None:
            return False
        prefix = tail[cut.start():]
    return _NEGATED_TAIL.search(prefix) is not None


def _occurs_unnegated(text: str, keyword: str) -> bool:
    start = text.find(keyword)
    while start != -1:
        if not _is_negated(text[:start]):
            return True
        start = text.find(keyword, start + 1)
    return False


def scan_for_red_flags(text: Any) -> List[str]:
    """
    Return the vocabulary keywords present in ``text``.

    A keyword counts when at least one occurrence is not preceded, within
    NEGATION_WINDOW_WORDS words, by a negation term. Non-string input yields [].
    """
    if not isinstance(text, str) or not text.strip():
        return []
    normalized = _normalize(text)
    return [kw for kw in RED_FLAG_KEYWORDS if _occurs_unnegated(normalized, kw)]


def has_red_flags(text: Any) -> bool:
    return bool(scan_for_red_flags(text))


def red_flag_tier(keyword: str) -> Optional[TriageLevel]:
    """Tier a vocabulary keyword belongs to, or None for unknown phrases."""
    kw = _normalize(keyword).strip()
    if kw not in RED_FLAG_KEYWORDS:
        return None
    if kw in URGENT_TIER_RED_FLAGS:
        return TriageLevel.URGENT
    return TriageLevel.EMERGENCY
