"""
Keyword extraction.

A deterministic reduction of free text to a list of search terms.  It is
used when the search phrase cannot be interpreted by the language
model, so it must never fail: ``None``, empty strings and punctuation
only input all yield an empty list.
"""

from __future__ import annotations

import re
from typing import List, Optional

STOP_WORDS = frozenset(
    [
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "is", "are", "was", "were", "be", "been", "being",
        "have", "has", "had", "do", "does", "did", "will", "would", "should",
        "could", "may", "might", "must", "can", "this", "that", "these", "those",
    ]
)

MIN_KEYWORD_LENGTH = 3

_NON_WORD = re.compile(r"[^\w\s]")


def extract_keywords(text: Optional[str]) -> List[str]:
    """Return the distinct lowercase keywords of ``text`` in first‑seen order.

    Punctuation becomes whitespace, tokens shorter than three characters
    and stop words are dropped.
    """
    if not text:
        return []
    words = _NON_WORD.sub(" ", text.lower()).split()
    keywords = [w for w in words if len(w) >= MIN_KEYWORD_LENGTH and w not in STOP_WORDS]
    return list(dict.fromkeys(keywords))
