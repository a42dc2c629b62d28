"""Transcript tokenization and normalization.

WHY: Every later stage compares words as plain lower-case strings. A
single normalizer keeps "Cat," and "cat" the same word everywhere.

HOW: Lower-case the text, replace everything outside [a-z0-9] with a
space, split on whitespace runs.

RULES:
- Pure functions, no state, no errors
- Empty or whitespace-only input yields an empty list
"""

from __future__ import annotations

import re
from typing import Iterable, List

from listening_trainer.core.ir import Token

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def tokenize(text: str | None) -> List[str]:
    """Split text into normalized tokens, in transcript order."""
    if not text:
        return []
    return _NON_ALNUM_RE.sub(" ", text.lower()).split()


def tokenize_with_positions(text: str | None) -> List[Token]:
    """Like tokenize(), but keeps each token's index in the sequence."""
    return [Token(text=t, position=i) for i, t in enumerate(tokenize(text))]


def filter_by_length(
    tokens: Iterable[str],
    min_exclusive: int = 0,
    max_exclusive: int | None = None,
) -> List[str]:
    """Keep tokens with min_exclusive < len(token) < max_exclusive."""
    return [
        t for t in tokens
        if len(t) > min_exclusive and (max_exclusive is None or len(t) < max_exclusive)
    ]


def unique_in_order(tokens: Iterable[str]) -> List[str]:
    """Deduplicate tokens, keeping the first occurrence of each."""
    seen: set = set()
    result: List[str] = []
    for token in tokens:
        if token not in seen:
            seen.add(token)
            result.append(token)
    return result
