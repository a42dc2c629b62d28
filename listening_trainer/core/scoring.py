"""Answer checking for a finished exercise.

The learner clicks the words they heard; the clicks are compared with the
session keywords and summarized as an accuracy percentage. Nothing is
stored.

RULES:
- Clicked words are normalized like transcript tokens, duplicates count once
- accuracy = correct / len(keywords) * 100, rounded to one decimal
- No keywords → accuracy 0.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from listening_trainer.core.tokenizer import tokenize, unique_in_order


@dataclass
class SelectionScore:
    correct: List[str] = field(default_factory=list)
    incorrect: List[str] = field(default_factory=list)
    missed: List[str] = field(default_factory=list)
    accuracy: float = 0.0


def _normalize(words: Iterable[str]) -> List[str]:
    return unique_in_order(filter(None, (" ".join(tokenize(w)) for w in words)))


def score_selection(keywords: Iterable[str], clicked: Iterable[str]) -> SelectionScore:
    """Split the clicked words into hits and misses against the keywords."""
    keyword_list = _normalize(keywords)
    clicked_list = _normalize(clicked)
    keyword_set = set(keyword_list)
    clicked_set = set(clicked_list)

    correct = [w for w in clicked_list if w in keyword_set]
    accuracy = 0.0
    if keyword_list:
        accuracy = round(len(correct) / len(keyword_list) * 100, 1)
    return SelectionScore(
        correct=correct,
        incorrect=[w for w in clicked_list if w not in keyword_set],
        missed=[w for w in keyword_list if w not in clicked_set],
        accuracy=accuracy,
    )
