"""Distractor pool building from the transcript and the lexicon.

WHY: An exercise needs wrong answers that are plausible. Words from the
transcript itself (context distractors) are the hardest to reject, but
too many of them turn the exercise into "click everything you heard".
Generic lexicon words (library distractors) fill the rest.

HOW: Build the context pool (transcript tokens of 3 to 11 characters that
are not keywords, first-seen order). Draw a fixed share of the needed
distractors from it at random, draw the remainder from the lexicon
while excluding keywords and the leading part of the context pool, then
top up from the lexicon if the draws came back short.

RULES:
- needed defaults to len(keywords) * distractors_per_keyword (3)
- Context share is floor(needed * 0.3), capped by the context pool size
- A single lexicon draw is capped at 400 words
- Result order: library distractors first, then context distractors
- No duplicates, no keyword; fewer than needed only when both sources run dry
"""

from __future__ import annotations

import logging
import math
import random
from typing import List, Optional, Sequence

from listening_trainer.config import DEFAULT_POLICY, ExercisePolicy
from listening_trainer.core.lexicon import Lexicon
from listening_trainer.core.tokenizer import filter_by_length, tokenize, unique_in_order

logger = logging.getLogger(__name__)

CONTEXT_MIN_LENGTH_EXCLUSIVE = 2
CONTEXT_MAX_LENGTH_EXCLUSIVE = 12


def context_pool(keywords: Sequence[str], transcript: str) -> List[str]:
    """Unique non-keyword transcript tokens with 2 < len < 12, first-seen order."""
    keyword_set = set(keywords)
    tokens = filter_by_length(
        tokenize(transcript),
        CONTEXT_MIN_LENGTH_EXCLUSIVE,
        CONTEXT_MAX_LENGTH_EXCLUSIVE,
    )
    return unique_in_order(t for t in tokens if t not in keyword_set)


def build_distractors(
    keywords: Sequence[str],
    transcript: str,
    lexicon: Optional[Lexicon] = None,
    needed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    policy: ExercisePolicy = DEFAULT_POLICY,
) -> List[str]:
    """Build the list of wrong answers for an exercise.

    Args:
        keywords: Selected keywords, in rank order.
        transcript: Raw transcript text.
        lexicon: Distractor lexicon; defaults to the bundled one.
        needed: Distractor count; defaults to the 3:1 ratio.
        rng: Random source, for reproducible draws.
        policy: Exercise policy constants.

    Returns:
        Distractor words, library first, then context.
    """
    if needed is None:
        needed = len(keywords) * policy.distractors_per_keyword
    if needed <= 0:
        return []

    lexicon = lexicon or Lexicon.default()
    rng = rng or random.Random()

    pool = context_pool(keywords, transcript)

    context_count = min(int(math.floor(needed * policy.context_distractor_share)), len(pool))
    context_distractors = rng.sample(pool, context_count)

    exclude = set(keywords)
    exclude.update(pool[:policy.context_exclusion_window])
    exclude.update(context_distractors)
    library_count = min(needed - context_count, policy.max_library_draw)
    library = lexicon.sample(library_count, exclude, rng=rng)

    distractors = library + context_distractors

    # Top up when the first draw was capped or the lexicon ran short
    drawn = set(keywords)
    drawn.update(distractors)
    while len(distractors) < needed:
        extra = lexicon.sample(
            min(needed - len(distractors), policy.max_library_draw),
            drawn,
            rng=rng,
        )
        if not extra:
            break
        distractors.extend(extra)
        drawn.update(extra)

    if len(distractors) < needed:
        logger.info(
            "Distractor sources exhausted: %d of %d requested", len(distractors), needed
        )
    return distractors[:needed]
