"""Option assembly: merge, shuffle, and number the exercise options.

WHY: The client renders one flat list of clickable words. That list must
contain every keyword exactly once, no repeated word, and an order that
is random within each time segment while segments stay in timeline
order. This module turns a segment plan into that list, and provides the
generate_exercise_options() façade that runs the whole engine.

HOW: For a Segmented plan, walk segment indices ascending, gather each
segment's keywords and distractors, shuffle the group, and append. Words
the plan does not cover go last, shuffled, with segment -1. For an
Unsegmented plan, shuffle everything once. Shuffles use
random.Random.shuffle (Fisher-Yates), so every permutation is equally
likely.

RULES:
- ids are 0..n-1 in final order
- is_keyword is True exactly for keyword texts
- time_segment is None only for Unsegmented plans
- Keywords are normalized like transcript tokens before any stage runs
- A word in both lists is emitted once, as a keyword
- Empty keyword list → no options (status no_keywords)
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from listening_trainer.config import DEFAULT_POLICY, ExercisePolicy
from listening_trainer.core.distractors import build_distractors
from listening_trainer.core.ir import (
    UNASSIGNED_SEGMENT,
    Exercise,
    ExerciseOption,
    ExerciseStatus,
    SegmentPlan,
    Segmented,
)
from listening_trainer.core.lexicon import Lexicon
from listening_trainer.core.segmenter import segment
from listening_trainer.core.tokenizer import tokenize, unique_in_order

logger = logging.getLogger(__name__)


def assemble_options(
    keywords: Sequence[str],
    distractors: Sequence[str],
    plan: SegmentPlan,
    rng: Optional[random.Random] = None,
) -> List[ExerciseOption]:
    """Build the final, numbered option list from a segment plan.

    Args:
        keywords: Unique keywords.
        distractors: Distractor words (keywords among them are ignored).
        plan: Segmented or Unsegmented plan from the segmenter.
        rng: Random source, for reproducible shuffles.

    Returns:
        ExerciseOption records in display order.
    """
    rng = rng or random.Random()
    keyword_set = set(keywords)
    words = unique_in_order(list(keywords) + [d for d in distractors if d not in keyword_set])

    ordered: List[tuple] = []
    if isinstance(plan, Segmented):
        groups: List[List[str]] = [[] for _ in range(plan.segment_count)]
        leftovers: List[str] = []
        for word in words:
            index = plan.segment_of(word)
            if 0 <= index < plan.segment_count:
                groups[index].append(word)
            else:
                leftovers.append(word)

        for index, group in enumerate(groups):
            rng.shuffle(group)
            ordered.extend((word, index) for word in group)

        rng.shuffle(leftovers)
        ordered.extend((word, UNASSIGNED_SEGMENT) for word in leftovers)
    else:
        pool = list(words)
        rng.shuffle(pool)
        ordered.extend((word, None) for word in pool)

    return [
        ExerciseOption(
            id=i,
            text=word,
            is_keyword=word in keyword_set,
            time_segment=seg,
        )
        for i, (word, seg) in enumerate(ordered)
    ]


def build_exercise(
    keywords: Sequence[str],
    transcript: str,
    total_options: Optional[int] = None,
    duration_s: Optional[float] = None,
    lexicon: Optional[Lexicon] = None,
    rng: Optional[random.Random] = None,
    policy: ExercisePolicy = DEFAULT_POLICY,
) -> Exercise:
    """Run distractor building, segmentation, and assembly.

    Args:
        keywords: Keywords from extract_keywords(), in rank order.
        transcript: Raw transcript text.
        total_options: Total option count; overrides the 3:1 distractor ratio.
        duration_s: Audio duration in seconds, if known.
        lexicon: Distractor lexicon; defaults to the bundled one.
        rng: Random source shared by every random step.
        policy: Exercise policy constants.

    Returns:
        Exercise with status COMPLETED, or NO_KEYWORDS and no options.
    """
    keywords = unique_in_order(filter(None, (" ".join(tokenize(k)) for k in keywords)))
    if not keywords:
        return Exercise(status=ExerciseStatus.NO_KEYWORDS)

    rng = rng or random.Random()
    needed = None
    if total_options is not None:
        needed = max(0, total_options - len(keywords))

    distractors = build_distractors(
        keywords, transcript or "", lexicon=lexicon, needed=needed, rng=rng, policy=policy,
    )
    plan = segment(keywords, distractors, duration_s, policy=policy)
    options = assemble_options(keywords, distractors, plan, rng=rng)

    logger.debug(
        "Assembled %d options (%d keywords, %d distractors, %d segments)",
        len(options), len(keywords), len(distractors), plan.segment_count,
    )
    return Exercise(
        status=ExerciseStatus.COMPLETED,
        options=options,
        keywords=list(keywords),
        segment_count=plan.segment_count,
    )


def generate_exercise_options(
    keywords: Sequence[str],
    transcript: str,
    total_options: Optional[int] = None,
    duration_s: Optional[float] = None,
    lexicon: Optional[Lexicon] = None,
    rng: Optional[random.Random] = None,
) -> List[ExerciseOption]:
    """Option list only; an empty list means "no usable keywords"."""
    return build_exercise(
        keywords,
        transcript,
        total_options=total_options,
        duration_s=duration_s,
        lexicon=lexicon,
        rng=rng,
    ).options
