"""Temporal segmentation of keywords and distractors.

WHY: If all the correct answers clustered at the start of the option
list, a learner could click through the first screen and score well
without listening to the rest. Splitting the audio timeline into
segments and giving each segment its share of keywords and distractors
spreads the answers across the whole recording.

HOW: Aim for four keywords per segment, derive the segment length from
the duration, clamp it to [30, 60] seconds, and count segments. Keywords
are assigned in rank order, distractors in list order, each by the same
ceil-division formula.

RULES:
- No duration (None or <= 0) → Unsegmented
- ideal = max(1, ceil(len(K) / 4)); seg = clamp(ceil(duration / ideal), 30, 60)
- segment_count = ceil(duration / seg)
- word i → min(i // ceil(len / segment_count), segment_count - 1)
- Every word gets exactly one index in [0, segment_count)
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence

from listening_trainer.config import DEFAULT_POLICY, ExercisePolicy
from listening_trainer.core.ir import SegmentPlan, Segmented, Unsegmented


def segment_duration(
    keyword_count: int,
    duration_s: float,
    policy: ExercisePolicy = DEFAULT_POLICY,
) -> int:
    """Segment length in whole seconds for the given keyword count."""
    ideal_segments = max(1, math.ceil(keyword_count / policy.keywords_per_segment))
    ideal_duration = duration_s / ideal_segments
    return max(
        policy.min_segment_duration_s,
        min(policy.max_segment_duration_s, math.ceil(ideal_duration)),
    )


def assign_segments(words: Sequence[str], segment_count: int) -> Dict[str, int]:
    """Map each word to a segment by its position in ``words``."""
    if not words or segment_count <= 0:
        return {}
    per_segment = max(1, math.ceil(len(words) / segment_count))
    assignment: Dict[str, int] = {}
    for i, word in enumerate(words):
        if word not in assignment:
            assignment[word] = min(i // per_segment, segment_count - 1)
    return assignment


def segment(
    keywords: Sequence[str],
    distractors: Sequence[str],
    duration_s: Optional[float] = None,
    policy: ExercisePolicy = DEFAULT_POLICY,
) -> SegmentPlan:
    """Build the segment plan for an exercise.

    Args:
        keywords: Keywords in rank order.
        distractors: Distractors in pool order.
        duration_s: Audio duration in seconds, if known.
        policy: Exercise policy constants.

    Returns:
        Segmented when a positive duration is given, otherwise Unsegmented.
    """
    if duration_s is None or duration_s <= 0:
        return Unsegmented()

    seg_duration = segment_duration(len(keywords), duration_s, policy)
    segment_count = max(1, math.ceil(duration_s / seg_duration))

    return Segmented(
        segment_count=segment_count,
        segment_duration_s=seg_duration,
        keyword_segments=assign_segments(keywords, segment_count),
        distractor_segments=assign_segments(distractors, segment_count),
    )
