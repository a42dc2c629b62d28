"""Intermediate representation dataclasses for exercise synthesis.

WHY: Each engine stage hands a small, well-defined structure to the next
one: tokens to the keyword selector, a segment plan from the segmenter to
the assembler, and option records out to the host. Typed dataclasses keep
those contracts explicit and testable in isolation.

HOW: Token is an ephemeral normalized word. A segment plan is a tagged
variant: Segmented (duration known) or Unsegmented (duration unknown),
so the assembler branches on the type instead of a sentinel index.
ExerciseOption is one clickable word; Exercise bundles the options with
a status so "no usable keywords" is a value, not an exception.

RULES:
- Segment indices in a Segmented plan are contiguous from 0
- UNASSIGNED_SEGMENT (-1) is only written for words missing from a plan
- ExerciseOption.to_dict() is the wire format consumed by clients
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Union

UNASSIGNED_SEGMENT = -1
"""Wire value for a word that belongs to no time segment."""


@dataclass(frozen=True)
class Token:
    """A normalized word and its index in the transcript's token sequence."""

    text: str
    position: int


@dataclass
class Segmented:
    """Segment plan for a transcript whose audio duration is known.

    RULES:
    - segment_count == ceil(duration_s / segment_duration_s)
    - every keyword and distractor maps to an index in [0, segment_count)
    """

    segment_count: int
    segment_duration_s: int
    keyword_segments: Dict[str, int] = field(default_factory=dict)
    distractor_segments: Dict[str, int] = field(default_factory=dict)

    def segment_of(self, word: str) -> int:
        if word in self.keyword_segments:
            return self.keyword_segments[word]
        return self.distractor_segments.get(word, UNASSIGNED_SEGMENT)


@dataclass
class Unsegmented:
    """Segment plan when no duration is available: one global pool."""

    segment_count: int = 0


SegmentPlan = Union[Segmented, Unsegmented]


@dataclass
class ExerciseOption:
    """One clickable word in the exercise.

    RULES:
    - id: position in the final option list (0-based)
    - is_keyword: True exactly for words in the keyword set
    - time_segment: segment index, or None when no duration was available
    """

    id: int
    text: str
    is_keyword: bool
    time_segment: int | None = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "isKeyword": self.is_keyword,
        }
        if self.time_segment is not None:
            data["timeSegment"] = self.time_segment
        return data


class ExerciseStatus(str, enum.Enum):
    """Outcome of building an exercise.

    Inherits from str so values serialize cleanly to JSON.
    """

    PROCESSING = "processing"
    NO_KEYWORDS = "no_keywords"
    COMPLETED = "completed"


@dataclass
class Exercise:
    """A finished (or deliberately empty) exercise."""

    status: ExerciseStatus
    options: list[ExerciseOption] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    segment_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "options": [o.to_dict() for o in self.options],
            "keywords": list(self.keywords),
            "segmentCount": self.segment_count,
        }
