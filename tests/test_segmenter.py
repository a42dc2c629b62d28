"""Unit tests for temporal segmentation.

WHY: Segment indices are the only thing that keeps correct answers from
clustering at the start of the option list. The arithmetic must be exact.
"""

import pytest

from listening_trainer.config import ExercisePolicy
from listening_trainer.core.ir import Segmented, Unsegmented
from listening_trainer.core.segmenter import assign_segments, segment, segment_duration


class TestSegmentDuration:

    def test_clamped_to_maximum(self):
        assert segment_duration(2, 120) == 60

    def test_clamped_to_minimum(self):
        assert segment_duration(8, 40) == 30

    def test_rounds_up(self):
        assert segment_duration(12, 130) == 44

    def test_zero_keywords_counts_as_one_segment(self):
        assert segment_duration(0, 45) == 45

    def test_policy_bounds(self):
        policy = ExercisePolicy(min_segment_duration_s=10, max_segment_duration_s=20)
        assert segment_duration(1, 100, policy) == 20


class TestAssignSegments:

    def test_even_split(self):
        words = ["a1", "a2", "a3", "b1", "b2", "b3"]
        assert assign_segments(words, 2) == {
            "a1": 0, "a2": 0, "a3": 0, "b1": 1, "b2": 1, "b3": 1,
        }

    def test_fewer_words_than_segments(self):
        assert assign_segments(["w0", "w1", "w2"], 5) == {"w0": 0, "w1": 1, "w2": 2}

    def test_empty_inputs(self):
        assert assign_segments([], 3) == {}
        assert assign_segments(["w"], 0) == {}


class TestSegment:

    @pytest.mark.parametrize("duration", [None, 0, -30])
    def test_unknown_duration_is_unsegmented(self, duration):
        plan = segment(["ocean"], ["river"], duration)
        assert isinstance(plan, Unsegmented)
        assert plan.segment_count == 0

    def test_two_keywords_over_two_minutes(self):
        plan = segment(["ocean", "mountain"], [], 120)
        assert isinstance(plan, Segmented)
        assert plan.segment_duration_s == 60
        assert plan.segment_count == 2
        assert plan.keyword_segments == {"ocean": 0, "mountain": 1}

    def test_four_keywords_per_segment(self):
        keywords = ["kw{}".format(i) for i in range(20)]
        plan = segment(keywords, [], 300)
        assert plan.segment_count == 5
        assert [plan.segment_of(k) for k in keywords] == [i // 4 for i in range(20)]

    def test_short_audio_has_one_segment(self):
        plan = segment(["ocean"], ["river", "lake"], 10)
        assert plan.segment_count == 1
        assert plan.segment_of("ocean") == 0
        assert plan.segment_of("lake") == 0

    def test_fractional_duration(self):
        plan = segment(["ocean", "mountain"], [], 90.5)
        assert plan.segment_duration_s == 60
        assert plan.segment_count == 2

    def test_distractors_are_assigned_independently(self):
        distractors = ["d{}".format(i) for i in range(6)]
        plan = segment(["ocean", "mountain"], distractors, 120)
        assert [plan.segment_of(d) for d in distractors] == [0, 0, 0, 1, 1, 1]

    def test_unknown_word_is_unassigned(self):
        plan = segment(["ocean"], [], 60)
        assert plan.segment_of("desert") == -1

    @pytest.mark.parametrize("keyword_count,distractor_count,duration", [
        (1, 3, 15), (7, 21, 95), (30, 90, 600), (50, 150, 1800), (3, 0, 59.9),
    ])
    def test_every_word_lands_in_range(self, keyword_count, distractor_count, duration):
        keywords = ["kw{}".format(i) for i in range(keyword_count)]
        distractors = ["d{}".format(i) for i in range(distractor_count)]
        plan = segment(keywords, distractors, duration)
        for word in keywords + distractors:
            assert 0 <= plan.segment_of(word) < plan.segment_count
        assert plan.segment_of(keywords[0]) == 0
