"""Unit tests for distractor pool building.

WHY: Distractors decide how hard the exercise is. Too many transcript
words and everything looks correct; a keyword among them and the
exercise contradicts itself.

HOW: A synthetic lexicon that shares no words with the transcripts lets
each test tell library distractors from context distractors.
"""

import random

from listening_trainer.config import ExercisePolicy
from listening_trainer.core.distractors import build_distractors, context_pool
from listening_trainer.core.keywords import rank_by_frequency
from listening_trainer.core.lexicon import Lexicon


class TestContextPool:

    def test_length_bounds_and_keyword_exclusion(self):
        transcript = "A an the cat elephantine supercalifragilistic cat river"
        assert context_pool(["river"], transcript) == ["the", "cat", "elephantine"]

    def test_first_seen_order(self):
        assert context_pool([], "beta alpha beta gamma alpha") == ["beta", "alpha", "gamma"]

    def test_empty_transcript(self):
        assert context_pool(["word"], "") == []


class TestBuildDistractors:

    def test_three_per_keyword(self, lecture_transcript, synthetic_lexicon, rng):
        keywords = rank_by_frequency(lecture_transcript, 5)
        result = build_distractors(keywords, lecture_transcript, synthetic_lexicon, rng=rng)
        assert len(result) == 15

    def test_no_duplicates_and_no_keywords(self, lecture_transcript, synthetic_lexicon):
        keywords = rank_by_frequency(lecture_transcript, 8)
        for seed in range(25):
            result = build_distractors(
                keywords, lecture_transcript, synthetic_lexicon, rng=random.Random(seed),
            )
            assert len(result) == len(set(result))
            assert not set(result) & set(keywords)

    def test_context_share_is_thirty_percent(self, lecture_transcript, synthetic_lexicon, rng):
        keywords = rank_by_frequency(lecture_transcript, 5)
        pool = set(context_pool(keywords, lecture_transcript))
        result = build_distractors(keywords, lecture_transcript, synthetic_lexicon, rng=rng)

        context = [w for w in result if w in pool]
        library = [w for w in result if w.startswith("lexword")]
        assert len(context) == 4
        assert len(library) == 11

    def test_library_first_then_context(self, lecture_transcript, synthetic_lexicon, rng):
        keywords = rank_by_frequency(lecture_transcript, 5)
        result = build_distractors(keywords, lecture_transcript, synthetic_lexicon, rng=rng)
        assert all(w.startswith("lexword") for w in result[:11])
        assert not any(w.startswith("lexword") for w in result[11:])

    def test_small_need_draws_no_context_word(self, synthetic_lexicon, rng):
        result = build_distractors(["mountains"], "mountains river", synthetic_lexicon, rng=rng)
        assert len(result) == 3
        assert sum(1 for w in result if w == "river") == 0

    def test_leading_context_words_stay_out_of_library_draw(self, rng):
        lexicon = Lexicon(words=["river"] + ["lexword{}".format(i) for i in range(100)])
        policy = ExercisePolicy(context_distractor_share=0.0)
        for seed in range(20):
            result = build_distractors(
                ["mountains"], "mountains river", lexicon,
                rng=random.Random(seed), policy=policy,
            )
            assert "river" not in result
            assert len(result) == 3

    def test_explicit_needed_overrides_ratio(self, lecture_transcript, synthetic_lexicon, rng):
        result = build_distractors(
            ["climate"], lecture_transcript, synthetic_lexicon, needed=10, rng=rng,
        )
        assert len(result) == 10

    def test_exhausted_sources_return_fewer(self, tiny_lexicon, rng):
        keywords = ["mountains", "valleys"]
        result = build_distractors(keywords, "mountains valleys lake", tiny_lexicon, rng=rng)
        assert sorted(result) == ["alpha", "bravo", "charlie", "lake"]

    def test_top_up_after_capped_first_draw(self, synthetic_lexicon, rng):
        policy = ExercisePolicy(max_library_draw=2, context_distractor_share=0.0)
        result = build_distractors(
            ["mountains"], "", synthetic_lexicon, needed=9, rng=rng, policy=policy,
        )
        assert len(result) == 9
        assert len(set(result)) == 9

    def test_no_keywords_or_zero_needed(self, lecture_transcript, synthetic_lexicon):
        assert build_distractors([], lecture_transcript, synthetic_lexicon) == []
        assert build_distractors(["climate"], lecture_transcript, synthetic_lexicon, needed=0) == []

    def test_seeded_draw_is_reproducible(self, lecture_transcript, synthetic_lexicon):
        keywords = rank_by_frequency(lecture_transcript, 5)
        first = build_distractors(keywords, lecture_transcript, synthetic_lexicon, rng=random.Random(3))
        second = build_distractors(keywords, lecture_transcript, synthetic_lexicon, rng=random.Random(3))
        assert first == second

    def test_default_lexicon(self, lecture_transcript):
        keywords = rank_by_frequency(lecture_transcript, 10)
        result = build_distractors(keywords, lecture_transcript)
        assert len(result) == 30
        assert not set(result) & set(keywords)
