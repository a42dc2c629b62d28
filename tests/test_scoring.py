"""Unit tests for answer checking."""

import pytest

from listening_trainer.core.scoring import SelectionScore, score_selection


class TestScoreSelection:

    def test_partial_selection(self):
        score = score_selection(
            ["climate", "ocean", "energy", "renewable"],
            ["ocean", "lake", "climate"],
        )
        assert score.correct == ["ocean", "climate"]
        assert score.incorrect == ["lake"]
        assert score.missed == ["energy", "renewable"]
        assert score.accuracy == 50.0

    def test_matching_ignores_case_and_punctuation(self):
        score = score_selection(["ocean", "Energy"], ["OCEAN", "energy,"])
        assert score.correct == ["ocean", "energy"]
        assert score.accuracy == 100.0

    def test_repeated_clicks_count_once(self):
        score = score_selection(["ocean", "energy"], ["ocean", "Ocean", "ocean"])
        assert score.correct == ["ocean"]
        assert score.accuracy == 50.0

    def test_accuracy_is_rounded(self):
        assert score_selection(["ocean", "energy", "climate"], ["ocean"]).accuracy == 33.3

    def test_no_keywords_is_zero_accuracy(self):
        score = score_selection([], ["ocean"])
        assert score.accuracy == 0.0
        assert score.incorrect == ["ocean"]
        assert score.missed == []

    @pytest.mark.parametrize("clicked", [[], ["", "   "]])
    def test_nothing_clicked(self, clicked):
        assert score_selection(["ocean"], clicked) == SelectionScore(missed=["ocean"])
