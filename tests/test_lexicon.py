"""Unit tests for the distractor lexicon.

WHY: The lexicon is the fallback source of wrong answers. If it returned
excluded words or repeats, keywords could show up as distractors.

HOW: Tests cover the bundled word list, sampling rules, file parsing,
and one-time lazy loading under concurrent access.
"""

import random
import threading
from unittest.mock import patch

from listening_trainer.core.lexicon import (
    DEFAULT_LEXICON_PATH,
    Lexicon,
    load_word_list,
    sample_distractors,
)


class TestBundledLexicon:

    def test_bundled_file_exists(self):
        assert DEFAULT_LEXICON_PATH.is_file()

    def test_has_about_five_hundred_unique_words(self):
        words = Lexicon().words
        assert len(words) >= 500
        assert len(set(words)) == len(words)

    def test_words_are_normalized(self):
        for word in Lexicon().words:
            assert word == word.lower()
            assert word.isalnum()

    def test_default_is_memoized(self):
        assert Lexicon.default() is Lexicon.default()

    def test_contains_is_case_insensitive(self):
        lexicon = Lexicon(words=["happy"])
        assert "Happy" in lexicon
        assert "sad" not in lexicon
        assert 42 not in lexicon


class TestSample:

    def test_returns_requested_count_without_duplicates(self):
        words = Lexicon().sample(50, rng=random.Random(1))
        assert len(words) == 50
        assert len(set(words)) == 50

    def test_never_returns_excluded_words(self):
        lexicon = Lexicon(words=["alpha", "bravo", "charlie", "delta"])
        for seed in range(20):
            words = lexicon.sample(4, ["BRAVO", "delta"], rng=random.Random(seed))
            assert sorted(words) == ["alpha", "charlie"]

    def test_exhausted_pool_returns_fewer(self, tiny_lexicon):
        assert sorted(tiny_lexicon.sample(10)) == ["alpha", "bravo", "charlie"]

    def test_zero_or_negative_count(self, tiny_lexicon):
        assert tiny_lexicon.sample(0) == []
        assert tiny_lexicon.sample(-3) == []

    def test_module_level_sample_uses_bundled_words(self):
        words = sample_distractors(5, ["welcome"])
        assert len(words) == 5
        assert "welcome" not in words
        assert all(w in Lexicon.default() for w in words)


class TestLoadWordList:

    def test_skips_comments_blanks_and_repeats(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("# header\nRiver\n\n  lake  \nriver\n# more\nocean\n", encoding="utf-8")
        assert load_word_list(path) == ["river", "lake", "ocean"]

    def test_explicit_words_are_deduplicated(self):
        lexicon = Lexicon(words=["Sun", "sun", " moon ", ""])
        assert list(lexicon.words) == ["sun", "moon"]

    def test_custom_path_loads_lazily(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("one\ntwo\n", encoding="utf-8")
        lexicon = Lexicon(path=path)
        path.write_text("three\n", encoding="utf-8")
        assert list(lexicon.words) == ["three"]


class TestLazyLoading:

    def test_concurrent_first_access_loads_once(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("one\ntwo\n", encoding="utf-8")
        lexicon = Lexicon(path=path)

        with patch(
            "listening_trainer.core.lexicon.load_word_list",
            wraps=load_word_list,
        ) as loader:
            threads = [threading.Thread(target=lambda: lexicon.words) for _ in range(10)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        assert loader.call_count == 1
        assert list(lexicon.words) == ["one", "two"]
