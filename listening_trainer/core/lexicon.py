"""Static distractor lexicon with lazy, thread-safe loading.

WHY: Wrong answers drawn only from the transcript are too easy to spot
when the transcript is short, and too revealing when it is long. A fixed
pool of common English words gives the exercise a transcript-independent
source of plausible distractors.

HOW: The word list is bundled as a text file (one word per line, '#'
comment lines). A Lexicon instance reads it on first use under a lock and
keeps the deduplicated tuple. Lexicon.default() memoizes one
process-wide instance for the bundled file; callers that want a different
pool construct their own Lexicon and pass it in.

RULES:
- Words are lower-cased and deduplicated in file order
- Loading is idempotent; concurrent first calls load at most once
- sample() never returns an excluded word or the same word twice
- sample() returns fewer than requested when the pool is exhausted
"""

from __future__ import annotations

import logging
import random
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_LEXICON_PATH = Path(__file__).resolve().parent.parent / "data" / "distractor-words.txt"


def load_word_list(path: str | Path) -> List[str]:
    """Load a word list from a text file.

    WHY: The lexicon is curated by hand, so it is kept as a readable text
    file grouped under comment headers rather than as code.

    HOW: Read the file line by line. Strip whitespace, skip blank lines and
    lines starting with '#', lower-case, and drop repeats.

    RULES:
    - One word per line
    - File must be UTF-8 encoded
    - Raises FileNotFoundError if the file doesn't exist

    Args:
        path: Path to the word list file.

    Returns:
        Unique lower-case words, in file order.
    """
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    words: List[str] = []
    seen: set = set()
    for line in lines:
        stripped = line.strip().lower()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped not in seen:
            seen.add(stripped)
            words.append(stripped)
    return words


class Lexicon:
    """A read-only pool of distractor words.

    Either ``words`` or ``path`` may be given; with neither, the bundled
    list is used. File-backed lexicons load lazily on first access.
    """

    _default: Optional["Lexicon"] = None
    _default_lock = threading.Lock()

    def __init__(
        self,
        words: Optional[Iterable[str]] = None,
        path: str | Path | None = None,
    ) -> None:
        self._path = Path(path) if path is not None else DEFAULT_LEXICON_PATH
        self._lock = threading.Lock()
        self._words: Optional[tuple] = None
        if words is not None:
            self._words = tuple(_dedupe_lower(words))

    @classmethod
    def default(cls) -> "Lexicon":
        """Return the process-wide lexicon for the bundled word list."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls()
        return cls._default

    @property
    def words(self) -> Sequence[str]:
        if self._words is None:
            with self._lock:
                if self._words is None:
                    self._words = tuple(load_word_list(self._path))
                    logger.debug("Loaded %d lexicon words from %s", len(self._words), self._path)
        return self._words

    def __len__(self) -> int:
        return len(self.words)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.lower() in self.words

    def sample(
        self,
        count: int,
        exclude: Iterable[str] = (),
        rng: Optional[random.Random] = None,
    ) -> List[str]:
        """Draw up to ``count`` unique random words not in ``exclude``.

        RULES:
        - Exclusion is case-insensitive
        - count <= 0 returns an empty list
        - Draw is uniform without replacement
        """
        if count <= 0:
            return []
        excluded = {w.lower() for w in exclude}
        available = [w for w in self.words if w not in excluded]
        rng = rng or random.Random()
        return rng.sample(available, min(count, len(available)))


def sample_distractors(
    count: int,
    exclude: Iterable[str] = (),
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Sample from the bundled lexicon; see Lexicon.sample()."""
    return Lexicon.default().sample(count, exclude, rng=rng)


def _dedupe_lower(words: Iterable[str]) -> List[str]:
    seen: set = set()
    result: List[str] = []
    for word in words:
        w = word.strip().lower()
        if w and w not in seen:
            seen.add(w)
            result.append(w)
    return result
