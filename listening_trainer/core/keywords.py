"""Keyword selection: local frequency ranking with an optional remote ranker.

WHY: Keywords are the "correct answers" of the exercise. Words that recur
in the audio, or that are long enough to carry meaning, are the ones a
listener should catch. A remote language model can do better, but it is
optional and unreliable, so the selection must always work without it.

HOW: KeywordRanker is a small strategy interface. FrequencyRanker counts
candidate tokens and sorts them; RemoteRanker asks the ranking service;
FallbackRanker wraps any primary ranker and silently switches to the
frequency ranker when the primary raises or returns nothing.
extract_keywords() computes the duration-derived target and delegates.

RULES:
- Target: round(duration_min * 15) when duration is known, else 50
- Candidates: length > 3 and not a stop word
- Keep frequency >= 2 or length > 5; sort by frequency desc, then length
  desc, then first occurrence; truncate to the target
- Remote failure of any kind is never raised past FallbackRanker
- Empty transcript → empty list, without contacting the remote ranker
"""

from __future__ import annotations

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from collections import Counter
from typing import Callable, List, Optional

from listening_trainer.config import (
    DEFAULT_POLICY,
    KEYWORD_RANKER_TIMEOUT_S,
    ExercisePolicy,
    load_ranker_api_key,
    remote_ranker_configured,
)
from listening_trainer.core.tokenizer import tokenize

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset({
    # articles, conjunctions, prepositions
    "the", "a", "an", "and", "or", "but", "nor", "so", "yet", "if", "than",
    "in", "on", "at", "to", "for", "of", "with", "by", "from", "as", "into",
    "onto", "upon", "about", "over", "under", "after", "before", "between",
    "through", "during", "without", "within",
    # auxiliaries and modals
    "is", "are", "was", "were", "be", "been", "being", "am",
    "have", "has", "had", "having", "do", "does", "did", "doing",
    "will", "would", "shall", "should", "could", "may", "might", "must", "can",
    # pronouns and determiners
    "this", "that", "these", "those", "i", "you", "he", "she", "it", "we",
    "they", "me", "him", "her", "us", "them", "my", "your", "his", "its",
    "our", "their", "what", "which", "who", "whom", "whose", "where", "when",
    "why", "how", "all", "each", "every", "both", "few", "more", "most",
    "other", "some", "such", "no", "not", "only", "own", "same", "too",
    "very", "just", "now", "then", "there", "here",
})

MIN_KEYWORD_LENGTH = 4
"""Shortest candidate length (tokens must be longer than 3 characters)."""

LONG_WORD_LENGTH = 6
"""Words at least this long qualify even when they occur only once."""


def target_keyword_count(
    duration_s: Optional[float] = None,
    policy: ExercisePolicy = DEFAULT_POLICY,
) -> int:
    """Number of keywords to aim for.

    Rounds half up, so 30 s of audio at 15/min gives 8 rather than 7.
    """
    if duration_s is None or duration_s <= 0:
        return policy.default_keyword_target
    return int(math.floor(duration_s / 60.0 * policy.keywords_per_minute + 0.5))


def rank_by_frequency(transcript: str, target: int) -> List[str]:
    """Rank transcript words by frequency, breaking ties by length.

    HOW: Tokenize, keep candidates (length > 3, not a stop word), count,
    keep entries seen at least twice or longer than 5 characters, sort by
    (frequency desc, length desc). Counter keeps insertion order and the
    sort is stable, so remaining ties resolve by first occurrence.

    Args:
        transcript: Raw transcript text.
        target: Maximum number of keywords to return.

    Returns:
        Unique keywords, highest rank first.
    """
    if target <= 0:
        return []

    counts = Counter(
        t for t in tokenize(transcript)
        if len(t) >= MIN_KEYWORD_LENGTH and t not in STOP_WORDS
    )
    qualified = [
        (word, freq) for word, freq in counts.items()
        if freq >= 2 or len(word) >= LONG_WORD_LENGTH
    ]
    qualified.sort(key=lambda item: (-item[1], -len(item[0])))
    return [word for word, _ in qualified[:target]]


class KeywordRanker(ABC):
    """Strategy interface for picking exercise keywords."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in logs."""

    @abstractmethod
    async def rank(self, transcript: str, auxiliary_text: str, target: int) -> List[str]:
        """Return up to ``target`` unique keywords, best first."""


class FrequencyRanker(KeywordRanker):
    """Local, always-available ranker. Ignores auxiliary text."""

    @property
    def name(self) -> str:
        return "frequency"

    async def rank(self, transcript: str, auxiliary_text: str, target: int) -> List[str]:
        return rank_by_frequency(transcript, target)


class RemoteRanker(KeywordRanker):
    """Ranker backed by the remote ranking service.

    Raises whatever the client raises; wrap it in FallbackRanker.
    ``client_factory`` builds a RankingClient per call so no connection
    state outlives a request.
    """

    def __init__(
        self,
        client_factory: Optional[Callable[[], object]] = None,
        timeout_s: float = KEYWORD_RANKER_TIMEOUT_S,
    ) -> None:
        if client_factory is None:
            from listening_trainer.api.client import RankingClient
            client_factory = RankingClient
        self._client_factory = client_factory
        self._timeout_s = timeout_s

    @property
    def name(self) -> str:
        return "remote"

    async def rank(self, transcript: str, auxiliary_text: str, target: int) -> List[str]:
        async with self._client_factory() as client:
            return await asyncio.wait_for(
                client.rank_keywords(transcript, auxiliary_text, target),
                timeout=self._timeout_s,
            )


class FallbackRanker(KeywordRanker):
    """Try ``primary``; on any failure or empty result use ``fallback``.

    RULES:
    - Exceptions from the primary ranker are logged, never raised
    - An empty primary result counts as a failure
    - Primary results are deduplicated and truncated to the target
    """

    def __init__(
        self,
        primary: KeywordRanker,
        fallback: Optional[KeywordRanker] = None,
    ) -> None:
        self.primary = primary
        self.fallback = fallback or FrequencyRanker()

    @property
    def name(self) -> str:
        return "{}+{}".format(self.primary.name, self.fallback.name)

    async def rank(self, transcript: str, auxiliary_text: str, target: int) -> List[str]:
        try:
            words = await self.primary.rank(transcript, auxiliary_text, target)
        except Exception as exc:
            logger.warning(
                "Keyword ranker %s failed (%s); using %s",
                self.primary.name, exc, self.fallback.name,
            )
            words = []
        else:
            if not words:
                logger.info(
                    "Keyword ranker %s returned nothing; using %s",
                    self.primary.name, self.fallback.name,
                )

        words = list(dict.fromkeys(words))[:target]
        if words:
            return words
        return await self.fallback.rank(transcript, auxiliary_text, target)


def build_ranker(use_remote: Optional[bool] = None) -> KeywordRanker:
    """Pick the ranker for the current configuration.

    RULES:
    - use_remote=None follows config (enabled flag AND API key present)
    - use_remote=True overrides the enabled flag but still needs an API key
    - use_remote=False is always local
    """
    if use_remote is None:
        use_remote = remote_ranker_configured()
    elif use_remote and load_ranker_api_key() is None:
        logger.warning("Remote ranking requested but KEYWORD_RANKER_API_KEY is not set; using local ranking")
        use_remote = False
    if use_remote:
        return FallbackRanker(RemoteRanker())
    return FrequencyRanker()


async def extract_keywords(
    transcript: str,
    auxiliary_text: str = "",
    duration_s: Optional[float] = None,
    ranker: Optional[KeywordRanker] = None,
    policy: ExercisePolicy = DEFAULT_POLICY,
) -> List[str]:
    """Select exercise keywords from a transcript.

    Args:
        transcript: Raw transcript text (may be empty).
        auxiliary_text: Optional accompanying text, e.g. question sheet.
        duration_s: Audio duration in seconds, if known.
        ranker: Ranking strategy; defaults to build_ranker().
        policy: Exercise policy constants.

    Returns:
        Unique keywords ordered by rank; empty when nothing qualifies.
    """
    if not transcript or not transcript.strip():
        return []

    target = target_keyword_count(duration_s, policy)
    ranker = ranker or build_ranker()
    keywords = await ranker.rank(transcript, auxiliary_text or "", target)
    logger.info("Selected %d keywords (target %d) with %s ranker", len(keywords), target, ranker.name)
    return keywords


def extract_keywords_sync(
    transcript: str,
    duration_s: Optional[float] = None,
    policy: ExercisePolicy = DEFAULT_POLICY,
) -> List[str]:
    """Local-only keyword extraction for synchronous callers."""
    if not transcript:
        return []
    return rank_by_frequency(transcript, target_keyword_count(duration_s, policy))
