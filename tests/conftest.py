"""Shared test fixtures for the listening_trainer test suite.

WHY: Most test modules need the same transcripts, a small deterministic
lexicon, and a seeded random source. Centralizing them keeps scenarios
identical across the keyword, distractor, and assembly tests.

HOW: Plain pytest fixtures. An autouse fixture switches the remote
keyword ranker off so no test depends on the developer's .env.

RULES:
- No test touches the network; HTTP clients use httpx.MockTransport
- Randomness is always seeded when a test asserts on order
"""

import random

import pytest

from listening_trainer.core.lexicon import Lexicon

SCENARIO_TRANSCRIPT = "The cat sat on the mat. The cat was happy."

LECTURE_TRANSCRIPT = (
    "Welcome to today's lecture on environmental science. Climate change is one "
    "of the most pressing challenges facing our planet. The planet's average "
    "temperature has risen since pre-industrial times. This warming is caused "
    "by human activities, especially the burning of fossil fuels. Climate "
    "scientists say we need to reduce carbon emissions and transition to "
    "renewable energy. Renewable energy sources like solar and wind power are "
    "growing quickly. Individual actions, such as using public transportation "
    "and reducing energy consumption, can make a significant difference to the "
    "climate of our planet."
)


@pytest.fixture(autouse=True)
def _local_ranker_only(monkeypatch):
    """Keep the remote ranker disabled regardless of the local .env."""
    monkeypatch.setattr(
        "listening_trainer.core.keywords.remote_ranker_configured",
        lambda: False,
    )
    monkeypatch.setattr(
        "listening_trainer.core.keywords.load_ranker_api_key",
        lambda: None,
    )


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def scenario_transcript():
    return SCENARIO_TRANSCRIPT


@pytest.fixture
def lecture_transcript():
    return LECTURE_TRANSCRIPT


@pytest.fixture
def synthetic_lexicon():
    """200 words that never occur in any test transcript."""
    return Lexicon(words=["lexword{}".format(i) for i in range(200)])


@pytest.fixture
def tiny_lexicon():
    return Lexicon(words=["alpha", "bravo", "charlie"])
