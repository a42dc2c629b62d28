"""Async HTTP client for the optional remote keyword-ranking service.

WHY: A large language model can pick more meaningful exercise keywords
than a frequency count. The ranker talks to any OpenAI-compatible chat
completions endpoint, so the same client works with hosted or local
models. The engine treats this as an opportunistic collaborator: the
client raises typed errors and the caller decides to fall back.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. RankingClient is an
async context manager; enter it to get an authenticated client, exit to
close the connection pool. rank_keywords() builds the prompt, posts it,
and parses the reply with parse_ranked_words().

RULES:
- Always use the async context manager (async with RankingClient(...) as client:)
- Transcript is truncated to 3000 characters, auxiliary text to 1000
- One request per call, no retries; timeout comes from config
- Non-2xx → RankingAPIError; unusable payload → RankingResponseError
- Parsed words: leading enumeration stripped, lower-case, alphanumeric only,
  length > 2, unique, truncated to the requested count
"""

from __future__ import annotations

import re
from typing import List, Optional

import httpx

from listening_trainer.api.models import ChatCompletion
from listening_trainer.config import (
    KEYWORD_RANKER_BASE_URL,
    KEYWORD_RANKER_MODEL,
    KEYWORD_RANKER_TIMEOUT_S,
    RANKER_AUXILIARY_MAX_CHARS,
    RANKER_TRANSCRIPT_MAX_CHARS,
    load_ranker_api_key,
)

# Leading list markers: "1.", "2)", "- ", "* ", "• "
_ENUMERATION_RE = re.compile(r"^\s*(?:\d+\s*[.):-]|[-*•])\s*")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

_SYSTEM_PROMPT = (
    "You are an English listening teacher. You select the words in a "
    "transcript that a learner must catch to understand the audio."
)


class RankingAPIError(Exception):
    """Raised when the ranking service returns an error response.

    RULES:
    - Always include status_code and message
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Ranking API error {status_code}: {message}")


class RankingResponseError(ValueError):
    """Raised when the ranking service replies with nothing usable."""


def build_prompt(transcript: str, auxiliary_text: str, target: int) -> str:
    """Build the user prompt asking for exactly ``target`` keywords."""
    parts = [
        "Select exactly {} keywords from the transcript below. "
        "Return one word per line, no numbering, no explanations.".format(target),
        "",
        "Transcript:",
        transcript[:RANKER_TRANSCRIPT_MAX_CHARS],
    ]
    if auxiliary_text:
        parts.extend([
            "",
            "Questions that accompany the audio (prefer words that answer them):",
            auxiliary_text[:RANKER_AUXILIARY_MAX_CHARS],
        ])
    return "\n".join(parts)


def parse_ranked_words(content: str, target: int) -> List[str]:
    """Parse a one-word-per-line model reply into keywords.

    RULES:
    - Leading enumeration ("1.", "2)", "-") is stripped from each line
    - Lower-cased, then every non-alphanumeric character is removed
    - Entries of length <= 2 are dropped, repeats are dropped
    - Result is truncated to ``target``
    """
    words: List[str] = []
    seen: set = set()
    for line in content.splitlines():
        word = _ENUMERATION_RE.sub("", line).lower()
        word = _NON_ALNUM_RE.sub("", word)
        if len(word) <= 2 or word in seen:
            continue
        seen.add(word)
        words.append(word)
    return words[:max(target, 0)]


class RankingClient:
    """Async client for an OpenAI-compatible chat completions endpoint.

    RULES:
    - Use as: async with RankingClient() as client: ...
    - api_key defaults to KEYWORD_RANKER_API_KEY from .env
    - base_url, model, and timeout default to config values
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        key = api_key or load_ranker_api_key()
        if not key:
            raise ValueError(
                "Keyword ranker API key not configured. "
                "Add KEYWORD_RANKER_API_KEY to the .env file in the app folder."
            )
        self._api_key = key
        self._base_url = (base_url or KEYWORD_RANKER_BASE_URL).rstrip("/")
        self._model = model or KEYWORD_RANKER_MODEL
        self._timeout_s = timeout_s if timeout_s is not None else KEYWORD_RANKER_TIMEOUT_S
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> RankingClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(self._timeout_s),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "RankingClient must be used as an async context manager: "
                "async with RankingClient() as client: ..."
            )
        return self._client

    async def rank_keywords(
        self,
        transcript: str,
        auxiliary_text: str,
        target: int,
    ) -> List[str]:
        """Ask the model for ``target`` keywords and return the parsed list.

        Raises:
            RankingAPIError: on a non-2xx response.
            RankingResponseError: when the reply has no usable words.
            httpx.HTTPError: on transport failures and timeouts.
        """
        client = self._ensure_client()
        body = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(transcript, auxiliary_text, target)},
            ],
            "temperature": 0.2,
        }

        resp = await client.post("/chat/completions", json=body)
        if resp.status_code != 200:
            raise RankingAPIError(resp.status_code, resp.text)

        try:
            completion = ChatCompletion.from_dict(resp.json())
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise RankingResponseError(f"Malformed ranking response: {exc}") from exc

        words = parse_ranked_words(completion.content, target)
        if not words:
            raise RankingResponseError("Ranking response contained no usable words")
        return words
