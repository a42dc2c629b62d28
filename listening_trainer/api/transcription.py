"""Async speech-to-text client with a local sample fallback.

WHY: The trainer needs a transcript for every uploaded recording. A
hosted speech-to-text API produces it; when no key is configured or the
provider fails, the service still has to hand the learner something to
practice on, so a bundled sample lecture is used instead.

HOW: TranscriptionClient wraps httpx.AsyncClient with Bearer auth and
posts the audio as multipart form data to /audio/transcriptions (the
OpenAI-style endpoint SiliconFlow also serves). transcribe_audio() is
the host-facing entry point: it tries the client and falls back to
sample_transcript() on missing configuration or any API error.

RULES:
- Always use the async context manager (async with TranscriptionClient() as c:)
- Response text comes from "text" or "transcription"; duration from "duration"
- Non-2xx → TranscriptionAPIError; unusable body → TranscriptionAPIError
- transcribe_audio() never raises for provider problems; a missing file
  raises FileNotFoundError
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import httpx

from listening_trainer.api.models import TranscriptionResult
from listening_trainer.config import (
    TRANSCRIPTION_BASE_URL,
    TRANSCRIPTION_MODEL,
    load_transcription_api_key,
)

logger = logging.getLogger(__name__)

SAMPLE_TRANSCRIPTS = (
    "Welcome to today's lecture on environmental science. "
    "Climate change is one of the most pressing challenges facing our planet. "
    "The Earth's average temperature has risen by approximately 1.1 degrees Celsius "
    "since pre-industrial times. This warming is primarily caused by human activities, "
    "especially the burning of fossil fuels. We need to reduce carbon dioxide emissions "
    "and transition to renewable energy sources. Individual actions like using public "
    "transportation, reducing energy consumption, and supporting sustainable practices "
    "can make a significant difference.",
    "Good morning everyone. Today we will discuss the topic of artificial intelligence "
    "in healthcare. AI has the potential to revolutionize medical diagnosis and treatment. "
    "Machine learning algorithms can analyze medical images with remarkable accuracy. "
    "However, we must also consider the ethical implications of AI in medicine. "
    "Patient privacy and data security are crucial concerns. Doctors will work alongside "
    "AI systems to provide better patient care.",
    "Hello and welcome to this business presentation. Our company has achieved significant "
    "growth this quarter. Sales have increased by 25% compared to the same period last year. "
    "Customer satisfaction ratings have also improved. We attribute this success to our "
    "innovative products and excellent customer service. Looking ahead, we plan to expand "
    "into new markets and develop additional features.",
)


class TranscriptionAPIError(Exception):
    """Raised when the speech-to-text provider returns an error response.

    RULES:
    - Always include status_code and message
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Transcription API error {status_code}: {message}")


def sample_transcript(rng: Optional[random.Random] = None) -> TranscriptionResult:
    """Pick one bundled sample lecture; duration is unknown."""
    rng = rng or random.Random()
    return TranscriptionResult(text=rng.choice(SAMPLE_TRANSCRIPTS), source="sample")


class TranscriptionClient:
    """Async client for an OpenAI-style /audio/transcriptions endpoint.

    RULES:
    - api_key defaults to load_transcription_api_key() from .env
    - base_url and model default to config values
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key or load_transcription_api_key()
        self._base_url = (base_url or TRANSCRIPTION_BASE_URL).rstrip("/")
        self._model = model or TRANSCRIPTION_MODEL
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> TranscriptionClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(300.0, connect=30.0),
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
                "TranscriptionClient must be used as an async context manager: "
                "async with TranscriptionClient() as client: ..."
            )
        return self._client

    async def transcribe(
        self,
        file_path: Path,
        on_status: Callable[[str], None] | None = None,
    ) -> TranscriptionResult:
        """Upload an audio file and return its transcript.

        Args:
            file_path: Path to the audio file.
            on_status: Optional callback for status updates.

        Returns:
            TranscriptionResult with source "api".
        """
        client = self._ensure_client()
        if on_status:
            on_status("Transcribing audio...")

        file_path = Path(file_path)
        with open(file_path, "rb") as f:
            resp = await client.post(
                "/audio/transcriptions",
                data={"model": self._model},
                files={"file": (file_path.name, f)},
            )

        if resp.status_code not in (200, 201):
            raise TranscriptionAPIError(resp.status_code, resp.text)

        try:
            result = TranscriptionResult.from_dict(resp.json())
        except (KeyError, TypeError, ValueError) as exc:
            raise TranscriptionAPIError(resp.status_code, "Unknown response format: {}".format(exc))

        if on_status:
            on_status("Transcription complete ({} chars).".format(len(result.text)))
        return result


async def transcribe_audio(
    file_path: Path,
    on_status: Callable[[str], None] | None = None,
    client_factory: Optional[Callable[[], TranscriptionClient]] = None,
) -> TranscriptionResult:
    """Transcribe ``file_path``, falling back to a sample lecture.

    RULES:
    - Missing file raises FileNotFoundError (caller error, not provider error)
    - Missing API key, HTTP errors, and bad payloads fall back to a sample
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError("Audio file not found: {}".format(file_path))

    try:
        factory = client_factory or TranscriptionClient
        async with factory() as client:
            return await client.transcribe(file_path, on_status=on_status)
    except ValueError as exc:
        logger.warning("Transcription not configured (%s); using sample transcript", exc)
    except (TranscriptionAPIError, httpx.HTTPError) as exc:
        logger.warning("Transcription failed (%s); using sample transcript", exc)

    if on_status:
        on_status("Using sample transcript (speech-to-text unavailable).")
    return sample_transcript()
