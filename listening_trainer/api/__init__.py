"""HTTP clients for the trainer's external collaborators.

WHY: Two services sit outside the engine: speech-to-text for turning
uploads into transcripts, and an optional language-model ranker for
keyword selection. Both are reached over HTTP with the same pattern.

HOW: Each client wraps httpx.AsyncClient as an async context manager with
Bearer auth. Response payloads are parsed into dataclasses in models.py.

RULES:
- All HTTP calls go through these clients (no direct httpx usage elsewhere)
- Clients raise typed errors; callers own the fallback policy
"""

from listening_trainer.api.client import RankingAPIError, RankingClient, RankingResponseError
from listening_trainer.api.models import ChatCompletion, TranscriptionResult
from listening_trainer.api.transcription import (
    TranscriptionAPIError,
    TranscriptionClient,
    transcribe_audio,
)

__all__ = [
    "ChatCompletion",
    "RankingAPIError",
    "RankingClient",
    "RankingResponseError",
    "TranscriptionAPIError",
    "TranscriptionClient",
    "TranscriptionResult",
    "transcribe_audio",
]
