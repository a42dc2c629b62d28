"""Configuration constants, exercise policy, and .env loading.

WHY: Centralizes every tunable value so it is easy to find, update, and
override. The exercise ratios (keywords per minute, distractors per
keyword, segment bounds) are product policy rather than derived values,
so they live here as named data instead of being buried in the engine.

HOW: python-dotenv loads the .env file on import. Collaborator settings
are module-level constants read with os.getenv. Exercise policy is a
frozen dataclass; DEFAULT_POLICY is what the engine uses unless a caller
passes its own.

RULES:
- The remote keyword ranker is disabled unless KEYWORD_RANKER_ENABLED is
  truthy AND an API key is configured; absence behaves exactly like "disabled"
- API keys are loaded from the environment, never hardcoded
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Exercise policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExercisePolicy:
    """Product-tuning values for exercise synthesis.

    RULES:
    - keywords_per_minute: keyword target when the audio duration is known
    - default_keyword_target: keyword target when it is not
    - distractors_per_keyword: wrong options generated per keyword
    - context_distractor_share: fraction of distractors drawn from the transcript
    - max_library_draw: upper bound on a single lexicon draw
    - context_exclusion_window: leading context tokens kept out of the lexicon channel
    - keywords_per_segment: target keywords in one time segment
    - min/max_segment_duration_s: clamp bounds for a segment's length
    """

    keywords_per_minute: int = 15
    default_keyword_target: int = 50
    distractors_per_keyword: int = 3
    context_distractor_share: float = 0.3
    max_library_draw: int = 400
    context_exclusion_window: int = 50
    keywords_per_segment: int = 4
    min_segment_duration_s: int = 30
    max_segment_duration_s: int = 60


DEFAULT_POLICY = ExercisePolicy()

# ---------------------------------------------------------------------------
# Remote keyword ranker (optional LLM collaborator)
# ---------------------------------------------------------------------------

KEYWORD_RANKER_ENABLED = _env_flag("KEYWORD_RANKER_ENABLED")
KEYWORD_RANKER_BASE_URL = os.getenv("KEYWORD_RANKER_BASE_URL", "https://api.openai.com/v1")
KEYWORD_RANKER_MODEL = os.getenv("KEYWORD_RANKER_MODEL", "gpt-4o-mini")
KEYWORD_RANKER_TIMEOUT_S = float(os.getenv("KEYWORD_RANKER_TIMEOUT_S", "15"))

# Prompt truncation limits for the remote ranker
RANKER_TRANSCRIPT_MAX_CHARS = 3000
RANKER_AUXILIARY_MAX_CHARS = 1000

# ---------------------------------------------------------------------------
# Transcription (speech-to-text collaborator)
# ---------------------------------------------------------------------------

TRANSCRIPTION_BASE_URL = os.getenv("TRANSCRIPTION_BASE_URL", "https://api.siliconflow.cn/v1")
TRANSCRIPTION_MODEL = os.getenv("TRANSCRIPTION_MODEL", "FunAudioLLM/SenseVoiceSmall")

SUPPORTED_AUDIO_FORMATS: set[str] = {
    ".aac", ".flac", ".m4a", ".mp3", ".mp4", ".ogg", ".wav", ".webm",
}
"""Audio file extensions accepted for upload (lowercase, with dot)."""

SUPPORTED_TEXT_FORMATS: set[str] = {".txt", ".md"}
"""Transcript and question file extensions (lowercase, with dot)."""

MAX_UPLOAD_BYTES = 100 * 1024 * 1024


def load_ranker_api_key() -> str | None:
    """Return the remote ranker API key, or None when unconfigured.

    RULES:
    - Empty or whitespace-only values count as unconfigured
    - Returning None is the normal "collaborator absent" state, not an error
    """
    key = os.getenv("KEYWORD_RANKER_API_KEY", "").strip()
    return key or None


def remote_ranker_configured() -> bool:
    """True only when the remote ranker is both switched on and has a key."""
    return KEYWORD_RANKER_ENABLED and load_ranker_api_key() is not None


def load_transcription_api_key() -> str:
    """Load the speech-to-text API key from the environment.

    WHY: The transcription provider needs a key for every call. Loading it
    from the environment (via .env) keeps it out of source code.

    HOW: Reads TRANSCRIPTION_API_KEY, falling back to SILICONFLOW_API_KEY.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = (
        os.getenv("TRANSCRIPTION_API_KEY", "").strip()
        or os.getenv("SILICONFLOW_API_KEY", "").strip()
    )
    if not key:
        raise ValueError(
            "Transcription API key not configured. "
            "Add TRANSCRIPTION_API_KEY to the .env file in the app folder."
        )
    return key
