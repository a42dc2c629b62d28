"""Response dataclasses for the ranking and transcription services.

WHY: Both collaborators return JSON whose shape varies slightly between
providers. Typed dataclasses with from_dict factories pin down exactly
which fields we rely on and fail loudly (KeyError/TypeError) when a
payload is unusable, so clients can translate that into typed errors.

RULES:
- ChatCompletion reads choices[0].message.content only
- TranscriptionResult accepts "text" or "transcription" for the text and
  an optional numeric "duration" in seconds
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ChatCompletion:
    """The first choice of an OpenAI-compatible chat completion."""

    model: str
    content: str

    @classmethod
    def from_dict(cls, data: dict) -> ChatCompletion:
        if not isinstance(data, dict):
            raise TypeError("chat completion is not a JSON object")
        content = data["choices"][0]["message"]["content"]
        if not isinstance(content, str):
            raise TypeError("message.content is not a string")
        return cls(model=data.get("model", ""), content=content)


@dataclass
class TranscriptionResult:
    """A transcript plus the audio duration, when the provider reports it.

    RULES:
    - source is "api" for provider output, "sample" for the local fallback
    - duration_s is None when unknown
    """

    text: str
    duration_s: float | None = None
    source: str = "api"

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptionResult:
        if not isinstance(data, dict):
            raise TypeError("transcription response is not a JSON object")
        text = data.get("text")
        if text is None:
            text = data["transcription"]
        if not isinstance(text, str):
            raise TypeError("transcription text is not a string")
        duration = data.get("duration")
        return cls(
            text=text,
            duration_s=float(duration) if isinstance(duration, (int, float)) else None,
        )
