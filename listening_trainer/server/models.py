"""Pydantic response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for response serialization
and automatic OpenAPI documentation. Pydantic models enforce field types
at runtime and generate the JSON Schema shown in the /docs UI.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Response models never expose internal details (temp paths, locks)
- Status values match SessionStatus / ExerciseStatus exactly
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SessionCreatedResponse(BaseModel):
    """Returned when an upload is accepted."""

    id: str = Field(description="Unique session identifier.")
    status: str = Field(description="Initial session status (always 'processing').")
    filename: str = Field(description="Uploaded audio filename.")
    questions: str = Field(default="", description="Question text uploaded with the audio.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "id": "550e8400e29b41d4a716446655440000",
                "status": "processing",
                "filename": "lecture.mp3",
                "questions": "",
            }
        ]
    }}


class SessionResponse(BaseModel):
    """Session status and derived data."""

    id: str = Field(description="Unique session identifier.")
    status: str = Field(description="Current session status.")
    filename: str = Field(description="Uploaded audio filename.")
    created_at: float = Field(description="Creation timestamp (Unix epoch seconds).")
    questions: str = Field(default="", description="Question text uploaded with the audio.")
    transcript: Optional[str] = Field(default=None, description="Transcript, once available.")
    keywords: Optional[List[str]] = Field(default=None, description="Selected keywords, once available.")
    duration_s: Optional[float] = Field(default=None, description="Audio duration in seconds, if known.")
    transcript_source: Optional[str] = Field(
        default=None,
        description="'api' for provider output, 'sample' for the fallback lecture.",
    )
    error: Optional[str] = Field(default=None, description="Error message when status is 'error'.")


class SessionSummary(BaseModel):
    """One entry in the session list."""

    id: str = Field(description="Unique session identifier.")
    status: str = Field(description="Current session status.")
    filename: str = Field(description="Uploaded audio filename.")
    created_at: float = Field(description="Creation timestamp (Unix epoch seconds).")


class SessionListResponse(BaseModel):
    sessions: List[SessionSummary] = Field(description="Sessions, newest first.")


class WordItem(BaseModel):
    id: int = Field(description="Token position in the transcript.")
    text: str = Field(description="Normalized word.")


class WordsResponse(BaseModel):
    """Normalized transcript tokens for word-by-word display."""

    status: str = Field(description="'processing' until the transcript exists, then 'completed'.")
    words: List[WordItem] = Field(default_factory=list, description="Transcript tokens in order.")
    keywords: List[str] = Field(default_factory=list, description="Selected keywords.")


class ExerciseOptionModel(BaseModel):
    """One clickable word."""

    id: int = Field(description="Position in the option list.")
    text: str = Field(description="The word shown to the learner.")
    is_keyword: bool = Field(description="True when the word is a correct answer.")
    time_segment: Optional[int] = Field(
        default=None,
        description="Time segment index; absent when the duration is unknown, -1 if unassigned.",
    )


class ExerciseResponse(BaseModel):
    """Exercise options for a session."""

    status: str = Field(description="'processing', 'no_keywords', or 'completed'.")
    options: List[ExerciseOptionModel] = Field(default_factory=list, description="Options in display order.")
    keywords: List[str] = Field(default_factory=list, description="The correct answers.")
    duration_s: Optional[float] = Field(default=None, description="Audio duration in seconds, if known.")
    segment_count: int = Field(default=0, description="Number of time segments (0 when unsegmented).")


class LexiconSampleResponse(BaseModel):
    words: List[str] = Field(description="Randomly sampled distractor words.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    remote_ranker: bool = Field(description="Whether the remote keyword ranker is configured.")


class AnswerRequest(BaseModel):
    """Words the learner clicked."""

    clicked_words: List[str] = Field(description="Clicked option texts, in click order.")


class AnswerResponse(BaseModel):
    """Score for one attempt; nothing is stored."""

    correct: List[str] = Field(description="Clicked words that are keywords.")
    incorrect: List[str] = Field(description="Clicked words that are not keywords.")
    missed: List[str] = Field(description="Keywords that were not clicked.")
    accuracy: float = Field(description="Correct clicks as a percentage of the keywords (0-100).")
