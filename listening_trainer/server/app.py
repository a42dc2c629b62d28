"""FastAPI application for practice sessions and exercises.

WHY: The browser client uploads a recording, polls until the transcript
and keywords are ready, and then asks for a freshly shuffled exercise.
FastAPI provides request validation, background tasks, and OpenAPI docs.

HOW: POST /sessions stores the audio in the session's temp directory and
schedules the pipeline (transcribe → extract keywords) as a background
task. GET /sessions/{id}/exercise regenerates the option list from the
stored transcript and keywords on every call; exercises are never stored.
POST /sessions/{id}/answers scores the clicked words without storing them.

RULES:
- Error responses use the ErrorResponse schema
- Audio extension must be in SUPPORTED_AUDIO_FORMATS; questions must be .txt/.md
- Pipeline failures mark the session 'error'; they never crash the server
- An empty keyword list is reported as status 'no_keywords', not an error
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import BackgroundTasks, FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response

from listening_trainer import __version__
from listening_trainer.api.transcription import transcribe_audio
from listening_trainer.config import (
    MAX_UPLOAD_BYTES,
    SUPPORTED_AUDIO_FORMATS,
    SUPPORTED_TEXT_FORMATS,
    remote_ranker_configured,
)
from listening_trainer.core.assembler import build_exercise
from listening_trainer.core.ir import ExerciseStatus
from listening_trainer.core.keywords import extract_keywords
from listening_trainer.core.lexicon import Lexicon
from listening_trainer.core.scoring import score_selection
from listening_trainer.core.tokenizer import tokenize
from listening_trainer.server.models import (
    AnswerRequest,
    AnswerResponse,
    ErrorResponse,
    ExerciseOptionModel,
    ExerciseResponse,
    HealthResponse,
    LexiconSampleResponse,
    SessionCreatedResponse,
    SessionListResponse,
    SessionResponse,
    SessionSummary,
    WordItem,
    WordsResponse,
)
from listening_trainer.server.sessions import Session, SessionStatus, SessionStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()


async def _periodic_cleanup() -> None:
    """Run session cleanup every 5 minutes."""
    while True:
        await asyncio.sleep(300)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warm the lexicon, start periodic cleanup, cancel it on shutdown."""
    logger.info("Lexicon ready: %d words", len(Lexicon.default()))
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Listening Trainer API",
    description=(
        "Upload a recording, let the service transcribe it and pick keywords, "
        "then fetch a shuffled word-selection exercise spread across the "
        "audio timeline."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_session_or_404(session_id: str) -> Session:
    session = session_store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return session


def _session_to_response(session: Session) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        status=session.status.value,
        filename=session.filename,
        created_at=session.created_at,
        questions=session.questions,
        transcript=session.transcript,
        keywords=session.keywords,
        duration_s=session.duration_s,
        transcript_source=session.transcript_source,
        error=session.error,
    )


def _validate_extension(filename: str, allowed: set, kind: str) -> None:
    """Raise HTTPException if the file extension is not allowed."""
    ext = Path(filename).suffix.lower()
    if ext not in allowed:
        raise HTTPException(
            status_code=400,
            detail="Unsupported {} file type '{}'. Supported formats: {}".format(
                kind, ext, ", ".join(sorted(allowed))
            ),
        )


async def _process_session(session_id: str, store: SessionStore) -> None:
    """Transcribe a session's audio and extract its keywords.

    RULES:
    - A client-supplied duration wins over the provider's
    - Any exception marks the session as ERROR with the message
    """
    session = store.get_session(session_id)
    if session is None:
        return

    try:
        result = await transcribe_audio(session.audio_path)
        duration_s = session.duration_s if session.duration_s else result.duration_s

        keywords = await extract_keywords(
            result.text,
            auxiliary_text=session.questions,
            duration_s=duration_s,
        )

        store.update_session(
            session_id,
            status=SessionStatus.COMPLETED,
            transcript=result.text,
            keywords=keywords,
            duration_s=duration_s,
            transcript_source=result.source,
        )
        logger.info("Session %s ready: %d keywords", session_id, len(keywords))

    except Exception as exc:
        logger.exception("Processing failed for session %s", session_id)
        store.update_session(session_id, status=SessionStatus.ERROR, error=str(exc))


def _process_session_sync(session_id: str, store: SessionStore) -> None:
    """Synchronous wrapper so BackgroundTasks can run the async pipeline."""
    asyncio.run(_process_session(session_id, store))


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionCreatedResponse,
    status_code=201,
    tags=["sessions"],
    summary="Upload a recording",
    description=(
        "Upload an audio file and optional question sheet. Returns a session ID "
        "immediately; transcription and keyword extraction run in the background."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file or form field"},
        429: {"model": ErrorResponse, "description": "Too many sessions"},
    },
)
async def create_session(
    background_tasks: BackgroundTasks,
    audio: Annotated[
        UploadFile,
        File(description="Audio file to transcribe (mp3, m4a, wav, ...)."),
    ],
    questions: Annotated[
        Optional[UploadFile],
        File(description="Optional .txt or .md file with the accompanying questions."),
    ] = None,
    duration_s: Annotated[
        Optional[float],
        Form(description="Audio duration in seconds, if the client knows it."),
    ] = None,
) -> SessionCreatedResponse:
    # Sanitize filename to prevent path traversal
    filename = Path(audio.filename or "upload").name
    _validate_extension(filename, SUPPORTED_AUDIO_FORMATS, "audio")

    if duration_s is not None and duration_s < 0:
        raise HTTPException(status_code=400, detail="duration_s must not be negative")

    questions_text = ""
    if questions is not None and questions.filename:
        _validate_extension(questions.filename, SUPPORTED_TEXT_FORMATS, "questions")
        raw = await questions.read()
        try:
            questions_text = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="Questions file must be UTF-8 text")

    content = await audio.read()
    if not content:
        raise HTTPException(status_code=400, detail="Audio file is empty")
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=400,
            detail="Audio file exceeds the {} MB limit".format(MAX_UPLOAD_BYTES // (1024 * 1024)),
        )

    try:
        session = session_store.create_session(
            filename=filename,
            questions=questions_text,
            duration_s=duration_s or None,
        )
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))

    session.audio_path.write_bytes(content)
    background_tasks.add_task(_process_session_sync, session.id, session_store)

    return SessionCreatedResponse(
        id=session.id,
        status=session.status.value,
        filename=session.filename,
        questions=questions_text,
    )


@app.get(
    "/sessions",
    response_model=SessionListResponse,
    tags=["sessions"],
    summary="List sessions",
)
async def list_sessions() -> SessionListResponse:
    return SessionListResponse(sessions=[
        SessionSummary(
            id=s.id,
            status=s.status.value,
            filename=s.filename,
            created_at=s.created_at,
        )
        for s in session_store.list_sessions()
    ])


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get session status",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_session(session_id: str) -> SessionResponse:
    return _session_to_response(_get_session_or_404(session_id))


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Delete a session and its audio",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def delete_session(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return Response(status_code=204)


@app.get(
    "/sessions/{session_id}/words",
    response_model=WordsResponse,
    tags=["sessions"],
    summary="Get the normalized transcript words",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_session_words(session_id: str) -> WordsResponse:
    session = _get_session_or_404(session_id)
    if session.transcript is None:
        return WordsResponse(status=SessionStatus.PROCESSING.value)
    return WordsResponse(
        status=SessionStatus.COMPLETED.value,
        words=[WordItem(id=i, text=t) for i, t in enumerate(tokenize(session.transcript))],
        keywords=session.keywords or [],
    )


@app.get(
    "/sessions/{session_id}/exercise",
    response_model=ExerciseResponse,
    tags=["exercises"],
    summary="Generate a word-selection exercise",
    description=(
        "Builds a new shuffled option list from the session's keywords on every "
        "call. Status is 'processing' until the transcript exists and "
        "'no_keywords' when nothing in the transcript qualified."
    ),
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_session_exercise(
    session_id: str,
    total_options: Annotated[
        Optional[int],
        Query(ge=1, le=1000, description="Total option count; defaults to 3 distractors per keyword."),
    ] = None,
) -> ExerciseResponse:
    session = _get_session_or_404(session_id)
    if session.transcript is None:
        return ExerciseResponse(status=ExerciseStatus.PROCESSING.value)

    exercise = build_exercise(
        session.keywords or [],
        session.transcript,
        total_options=total_options,
        duration_s=session.duration_s,
    )
    return ExerciseResponse(
        status=exercise.status.value,
        options=[
            ExerciseOptionModel(
                id=o.id,
                text=o.text,
                is_keyword=o.is_keyword,
                time_segment=o.time_segment,
            )
            for o in exercise.options
        ],
        keywords=exercise.keywords,
        duration_s=session.duration_s,
        segment_count=exercise.segment_count,
    )


@app.post(
    "/sessions/{session_id}/answers",
    response_model=AnswerResponse,
    tags=["exercises"],
    summary="Score the words a learner clicked",
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Session is still processing"},
    },
)
async def submit_answers(session_id: str, body: AnswerRequest) -> AnswerResponse:
    session = _get_session_or_404(session_id)
    if session.transcript is None:
        raise HTTPException(status_code=409, detail="Session is still processing")

    score = score_selection(session.keywords or [], body.clicked_words)
    logger.info(
        "Session %s answers: %d/%d correct (%.1f%%)",
        session_id, len(score.correct), len(session.keywords or []), score.accuracy,
    )
    return AnswerResponse(
        correct=score.correct,
        incorrect=score.incorrect,
        missed=score.missed,
        accuracy=score.accuracy,
    )


# ---------------------------------------------------------------------------
# Endpoints: Lexicon and health
# ---------------------------------------------------------------------------


@app.get(
    "/lexicon/sample",
    response_model=LexiconSampleResponse,
    tags=["lexicon"],
    summary="Sample distractor words",
)
async def sample_lexicon(
    count: Annotated[int, Query(ge=0, le=1000, description="Number of words to draw.")] = 10,
    exclude: Annotated[
        Optional[str],
        Query(description="Comma-separated words to exclude."),
    ] = None,
) -> LexiconSampleResponse:
    excluded: List[str] = []
    if exclude:
        excluded = [w.strip() for w in exclude.split(",") if w.strip()]
    return LexiconSampleResponse(words=Lexicon.default().sample(count, excluded))


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, remote_ranker=remote_ranker_configured())


def run_api():
    """Entry point for the listening-trainer-api console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
