"""In-memory practice-session store with TTL cleanup.

WHY: The HTTP API accepts an upload, returns immediately, and transcribes
in the background. Clients then poll the session until its transcript
and keywords are ready. An in-memory store is enough for a single-process
service; exercises themselves are regenerated on every request and never
stored.

HOW: Three components work together:
  SessionStatus: enum of valid session states
  Session: dataclass holding transcript, keywords, duration, and temp dir
  SessionStore: thread-safe dict-based store with create/get/list/update/delete
                and TTL cleanup of finished sessions

RULES:
- All store mutations are protected by threading.Lock
- Each session gets a dedicated temp directory for the uploaded audio
- Only terminal sessions (completed, error) expire
- Session IDs are UUID4 hex strings
"""

from __future__ import annotations

import enum
import logging
import shutil
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 6 * 3600

_UNSET = object()


class SessionStatus(str, enum.Enum):
    """Valid states for a practice session.

    RULES:
    - processing: audio uploaded, transcript/keywords not ready
    - completed: transcript and keywords stored
    - error: transcription or keyword extraction failed
    """

    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class Session:
    """One uploaded recording and what was derived from it.

    RULES:
    - questions: optional accompanying question text (auxiliary ranker input)
    - transcript/keywords: None until processing finishes
    - duration_s: None when neither the client nor the provider knew it
    - transcript_source: "api" or "sample"
    """

    id: str
    status: SessionStatus
    filename: str
    audio_dir: Path
    created_at: float
    updated_at: float
    questions: str = ""
    transcript: Optional[str] = None
    keywords: Optional[List[str]] = None
    duration_s: Optional[float] = None
    transcript_source: Optional[str] = None
    completed_at: Optional[float] = None
    error: Optional[str] = None

    @property
    def audio_path(self) -> Path:
        return self.audio_dir / self.filename


class SessionStore:
    """Thread-safe in-memory store for practice sessions.

    RULES:
    - create_session() raises ValueError when max_sessions is reached
    - get_session() returns None for unknown IDs
    - update_session() applies only the arguments that were passed
    - delete_session() and cleanup_expired() remove temp directories
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_sessions: int = 200,
    ) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def create_session(
        self,
        filename: str,
        questions: str = "",
        duration_s: Optional[float] = None,
    ) -> Session:
        """Create a PROCESSING session with its own temp directory."""
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise ValueError(
                    "Maximum number of sessions ({}) reached".format(self.max_sessions)
                )

            session_id = uuid.uuid4().hex
            now = time.time()
            session = Session(
                id=session_id,
                status=SessionStatus.PROCESSING,
                filename=filename,
                audio_dir=Path(tempfile.mkdtemp(prefix="listening_session_")),
                created_at=now,
                updated_at=now,
                questions=questions,
                duration_s=duration_s,
            )
            self._sessions[session_id] = session

        logger.info("Created session %s for file %s", session_id, filename)
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def list_sessions(self) -> List[Session]:
        """All sessions, newest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.created_at, reverse=True)

    def update_session(
        self,
        session_id: str,
        status: Optional[SessionStatus] = None,
        transcript: Optional[str] = None,
        keywords: Optional[List[str]] = None,
        duration_s=_UNSET,
        transcript_source: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Optional[Session]:
        """Update a session's mutable fields.

        RULES:
        - Returns the updated Session, or None if session_id not found
        - duration_s may be explicitly set to None; omit it to keep the value
        - completed_at is set when status becomes COMPLETED or ERROR
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None

            now = time.time()

            if status is not None:
                session.status = status
            if transcript is not None:
                session.transcript = transcript
            if keywords is not None:
                session.keywords = list(keywords)
            if duration_s is not _UNSET:
                session.duration_s = duration_s
            if transcript_source is not None:
                session.transcript_source = transcript_source
            if error is not None:
                session.error = error

            session.updated_at = now
            if session.status in (SessionStatus.COMPLETED, SessionStatus.ERROR):
                session.completed_at = now

            return session

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            return False

        self._cleanup_audio_dir(session.audio_dir)
        logger.info("Deleted session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove finished sessions older than the TTL; return how many."""
        now = time.time()
        expired: List[Session] = []

        with self._lock:
            for session_id, session in list(self._sessions.items()):
                if session.status == SessionStatus.PROCESSING or session.completed_at is None:
                    continue
                if now - session.completed_at > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for session in expired:
            self._cleanup_audio_dir(session.audio_dir)
            logger.info("Expired session %s (finished %.0fs ago)", session.id, now - session.completed_at)

        return len(expired)

    @staticmethod
    def _cleanup_audio_dir(audio_dir: Path) -> None:
        if audio_dir.exists():
            try:
                shutil.rmtree(audio_dir)
            except OSError:
                logger.warning("Failed to clean up temp dir: %s", audio_dir)
