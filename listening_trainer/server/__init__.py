"""HTTP API server for practice sessions.

WHY: Browser clients need an HTTP interface to upload recordings, poll
for transcription, and fetch exercises.

HOW: app.py defines the FastAPI app and routes, sessions.py the
in-memory session store, models.py the Pydantic response schemas.

RULES:
- The session store is a module-level singleton in app.py
- Exercises are generated per request and never stored
"""
