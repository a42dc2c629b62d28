"""Listening Trainer: turn audio transcripts into word-selection exercises.

WHY: A listening-comprehension exercise needs a set of "correct" words
heard in the audio, a larger set of plausible wrong words, and an order
that spreads both across the timeline so a learner cannot game it. This
package builds that option list from a raw transcript.

HOW: Five-stage engine in ``listening_trainer.core``: tokenize, select
keywords, build distractors, segment by time, assemble and shuffle.
Optional host layers wrap it: HTTP clients for transcription and remote
keyword ranking (api), a FastAPI session service (server), and a CLI.

RULES:
- The engine is stateless; only the read-only lexicon is cached
- The remote ranker is optional and never required for a valid result
- No stage raises on degenerate input; results shrink instead
"""

__version__ = "0.1.0"
