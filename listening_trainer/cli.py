"""Command-line interface for generating listening exercises.

WHY: Teachers and developers want to try the exercise engine on a
transcript or recording without running the HTTP service. The CLI wires
input loading, optional transcription, keyword extraction, and option
generation behind a single command.

HOW: Uses argparse to accept an input file (transcript text or audio),
an optional duration, question sheet, option count, and seed. Runs the
async pipeline via asyncio.run(). Status messages go to stderr; the
exercise JSON goes to stdout or --output.

RULES:
- .txt/.md inputs are read as transcripts; audio inputs are transcribed
  (falling back to a sample lecture when speech-to-text is unavailable)
- --duration overrides any duration reported by the transcription provider
- --seed makes distractor draws and shuffles reproducible
- Exit code 1 on unusable input; "no_keywords" is a normal result, exit 0
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from listening_trainer.api.transcription import transcribe_audio
from listening_trainer.config import SUPPORTED_AUDIO_FORMATS, SUPPORTED_TEXT_FORMATS
from listening_trainer.core.assembler import build_exercise
from listening_trainer.core.ir import ExerciseStatus
from listening_trainer.core.keywords import build_ranker, extract_keywords


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


async def _load_transcript(input_path: Path) -> tuple:
    """Return (transcript, duration_s) for a text or audio input."""
    ext = input_path.suffix.lower()
    if ext in SUPPORTED_TEXT_FORMATS:
        return input_path.read_text(encoding="utf-8"), None
    result = await transcribe_audio(input_path, on_status=_status)
    return result.text, result.duration_s


async def _run_pipeline(args: argparse.Namespace) -> dict:
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    ext = input_path.suffix.lower()
    if ext not in SUPPORTED_TEXT_FORMATS and ext not in SUPPORTED_AUDIO_FORMATS:
        _fail("Unsupported file type '{}'. Supported formats: {}".format(
            ext, ", ".join(sorted(SUPPORTED_TEXT_FORMATS | SUPPORTED_AUDIO_FORMATS))
        ))
    if args.duration is not None and args.duration < 0:
        _fail("--duration must not be negative")

    questions = ""
    if args.questions:
        questions_path = Path(args.questions).resolve()
        if not questions_path.is_file():
            _fail("Questions file not found: {}".format(questions_path))
        questions = questions_path.read_text(encoding="utf-8")
        _status("  Questions: {} ({} chars)".format(args.questions, len(questions)))

    transcript, provider_duration = await _load_transcript(input_path)
    duration_s = args.duration if args.duration else provider_duration
    _status("Transcript: {} chars, duration: {}".format(
        len(transcript), "{:.1f}s".format(duration_s) if duration_s else "unknown"
    ))

    ranker = build_ranker(args.remote_ranking)
    _status("Extracting keywords ({} ranker)...".format(ranker.name))
    keywords = await extract_keywords(
        transcript,
        auxiliary_text=questions,
        duration_s=duration_s,
        ranker=ranker,
    )

    rng = random.Random(args.seed) if args.seed is not None else None
    exercise = build_exercise(
        keywords,
        transcript,
        total_options=args.total_options,
        duration_s=duration_s,
        rng=rng,
    )
    if exercise.status == ExerciseStatus.NO_KEYWORDS:
        _status("No usable keywords found; no exercise generated.")
    else:
        _status("Generated {} options ({} keywords, {} segments).".format(
            len(exercise.options), len(exercise.keywords), exercise.segment_count
        ))

    payload = exercise.to_dict()
    payload["durationS"] = duration_s
    return payload


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="listening_trainer",
        description="Generate a word-selection listening exercise from a "
                    "transcript or an audio recording.",
    )

    parser.add_argument(
        "input_file",
        help="Transcript (.txt, .md) or audio file to build the exercise from.",
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Audio duration in seconds; enables time-segmented options.",
    )

    parser.add_argument(
        "--questions",
        default=None,
        help="Path to a question sheet that accompanies the audio.",
    )

    parser.add_argument(
        "--total-options",
        type=int,
        default=None,
        help="Total number of options (default: 3 distractors per keyword).",
    )

    parser.add_argument(
        "--remote-ranking",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use the remote keyword ranker (default: follow KEYWORD_RANKER_ENABLED).",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible output.",
    )

    parser.add_argument(
        "--output",
        default=None,
        help="Write the exercise JSON to this file instead of stdout.",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m listening_trainer``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    payload = asyncio.run(_run_pipeline(args))
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        _status("Saved: {}".format(args.output))
    else:
        print(text)


if __name__ == "__main__":
    main()
