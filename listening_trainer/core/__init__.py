"""Exercise option synthesis engine.

WHY: The core package holds the only algorithmic part of the trainer:
turning a transcript into keywords, distractors, and a segmented,
shuffled option list. Host layers (CLI, HTTP API) only call into it.

HOW: tokenizer.py normalizes text, keywords.py ranks keywords,
distractors.py builds wrong answers, segmenter.py plans time buckets,
assembler.py emits the option list, scoring.py checks answers. ir.py
holds the shared dataclasses and lexicon.py the bundled distractor words.

RULES:
- No I/O here except the one-time lexicon load and the optional remote ranker
- No function raises on degenerate input
"""

from listening_trainer.core.assembler import (
    assemble_options,
    build_exercise,
    generate_exercise_options,
)
from listening_trainer.core.ir import (
    Exercise,
    ExerciseOption,
    ExerciseStatus,
    Segmented,
    Unsegmented,
)
from listening_trainer.core.keywords import extract_keywords, extract_keywords_sync
from listening_trainer.core.lexicon import Lexicon, sample_distractors
from listening_trainer.core.scoring import SelectionScore, score_selection

__all__ = [
    "Exercise",
    "ExerciseOption",
    "ExerciseStatus",
    "Lexicon",
    "Segmented",
    "SelectionScore",
    "Unsegmented",
    "assemble_options",
    "build_exercise",
    "extract_keywords",
    "extract_keywords_sync",
    "generate_exercise_options",
    "sample_distractors",
    "score_selection",
]
