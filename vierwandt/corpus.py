# vierwandt/corpus.py
from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, List, Tuple, Union

from pydantic import ValidationError

from .errors import ValidationWarning
from .schema import PuzzleRecord

logger = logging.getLogger(__name__)

Corpus = Tuple[PuzzleRecord, ...]

GROUP_COUNT = 4
GROUP_SIZE = 4
GRID_SIZE = GROUP_COUNT * GROUP_SIZE

def parse_corpus(data: Any) -> Corpus:
    """
    Turn decoded JSON into a corpus. Anything other than a non-empty list gives
    an empty corpus; records that fail validation are dropped, order is kept.
    """
    if not isinstance(data, list) or not data:
        logger.error("Puzzle file is empty or not a JSON array; no puzzles loaded")
        return ()

    records: List[PuzzleRecord] = []
    for i, raw in enumerate(data):
        try:
            records.append(PuzzleRecord.model_validate(raw))
        except ValidationError as e:
            logger.error("Skipping puzzle #%d: %d validation error(s)", i, e.error_count())
    return tuple(records)

def load_corpus(path: Union[str, Path]) -> Corpus:
    """Load the corpus once at startup. Never raises: failures degrade to an empty corpus."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Could not read puzzles from %s: %s", path, e)
        return ()

    corpus = parse_corpus(data)
    for record in corpus:
        for w in inspect_record(record):
            logger.warning("Puzzle %s: %s", record.label, w)
    if corpus:
        logger.info("Loaded %d puzzles from %s", len(corpus), path)
    return corpus

def inspect_record(record: PuzzleRecord) -> List[ValidationWarning]:
    """Structural checks on one record. Problems are reported, not fixed."""
    out: List[ValidationWarning] = []
    if len(record.groups) != GROUP_COUNT:
        out.append(ValidationWarning("group_count", f"expected {GROUP_COUNT} groups, found {len(record.groups)}"))
    for g in record.groups:
        if len(g.words) != GROUP_SIZE:
            out.append(ValidationWarning(
                "group_size", f"group {g.category!r} has {len(g.words)} words, expected {GROUP_SIZE}"
            ))

    words = record.all_words()
    if len(words) != GRID_SIZE:
        out.append(ValidationWarning("word_count", f"expected {GRID_SIZE} words, found {len(words)}"))
    dupes = sorted(w for w, n in Counter(words).items() if n > 1)
    if dupes:
        out.append(ValidationWarning("duplicate_word", f"repeated words: {', '.join(dupes)}"))

    known = set(words)
    for key, word in record.fixed_positions.items():
        if not isinstance(word, str) or word not in known:
            out.append(ValidationWarning("fixed_unknown_word", f"slot {key}: {word!r} is not in any group"))
    return out
