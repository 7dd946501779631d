# vierwandt/daily.py
from __future__ import annotations

import logging
import random
import secrets
from dataclasses import dataclass
from datetime import date, datetime
from typing import Collection, Dict, List, Optional, Sequence, Set, Tuple, Union

import pytz

from .corpus import GRID_SIZE, GROUP_SIZE
from .errors import IncompleteGrid, InvalidInput, NotAvailable, ValidationWarning
from .schema import PuzzleRecord

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Unknown"

# ───────── Day selection ─────────
def utc_date(value: Union[date, datetime]) -> date:
    """Calendar date in UTC. Naive datetimes are taken to be UTC already."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(pytz.utc)
        return value.date()
    return value

def day_index(today: Union[date, datetime], epoch: Optional[date]) -> int:
    """Whole days from `epoch` to `today` (UTC). Raises NotAvailable before the epoch."""
    if not isinstance(epoch, date):
        raise NotAvailable("epoch is not set")
    if isinstance(epoch, datetime):
        epoch = utc_date(epoch)
    n = (utc_date(today) - epoch).days
    if n < 0:
        raise NotAvailable(f"epoch {epoch.isoformat()} lies in the future")
    return n

def select_puzzle(
    today: Union[date, datetime],
    epoch: Optional[date],
    corpus: Sequence[PuzzleRecord],
) -> PuzzleRecord:
    if not corpus:
        logger.error("No puzzles available")
        raise NotAvailable("corpus is empty")
    try:
        n = day_index(today, epoch)
    except NotAvailable as e:
        logger.error("Cannot select a puzzle: %s", e)
        raise

    idx = n % len(corpus)
    logger.info("Day %d since start, %d puzzles, index %d", n, len(corpus), idx)
    return corpus[idx]

def get_utc_today() -> date:
    return datetime.now(pytz.utc).date()

# ───────── Grid assembly ─────────
@dataclass(frozen=True)
class GridResult:
    words: Tuple[str, ...]
    author: str
    warnings: Tuple[ValidationWarning, ...] = ()

def _parse_slot(key: str) -> Optional[int]:
    # plain ASCII digits only; int() would also take "1_6" or non-Latin digits
    key = str(key).strip()
    if not (key.isascii() and key.isdigit()):
        return None
    pos = int(key)
    return pos if 1 <= pos <= GRID_SIZE else None

def assemble_grid(puzzle: PuzzleRecord, rng: Optional[random.Random] = None) -> GridResult:
    """
    Lay the puzzle's words out on a 16-slot grid.

    Fixed positions are applied in file order: a word keeps its first slot,
    a slot keeps its last word (the word it displaced goes back to the pool).
    Everything else is shuffled into the free slots, left to right.
    """
    rng = rng or secrets.SystemRandom()
    warnings: List[ValidationWarning] = []

    def warn(code: str, message: str) -> None:
        warnings.append(ValidationWarning(code, message))
        logger.warning("Puzzle %s: %s", puzzle.label, message)

    all_words = puzzle.all_words()
    if len(all_words) != GRID_SIZE:
        warn("word_count", f"puzzle has {len(all_words)} words instead of {GRID_SIZE}")
    known: Set[str] = set(all_words)

    grid: List[Optional[str]] = [None] * GRID_SIZE
    fixed: Dict[str, int] = {}         # word -> slot index

    for key, word in puzzle.fixed_positions.items():
        pos = _parse_slot(key)
        if pos is None:
            warn("bad_position", f"invalid position key {key!r} in fixedPositions")
            continue
        if not isinstance(word, str) or word not in known:
            warn("unknown_word", f"fixed word {word!r} (pos {pos}) is not in the puzzle groups")
            continue
        if word in fixed:
            warn("duplicate_word", f"word {word!r} has several fixed positions, keeping the first")
            continue

        idx = pos - 1
        displaced = grid[idx]
        if displaced is not None:
            warn("position_conflict", f"position {pos} claimed by {displaced!r} and {word!r}, keeping {word!r}")
            del fixed[displaced]
        grid[idx] = word
        fixed[word] = idx

    # duplicates inside the puzzle only fill as many slots as there are copies
    rest = list(all_words)
    for word in fixed:
        rest.remove(word)
    rng.shuffle(rest)

    it = iter(rest)
    for i, slot in enumerate(grid):
        if slot is not None:
            continue
        nxt = next(it, None)
        if nxt is None:
            logger.error("Puzzle %s: not enough words to fill slot %d", puzzle.label, i + 1)
            raise IncompleteGrid(f"ran out of words at slot {i + 1}")
        grid[i] = nxt

    leftover = list(it)
    if leftover:
        warn("surplus_words", f"{len(leftover)} word(s) did not fit on the grid")

    return GridResult(
        words=tuple(grid),
        author=puzzle.author or DEFAULT_AUTHOR,
        warnings=tuple(warnings),
    )

# ───────── Guess validation ─────────
@dataclass(frozen=True)
class GuessResult:
    correct: bool
    category: Optional[str] = None

def check_guess(selected: Collection[str], puzzle: PuzzleRecord) -> GuessResult:
    """Exact match against one group, order ignored. First matching group wins."""
    if not isinstance(selected, (list, tuple, set, frozenset)) or len(selected) != GROUP_SIZE:
        raise InvalidInput(f"select exactly {GROUP_SIZE} words")
    if not all(isinstance(w, str) for w in selected):
        raise InvalidInput("words must be strings")

    chosen = set(selected)
    for group in puzzle.groups:
        if len(group.words) == GROUP_SIZE and set(group.words) == chosen:
            return GuessResult(correct=True, category=group.category)
    return GuessResult(correct=False)
