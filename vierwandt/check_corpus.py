# vierwandt/check_corpus.py
from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from typing import List, Optional

from .config import configure_logging, load_settings, parse_epoch
from .corpus import Corpus, inspect_record, load_corpus
from .daily import assemble_grid, day_index, get_utc_today
from .errors import IncompleteGrid, NotAvailable

# grid warnings that inspect_record reports in its own words
ALREADY_INSPECTED = {"word_count", "unknown_word"}

def report(corpus: Corpus) -> int:
    """Print per-record problems. Returns the number of records with problems."""
    bad = 0
    for i, record in enumerate(corpus):
        problems = [str(w) for w in inspect_record(record)]
        try:
            grid = assemble_grid(record)
            problems += [str(w) for w in grid.warnings if w.code not in ALREADY_INSPECTED]
        except IncompleteGrid as e:
            problems.append(f"incomplete_grid: {e}")
        if problems:
            bad += 1
            print(f"[check_corpus] #{i} (id {record.label}):")
            for p in problems:
                print(f"    {p}")
    return bad

def schedule(corpus: Corpus, epoch: Optional[date], start: date, days: int) -> List[str]:
    lines = []
    for offset in range(days):
        d = start + timedelta(days=offset)
        try:
            n = day_index(d, epoch)
        except NotAvailable:
            lines.append(f"{d.isoformat()}  -")
            continue
        record = corpus[n % len(corpus)]
        lines.append(f"{d.isoformat()}  day {n:>4}  id {record.label}")
    return lines

def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Check a puzzle file and show the upcoming rotation.")
    parser.add_argument("path", nargs="?", default=str(settings.puzzles_path))
    parser.add_argument("--epoch", default=None, help="rotation start, YYYY-MM-DD (default: PUZZLE_EPOCH)")
    parser.add_argument("--days", type=int, default=7, help="how many upcoming days to list")
    args = parser.parse_args(argv)

    configure_logging("ERROR")
    corpus = load_corpus(args.path)
    if not corpus:
        print(f"[check_corpus] ERROR: no usable puzzles in {args.path}")
        return 1

    epoch = parse_epoch(args.epoch) if args.epoch else settings.epoch
    bad = report(corpus)
    print(f"[check_corpus] {len(corpus)} puzzles, {bad} with problems")
    for line in schedule(corpus, epoch, get_utc_today(), args.days):
        print(f"    {line}")
    return 1 if bad else 0

if __name__ == "__main__":
    sys.exit(main())
