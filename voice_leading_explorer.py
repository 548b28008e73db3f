# voice_leading_explorer.py
"""
Command-line front end: runs one or more voice-leading searches in sequence
and saves the score and run log of each.

Usage:
    python voice_leading_explorer.py [voices|-] [chords|-] [batch] [options]

Examples:
    python voice_leading_explorer.py                 # SAATTB, 17 chords, once
    python voice_leading_explorer.py SATB 8 3        # three SATB runs of 8 chords
    python voice_leading_explorer.py - 12 --seed 7   # default voices, 12 chords
"""

import argparse
import logging
import re
import sys
from typing import List, Optional

from vlga.evaluation import Rule, parse_rules
from vlga.explorer import Explorer
from vlga.logging_utils import LOG_FORMATS, configure_logging, log_event
from vlga.music_constants import (
    CROSSOVER_MUTATION_RATE, CROSSOVER_ONLY_RATE, DATA_FOLDER, DEFAULT_CHORD_COUNT,
    DEFAULT_VOICES, ELITISM_RATE, FITNESS_AIM, GENERATION_LIMIT, MAX_MUTATION_LOCI,
    MUTATION_ONLY_RATE, POPULATION_LIMIT, TOURNAMENT_ARITY,
)

logger = logging.getLogger("vlga")

VOICES_PATTERN = re.compile(r"[SATB]+")
KEEP_DEFAULT = "-"


def voices_arg(value: str) -> str:
    if value == KEEP_DEFAULT:
        return DEFAULT_VOICES
    if not VOICES_PATTERN.fullmatch(value):
        raise argparse.ArgumentTypeError(f"voices must only use S, A, T and B, got {value!r}")
    return value


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def population_size(value: str) -> int:
    number = positive_int(value)
    if number < TOURNAMENT_ARITY:
        raise argparse.ArgumentTypeError(
            f"population must hold at least {TOURNAMENT_ARITY} individuals, got {value!r}")
    return number


def chords_arg(value: str) -> int:
    if value == KEEP_DEFAULT:
        return DEFAULT_CHORD_COUNT
    return positive_int(value)


def rate(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number in [0, 1], got {value!r}") from None
    if not 0.0 <= number <= 1.0:
        raise argparse.ArgumentTypeError(f"expected a number in [0, 1], got {value!r}")
    return number


def rule_list(value: str) -> List[Rule]:
    try:
        return list(parse_rules([name for name in value.split(",") if name.strip()]))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="vlga",
        description="Search for four-part chord progressions with a genetic algorithm.")
    ap.add_argument("voices", nargs="?", type=voices_arg, default=DEFAULT_VOICES,
                    help=f"Voice labels top to bottom, or '-' (default {DEFAULT_VOICES})")
    ap.add_argument("chords", nargs="?", type=chords_arg, default=DEFAULT_CHORD_COUNT,
                    help=f"Number of chords, or '-' (default {DEFAULT_CHORD_COUNT})")
    ap.add_argument("batch", nargs="?", type=positive_int, default=1,
                    help="Number of runs (default 1)")
    ap.add_argument("--population", type=population_size, default=POPULATION_LIMIT)
    ap.add_argument("--elitism", type=rate, default=ELITISM_RATE)
    ap.add_argument("--crossover-only", type=rate, default=CROSSOVER_ONLY_RATE)
    ap.add_argument("--crossover-mutation", type=rate, default=CROSSOVER_MUTATION_RATE)
    ap.add_argument("--mutation-only", type=rate, default=MUTATION_ONLY_RATE)
    ap.add_argument("--max-loci", type=positive_int, default=MAX_MUTATION_LOCI)
    ap.add_argument("--max-voices", type=positive_int, default=None,
                    help="Max mutated voices per chord (default: number of voices)")
    ap.add_argument("--fitness-aim", type=float, default=FITNESS_AIM)
    ap.add_argument("--generations", type=positive_int, default=GENERATION_LIMIT,
                    help="Generation limit")
    ap.add_argument("--rules", type=rule_list, default=None,
                    help="Comma-separated rule names (default: all rules)")
    ap.add_argument("--seed", type=int, default=None,
                    help="Seed of the first run; later runs use seed + run index")
    ap.add_argument("--workers", type=positive_int, default=1,
                    help="Threads for fitness evaluation")
    ap.add_argument("--output-dir", type=str, default=DATA_FOLDER)
    ap.add_argument("--no-score", action="store_true", help="Do not write MusicXML scores")
    ap.add_argument("--log-level", type=str, default=None, help="Overrides LOG_LEVEL")
    ap.add_argument("--log-format", type=str, choices=LOG_FORMATS, default=None,
                    help="Overrides LOG_FORMAT")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_format)

    failures = 0
    for run in range(args.batch):
        seed = None if args.seed is None else args.seed + run
        explorer = Explorer(
            voices=args.voices,
            chord_count=args.chords,
            population_limit=args.population,
            elitism_rate=args.elitism,
            crossover_only_rate=args.crossover_only,
            crossover_mutation_rate=args.crossover_mutation,
            mutation_only_rate=args.mutation_only,
            max_mutation_loci=args.max_loci,
            max_mutation_voices=args.max_voices,
            rules=args.rules,
            fitness_aim=args.fitness_aim,
            generation_limit=args.generations,
            seed=seed,
            workers=args.workers,
            run_index=run + 1,
        )
        explorer.start()
        try:
            if not args.no_score:
                explorer.save_score(args.output_dir)
            explorer.save_data(args.output_dir)
        except OSError as exc:
            failures += 1
            log_event(logger, "save_failed", logging.ERROR,
                      run=run + 1, run_name=explorer.filename, error=str(exc))
            continue
        log_event(logger, "run_finished", run=run + 1, run_name=explorer.filename,
                  fitness=round(explorer.fittest.fitness(), 6),
                  generations=explorer.generations_evolved)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
