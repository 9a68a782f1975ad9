#!/usr/bin/env python3
# Command line picker: thresholds from history, then constrained generation.
from __future__ import annotations
import argparse
import logging
from typing import List, Optional, Sequence

from draw_data import (FEED_URL, Draw, build_snapshot, fetch_latest_csv, is_historical_draw, load_draws,
                       load_snapshot, save_snapshot)
from number_generator import GenerationResult, generate_valid_number_set
from threshold_criteria import ThresholdCriteria

DEFAULT_MIN_SCORE = 5.0
DEFAULT_MAX_ITERATIONS = 1_000_000


def format_result(i: int, res: GenerationResult, count_main: int = 5) -> str:
    if res.best_combination is None:
        return f"{i}) no combination passed every filter in {res.iterations} iterations"
    main = ", ".join(res.best_combination[:count_main])
    lucky = ", ".join(res.best_combination[count_main:])
    probs = ", ".join(f"{p:.1f}%" for p in res.best_positional_probabilities or [])
    return (f"{i}) {main}  Lucky {lucky}  |  Score: {res.best_score:.2f}%  |  "
            f"iterations {res.iterations}  |  {probs}")


def format_thresholds(t: ThresholdCriteria) -> List[str]:
    lines = [
        f"Draws analyzed: {len(t.draws)}",
        f"Odd range: {t.odd_range[0]}-{t.odd_range[1]}",
        f"Sum range: {t.sum_min}-{t.sum_max}",
        f"Gap thresholds: main {t.max_main_gap_threshold}, lucky {t.max_lucky_gap_threshold}",
        "Max multiples: " + ", ".join(f"{b}:{m}" for b, m in t.max_multiples_allowed.items()),
        "Max pattern probabilities:",
    ]
    lines += [f"  {k:<30}: {v:.2f}%" for k, v in t.max_pattern_probs.items()]
    return lines


def load_history(args) -> List[Draw]:
    if args.snapshot:
        return load_snapshot(args.snapshot)["results"]
    if args.csv:
        return load_draws(args.csv)
    text = fetch_latest_csv(args.url)
    payload = build_snapshot(text, args.url)
    if args.save_snapshot:
        save_snapshot(payload, args.save_snapshot)
    return payload["results"]


def parse_args(argv: Optional[Sequence[str]] = None):
    p = argparse.ArgumentParser(description="Lucky number picker")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--csv", help="results CSV in the feed's format")
    src.add_argument("--snapshot", help="JSON snapshot with a results array")
    src.add_argument("--fetch", action="store_true", help="download the latest feed")
    p.add_argument("--url", default=FEED_URL)
    p.add_argument("--save-snapshot", default=None, help="with --fetch, write the JSON snapshot here")
    p.add_argument("--sets", type=int, default=1)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--min-score", type=float, default=DEFAULT_MIN_SCORE)
    p.add_argument("--max-iterations", type=int, default=DEFAULT_MAX_ITERATIONS)
    p.add_argument("--cluster-max", type=int, default=3)
    p.add_argument("--max-lucky", type=int, default=11)
    p.add_argument("--show-thresholds", action="store_true")
    p.add_argument("--check", type=int, nargs=7, metavar="N", default=None,
                   help="only report whether these 7 numbers were ever drawn")
    p.add_argument("--debug", action="store_true")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    draws = load_history(args)
    if args.check:
        found = is_historical_draw(draws, args.check)
        print("Match found" if found else "No matches found")
        return 0
    thresholds = ThresholdCriteria(draws, debug=args.debug)
    if args.show_thresholds:
        print("\n".join(format_thresholds(thresholds)) + "\n")
    cfg = thresholds.to_generation_config(min_score=args.min_score, max_iterations=args.max_iterations,
                                          cluster_max=args.cluster_max, max_lucky=args.max_lucky,
                                          debug=args.debug)
    print("Generated combinations:\n")
    for i in range(1, args.sets + 1):
        seed = None if args.seed is None else args.seed + i - 1
        print(format_result(i, generate_valid_number_set(draws, cfg, seed=seed), cfg.count_main))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
