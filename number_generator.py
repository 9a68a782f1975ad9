#!/usr/bin/env python3
# Constrained random search for a novel, historically "typical" combination.
from __future__ import annotations
import logging
import multiprocessing
from dataclasses import dataclass, field, fields, replace
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from draw_data import Draw, validate_draws
from draw_stats import (DEFAULT_UNIQUE_ATTEMPTS, combination_key, count_clusters_main_numbers,
                        count_max_consecutive_run, count_multiples, count_odd,
                        generate_unique_numbers, is_sum_in_range, max_gap_exceeds_threshold,
                        position_counters)

logger = logging.getLogger(__name__)

DEFAULT_MULTIPLES = {2: 4, 3: 4, 4: 3, 5: 2, 6: 2, 7: 2, 8: 2, 9: 2, 10: 2}


@dataclass
class GenerationConfig:
    min_main: int = 1
    max_main: int = 50
    count_main: int = 5
    min_lucky: int = 1
    max_lucky: int = 11
    count_lucky: int = 2
    min_score: float = 5.0
    max_iterations: int = 1_000_000
    sum_min: int = 42
    sum_max: int = 222
    max_main_gap_threshold: int = 19
    max_lucky_gap_threshold: int = 4
    odd_range: Tuple[int, int] = (1, 4)
    max_multiples_allowed: Dict[int, int] = field(default_factory=lambda: dict(DEFAULT_MULTIPLES))
    cluster_max: int = 3
    cluster_size: int = 10
    max_run: int = 3
    unique_attempts: int = DEFAULT_UNIQUE_ATTEMPTS
    debug: bool = False

    @classmethod
    def from_thresholds(cls, thresholds, **overrides) -> "GenerationConfig":
        """Copy a ThresholdCriteria snapshot in; overrides win."""
        base = cls(
            count_main=thresholds.count_main,
            count_lucky=thresholds.count_lucky,
            sum_min=thresholds.sum_min,
            sum_max=thresholds.sum_max,
            max_main_gap_threshold=thresholds.max_main_gap_threshold,
            max_lucky_gap_threshold=thresholds.max_lucky_gap_threshold,
            odd_range=tuple(thresholds.odd_range),
            max_multiples_allowed=dict(thresholds.max_multiples_allowed),
        )
        return replace(base, **overrides)

    def validate(self) -> "GenerationConfig":
        if self.min_main > self.max_main or self.min_lucky > self.max_lucky:
            raise ValueError("Number ranges must have min <= max")
        if self.min_main < 1 or self.min_lucky < 1:
            raise ValueError("Number ranges must start at 1 or above")
        if self.count_main > self.max_main - self.min_main + 1:
            raise ValueError(f"count_main={self.count_main} does not fit {self.min_main}..{self.max_main}")
        if self.count_lucky > self.max_lucky - self.min_lucky + 1:
            raise ValueError(f"count_lucky={self.count_lucky} does not fit {self.min_lucky}..{self.max_lucky}")
        if self.sum_min > self.sum_max or self.odd_range[0] > self.odd_range[1]:
            raise ValueError("sum and odd ranges must have min <= max")
        if self.max_iterations < 1 or self.cluster_size < 1:
            raise ValueError("max_iterations and cluster_size must be positive")
        return self


@dataclass
class IterationChecks:
    generation_duplicate: int = 0
    exceed_multiples: int = 0
    max_run: int = 0
    cluster_count: int = 0
    odd_even_balance: int = 0
    gap_exceeds_threshold: int = 0
    sum_in_range: int = 0
    historical_duplicate: int = 0
    pattern_prob_threshold: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class GenerationResult:
    best_combination: Optional[Draw]
    best_score: float
    best_positional_probabilities: Optional[List[float]]
    iterations: int
    best_iteration: int = 0
    checks: IterationChecks = field(default_factory=IterationChecks)


def main_rejection(main_nums: Sequence[int], cfg: GenerationConfig) -> Optional[Tuple[str, str]]:
    """First main-number filter the candidate fails, as (check name, message)."""
    for base, max_allowed in cfg.max_multiples_allowed.items():
        if count_multiples(main_nums, int(base)) > max_allowed:
            return "exceed_multiples", f"Too many multiples of {base} in main numbers"
    if max_gap_exceeds_threshold(main_nums, cfg.max_main_gap_threshold):
        return "gap_exceeds_threshold", f"Gap exceeds max allowed {cfg.max_main_gap_threshold}"
    if not is_sum_in_range(main_nums, cfg.sum_min, cfg.sum_max):
        return "sum_in_range", f"Sum {sum(main_nums)} outside range ({cfg.sum_min}-{cfg.sum_max})"
    run = count_max_consecutive_run(main_nums)
    if run >= cfg.max_run:
        return "max_run", f"Main numbers have {run} consecutive numbers"
    odd = count_odd(main_nums)
    if not cfg.odd_range[0] <= odd <= cfg.odd_range[1]:
        return "odd_even_balance", f"Odd count {odd} outside range ({cfg.odd_range[0]}-{cfg.odd_range[1]})"
    groups = count_clusters_main_numbers(main_nums, cfg.max_main, cfg.cluster_size)
    if any(c > cfg.cluster_max for c in groups.values()):
        return "cluster_count", f"Main numbers too clustered. Groups: {groups}"
    return None


def positional_probabilities(combo: Sequence[str], counters: Sequence[Dict[str, int]],
                             total_draws: int) -> List[float]:
    return [counters[i].get(v, 0) / total_draws * 100 if total_draws else 0.0
            for i, v in enumerate(combo)]


def generate_valid_number_set(draws: Sequence[Sequence], config: Optional[GenerationConfig] = None,
                              rng: Optional[np.random.Generator] = None,
                              seed: Optional[int] = None) -> GenerationResult:
    """Rejection-sample until a candidate scores >= min_score or iterations run out.

    Raises ConfigurationInfeasible when a unique main or lucky draw cannot find
    an untried combination within cfg.unique_attempts.
    """
    cfg = (config or GenerationConfig()).validate()
    draws = validate_draws(draws, cfg.count_main + cfg.count_lucky)
    rng = rng if rng is not None else np.random.default_rng(seed)
    debug = cfg.debug
    logger.info("Running Lottery Number Generator. Max Iterations: %d", cfg.max_iterations)

    historical: Set[Draw] = set(draws)
    counters = position_counters(draws)
    total_draws = len(draws)

    tried_main: Set[str] = set()
    tried_lucky: Set[str] = set()
    tried_combined: Set[Draw] = set()
    checks = IterationChecks()

    best_score = 0.0
    best_combo: Optional[Draw] = None
    best_probs: Optional[List[float]] = None
    best_iteration = 0

    for iteration in range(1, cfg.max_iterations + 1):
        main_nums = generate_unique_numbers(cfg.count_main, cfg.min_main, cfg.max_main,
                                            tried_main, rng, cfg.unique_attempts)
        rejected = main_rejection(main_nums, cfg)
        if rejected:
            name, msg = rejected
            setattr(checks, name, getattr(checks, name) + 1)
            tried_main.add(combination_key(main_nums))
            if debug:
                logger.debug("Iteration %d: %s. Regenerating...", iteration, msg)
            continue

        lucky_nums = generate_unique_numbers(cfg.count_lucky, cfg.min_lucky, cfg.max_lucky,
                                             tried_lucky, rng, cfg.unique_attempts)
        if max_gap_exceeds_threshold(lucky_nums, cfg.max_lucky_gap_threshold):
            checks.gap_exceeds_threshold += 1
            tried_lucky.add(combination_key(lucky_nums))
            if debug:
                logger.debug("Iteration %d: lucky gap exceeds max allowed %d. Regenerating...",
                             iteration, cfg.max_lucky_gap_threshold)
            continue

        combo: Draw = tuple(f"{n:02d}" for n in main_nums + lucky_nums)
        if combo in tried_combined:
            checks.generation_duplicate += 1
            if debug:
                logger.debug("Iteration %d: Generation duplicate found. Regenerating...", iteration)
            continue
        tried_combined.add(combo)
        if combo in historical:
            checks.historical_duplicate += 1
            if debug:
                logger.debug("Iteration %d: Combination exists historically. Retrying...", iteration)
            continue

        probs = positional_probabilities(combo, counters, total_draws)
        score = sum(probs) / len(probs)
        if best_combo is None or score > best_score:
            best_score, best_combo, best_probs, best_iteration = score, combo, probs, iteration

        if score >= cfg.min_score:
            logger.info("Iteration %d: Valid combination found with score %.2f%%", iteration, score)
            return GenerationResult(best_combo, best_score, best_probs, iteration, best_iteration, checks)
        checks.pattern_prob_threshold += 1

    logger.info("Max iterations reached. Best score so far: %.2f%%. Found at iteration %d",
                best_score, best_iteration)
    return GenerationResult(best_combo, best_score, best_probs, cfg.max_iterations, best_iteration, checks)


def generate_in_worker(draws: Sequence[Sequence], config: Optional[GenerationConfig] = None,
                       seed: Optional[int] = None, timeout: Optional[float] = None) -> GenerationResult:
    """Run the generator in a separate process.

    On timeout the worker is terminated and its partial state is dropped.
    """
    with multiprocessing.Pool(1) as pool:
        job = pool.apply_async(generate_valid_number_set, (list(draws), config), {"seed": seed})
        try:
            return job.get(timeout)
        except multiprocessing.TimeoutError as e:
            raise TimeoutError(f"Generator did not finish within {timeout}s") from e
