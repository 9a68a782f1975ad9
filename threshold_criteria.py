#!/usr/bin/env python3
# Threshold criteria derived from historical draws.
from __future__ import annotations
import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from draw_data import Draw, validate_draws
from draw_stats import count_multiples, count_odd, percentile, position_counters
from number_generator import GenerationConfig
from pattern_probs import generate_pattern_probabilities

logger = logging.getLogger(__name__)

COUNT_MAIN = 5
COUNT_LUCKY = 2
SUM_PERCENTILES = (15, 85)
GAP_PERCENTILE = 95
MULTIPLES_PERCENTILE = 95
MULTIPLE_BASES = list(range(2, 11))
DEFAULT_MAIN_GAP = 19
DEFAULT_LUCKY_GAP = 5

OddRange = Tuple[int, int]


@dataclass
class OddEvenRow:
    label: str
    odd_count: int
    count: int
    pct: float


@dataclass
class HeatCell:
    pos: int
    num: int
    count: int
    pct: float


@dataclass
class GapDistribution:
    main: List[Dict[int, int]] = field(default_factory=list)
    lucky: List[Dict[int, int]] = field(default_factory=list)


@dataclass
class MultiplesDistribution:
    distribution: Dict[int, int]
    example_draws: List[Draw]
    max_allowed: int


def _ints(draw: Sequence[str]) -> List[int]:
    return [int(n) for n in draw]


def expand_gaps(counters: Sequence[Dict[int, int]]) -> List[int]:
    """Flatten per-pair gap histograms back into one pooled sample."""
    gaps: List[int] = []
    for counter in counters:
        for gap, n in counter.items():
            gaps.extend([gap] * n)
    return gaps


class ThresholdCriteria:
    """Empirical thresholds for one set of historical draws.

    Everything is computed once in the constructor; the object is read-only
    afterwards; snapshot() and the frame accessors hand out copies.
    """

    def __init__(self, draws: Sequence[Sequence], count_main: int = COUNT_MAIN,
                 count_lucky: int = COUNT_LUCKY, debug: bool = False):
        self.draws = validate_draws(draws, count_main + count_lucky)
        self.count_main = count_main
        self.count_lucky = count_lucky
        self.debug = debug

        self.position_counters = position_counters(self.draws)
        self.max_pattern_probs = self.get_max_pattern_probabilities(self.draws)
        self.distribution, self.odd_range = self.analyze_odd_even_distribution(self.draws)
        self.sum_min, self.sum_max = self.analyze_sum_range(self.draws, count_main, *SUM_PERCENTILES)
        self.gap_distribution, (self.max_main_gap_threshold, self.max_lucky_gap_threshold) = \
            self.determine_gap_thresholds(self.draws, count_main, count_lucky, GAP_PERCENTILE)
        self.max_multiples_allowed = self.generate_max_multiples_allowed(self.draws, MULTIPLE_BASES)

    # ---- Position frequency ----
    def get_top_numbers_historical(self, draws: Sequence[Draw]) -> List[str]:
        # ties go to the value seen first, like Counter.most_common
        return [Counter(d[pos] for d in draws).most_common(1)[0][0] for pos in range(len(draws[0]))]

    def get_max_pattern_probabilities(self, draws: Sequence[Draw]) -> Dict[str, float]:
        total = len(draws)
        probs = []
        for pos, num in enumerate(self.get_top_numbers_historical(draws)):
            count = self.position_counters[pos].get(num, 0)
            probs.append(count / total * 100 if total else 0.0)
        patterns = generate_pattern_probabilities(probs)
        if self.debug:
            logger.info("Max Pattern Probabilities Possible")
            for k, v in patterns.items():
                logger.info("%-30s: %.2f%%", k, v)
        return patterns

    # ---- Odd / even ----
    def analyze_odd_even_distribution(self, draws: Sequence[Draw],
                                      main_only: bool = True) -> Tuple[List[OddEvenRow], OddRange]:
        """Odd-count table plus the widest odd-count range ever observed."""
        width = self.count_main if main_only else len(draws[0])
        dist = Counter(count_odd(_ints(d[:width])) for d in draws)
        total = len(draws)
        rows = []
        for odd in range(width + 1):
            count = dist.get(odd, 0)
            pct = count / total * 100 if total else 0.0
            rows.append(OddEvenRow(f"{odd} odd / {width - odd} even", odd, count, pct))
        if self.debug:
            logger.info("Total draws analyzed: %d", total)
            for r in rows:
                logger.info("  %s : %d draws (%.2f%%)", r.label, r.count, r.pct)
        seen = sorted(k for k, v in dist.items() if v > 0)
        odd_range = (seen[0], seen[-1]) if seen else (0, 0)
        return rows, odd_range

    # ---- Sums ----
    def analyze_sum_range(self, draws: Sequence[Draw], count_main: int = COUNT_MAIN,
                          lower_percentile: float = 15, upper_percentile: float = 85) -> Tuple[int, int]:
        sums = [sum(_ints(d[:count_main])) for d in draws]
        low = percentile(sums, lower_percentile)
        high = percentile(sums, upper_percentile)
        if self.debug:
            s = pd.Series(sums)
            logger.info("Sum range: min=%d, max=%d", s.min(), s.max())
            logger.info("Mean sum: %.2f, Median sum: %s", s.mean(), s.median())
            logger.info("Typical sum range (P%s-P%s): %s - %s", lower_percentile, upper_percentile, low, high)
        return math.floor(low), math.floor(high)

    # ---- Gaps ----
    @staticmethod
    def analyze_gap_distribution(draws: Sequence[Draw], count_main: int = COUNT_MAIN,
                                 count_lucky: int = COUNT_LUCKY) -> GapDistribution:
        main = [Counter() for _ in range(max(count_main - 1, 0))]
        lucky = [Counter() for _ in range(max(count_lucky - 1, 0))]
        for d in draws:
            main_nums = sorted(_ints(d[:count_main]))
            lucky_nums = sorted(_ints(d[count_main:count_main + count_lucky]))
            for i, (a, b) in enumerate(zip(main_nums, main_nums[1:])):
                main[i][b - a] += 1
            for i, (a, b) in enumerate(zip(lucky_nums, lucky_nums[1:])):
                lucky[i][b - a] += 1
        return GapDistribution([dict(c) for c in main], [dict(c) for c in lucky])

    def determine_gap_thresholds(self, draws: Sequence[Draw], count_main: int = COUNT_MAIN,
                                 count_lucky: int = COUNT_LUCKY,
                                 percentile_value: float = GAP_PERCENTILE) -> Tuple[GapDistribution, Tuple[int, int]]:
        gap_data = self.analyze_gap_distribution(draws, count_main, count_lucky)
        main_gaps = expand_gaps(gap_data.main)
        lucky_gaps = expand_gaps(gap_data.lucky)
        max_main = math.floor(percentile(main_gaps, percentile_value)) if main_gaps else DEFAULT_MAIN_GAP
        max_lucky = math.floor(percentile(lucky_gaps, percentile_value)) if lucky_gaps else DEFAULT_LUCKY_GAP
        if self.debug:
            logger.info("Gap thresholds (P%s): main=%d, lucky=%d", percentile_value, max_main, max_lucky)
        return gap_data, (max_main, max_lucky)

    # ---- Multiples ----
    def analyze_multiples_distribution(self, draws: Sequence[Draw], base: int = 3,
                                       main_only: bool = True) -> MultiplesDistribution:
        width = self.count_main if main_only else len(draws[0])
        counts = []
        examples: List[Draw] = []
        for d in draws:
            c = count_multiples(_ints(d[:width]), base)
            counts.append(c)
            if c >= 3:
                examples.append(d)
        dist = dict(sorted(Counter(counts).items()))
        max_allowed = math.floor(percentile(counts, MULTIPLES_PERCENTILE))
        if self.debug:
            logger.info("Analyzing multiples of %d in %s:", base, "main numbers only" if main_only else "all numbers")
            for c, n in dist.items():
                logger.info("  Draws with exactly %d multiples of %d: %d (%.2f%%)", c, base, n, n / len(draws) * 100)
            logger.info("Suggested max multiples allowed for base %d (P%d): %d", base, MULTIPLES_PERCENTILE, max_allowed)
        return MultiplesDistribution(dist, examples, max_allowed)

    def generate_max_multiples_allowed(self, draws: Sequence[Draw],
                                       bases: Sequence[int] = MULTIPLE_BASES,
                                       main_only: bool = True) -> Dict[int, int]:
        out = {b: self.analyze_multiples_distribution(draws, b, main_only).max_allowed for b in bases}
        if self.debug:
            logger.info("Final max_multiples_allowed: %s", out)
        return out

    # ---- Read-only views ----
    def snapshot(self) -> Dict:
        return {
            "odd_range": tuple(self.odd_range),
            "sum_range": (self.sum_min, self.sum_max),
            "max_main_gap_threshold": self.max_main_gap_threshold,
            "max_lucky_gap_threshold": self.max_lucky_gap_threshold,
            "max_multiples_allowed": dict(self.max_multiples_allowed),
            "position_counters": [dict(c) for c in self.position_counters],
            "max_pattern_probs": dict(self.max_pattern_probs),
        }

    def odd_even_frame(self) -> pd.DataFrame:
        return pd.DataFrame([r.__dict__ for r in self.distribution])

    def gap_histogram_frame(self, block: str = "main") -> pd.DataFrame:
        counters = self.gap_distribution.main if block == "main" else self.gap_distribution.lucky
        rows = [{"pair": i, "gap": gap, "count": n}
                for i, c in enumerate(counters) for gap, n in sorted(c.items())]
        return pd.DataFrame(rows, columns=["pair", "gap", "count"])

    def to_heatmap_cells(self, min_num: int = 1, max_num: int = 50) -> List[HeatCell]:
        cells = []
        for pos, counter in enumerate(self.position_counters):
            counts = [counter.get(f"{n:02d}", 0) for n in range(min_num, max_num + 1)]
            total = sum(counts)
            for n, c in zip(range(min_num, max_num + 1), counts):
                cells.append(HeatCell(pos, n, c, c / total if total else 0.0))
        return cells

    def heatmap_frame(self, min_num: int = 1, max_num: int = 50) -> pd.DataFrame:
        df = pd.DataFrame([c.__dict__ for c in self.to_heatmap_cells(min_num, max_num)])
        return df.pivot(index="pos", columns="num", values="pct")

    def to_generation_config(self, **overrides) -> GenerationConfig:
        return GenerationConfig.from_thresholds(self, **overrides)
