#!/usr/bin/env python3
# Shared numeric helpers for the threshold analyzer and the generator.
from __future__ import annotations
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Set
import numpy as np

DEFAULT_UNIQUE_ATTEMPTS = 1000


class EmptyOrMalformedInput(ValueError):
    """Historical draws are empty or a draw does not have the expected shape."""


class ConfigurationInfeasible(RuntimeError):
    """A bounded unique-number draw ran out of never-tried combinations."""


def percentile(values: Iterable[float], p: float) -> float:
    """Linear-interpolation percentile (numpy's default "linear" method).

    rank = p/100 * (n-1) over the sorted sample; an integral rank returns the
    sample itself, otherwise interpolate between the bracketing order stats.
    """
    arr = np.sort(np.asarray(list(values), dtype=float))
    if arr.size == 0:
        return 0.0
    rank = (p / 100.0) * (arr.size - 1)
    lower = int(np.floor(rank))
    upper = int(np.ceil(rank))
    if lower == upper:
        return float(arr[lower])
    weight = rank - lower
    return float(arr[lower] + (arr[upper] - arr[lower]) * weight)


def combination_key(nums: Sequence) -> str:
    return ",".join(str(n) for n in nums)


def generate_random_number(min_value: int, max_value: int, rng: np.random.Generator) -> int:
    return int(rng.integers(min_value, max_value + 1))


def generate_unique_numbers(count: int, min_value: int, max_value: int,
                            existing: Optional[Set[str]] = None,
                            rng: Optional[np.random.Generator] = None,
                            max_attempts: int = DEFAULT_UNIQUE_ATTEMPTS) -> List[int]:
    """Draw `count` distinct ints in [min_value, max_value], sorted ascending.

    The combination's key must not already be in `existing`.
    """
    if count > max_value - min_value + 1:
        raise ConfigurationInfeasible(
            f"Cannot draw {count} unique numbers from {min_value}..{max_value}")
    rng = rng if rng is not None else np.random.default_rng()
    for _ in range(max_attempts):
        picked: Set[int] = set()
        while len(picked) < count:
            picked.add(generate_random_number(min_value, max_value, rng))
        numbers = sorted(picked)
        if existing is None or combination_key(numbers) not in existing:
            return numbers
    raise ConfigurationInfeasible("Could not generate a unique number set after max attempts")


def count_odd(nums: Iterable[int]) -> int:
    return sum(1 for n in nums if n % 2 == 1)


def count_multiples(nums: Iterable[int], base: int) -> int:
    return sum(1 for n in nums if n % base == 0)


def count_max_consecutive_run(nums: Sequence[int]) -> int:
    """Length of the longest run of strictly consecutive ints in a sorted list."""
    if not nums:
        return 0
    max_run = cur = 1
    for prev, n in zip(nums, nums[1:]):
        if n == prev + 1:
            cur += 1
            max_run = max(max_run, cur)
        else:
            cur = 1
    return max_run


def count_clusters_main_numbers(nums: Iterable[int], max_value: int = 50,
                                group_size: int = 10) -> Dict[int, int]:
    """Bucket counts: with max_value=50, group_size=10 -> 0: 1-10, ..., 4: 41-50."""
    n_groups = (max_value + group_size - 1) // group_size
    groups = {i: 0 for i in range(n_groups)}
    for n in nums:
        idx = (n - 1) // group_size
        if idx in groups:
            groups[idx] += 1
    return groups


def max_gap_exceeds_threshold(nums: Sequence[int], max_gap_allowed: int = 15) -> bool:
    return any(b - a > max_gap_allowed for a, b in zip(nums, nums[1:]))


def is_sum_in_range(nums: Iterable[int], min_sum: int, max_sum: int) -> bool:
    return min_sum <= sum(nums) <= max_sum


def position_counters(draws: Sequence[Sequence[str]]) -> List[Dict[str, int]]:
    """Per-position value -> occurrence count tables."""
    n_pos = len(draws[0]) if draws else 0
    return [dict(Counter(d[pos] for d in draws)) for pos in range(n_pos)]
