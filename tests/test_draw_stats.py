import numpy as np
import pytest

from draw_stats import (ConfigurationInfeasible, combination_key, count_clusters_main_numbers,
                        count_max_consecutive_run, count_multiples, count_odd, generate_unique_numbers,
                        is_sum_in_range, max_gap_exceeds_threshold, percentile, position_counters)


def test_percentile_interpolates_linearly():
    assert percentile([1, 2, 3, 4], 50) == 2.5
    assert percentile([10, 20], 15) == pytest.approx(11.5)
    assert percentile([4, 1, 3, 2], 100 / 3) == pytest.approx(2.0)


def test_percentile_bounds_and_monotonic():
    xs = [7, 3, 19, 3, 42, 11, 8]
    assert percentile(xs, 0) == min(xs)
    assert percentile(xs, 100) == max(xs)
    values = [percentile(xs, p) for p in range(101)]
    assert all(a <= b for a, b in zip(values, values[1:]))


def test_percentile_matches_numpy_linear():
    xs = [13, 2, 40, 22, 22, 9, 31, 5]
    for p in (5, 15, 50, 85, 95):
        assert percentile(xs, p) == pytest.approx(float(np.percentile(xs, p)))


def test_percentile_empty_and_constant():
    assert percentile([], 95) == 0
    assert percentile([2] * 50, 95) == 2


def test_generate_unique_numbers_sorted_and_distinct():
    rng = np.random.default_rng(3)
    for _ in range(50):
        nums = generate_unique_numbers(5, 1, 50, set(), rng)
        assert nums == sorted(set(nums))
        assert len(nums) == 5
        assert all(1 <= n <= 50 for n in nums)


def test_generate_unique_numbers_avoids_tried():
    rng = np.random.default_rng(0)
    tried = {"1,2", "1,3"}
    for _ in range(20):
        assert generate_unique_numbers(2, 1, 3, tried, rng) == [2, 3]


def test_generate_unique_numbers_exhausted():
    with pytest.raises(ConfigurationInfeasible):
        generate_unique_numbers(2, 1, 2, {"1,2"}, np.random.default_rng(0), max_attempts=10)
    with pytest.raises(ConfigurationInfeasible):
        generate_unique_numbers(3, 1, 2, set(), np.random.default_rng(0))


def test_consecutive_run():
    assert count_max_consecutive_run([]) == 0
    assert count_max_consecutive_run([4]) == 1
    assert count_max_consecutive_run([1, 3, 5, 7, 9]) == 1
    assert count_max_consecutive_run([1, 2, 10, 11, 12]) == 3
    assert count_max_consecutive_run([5, 6, 7, 8, 40]) == 4


def test_clusters():
    groups = count_clusters_main_numbers([1, 10, 11, 45, 50])
    assert groups == {0: 2, 1: 1, 2: 0, 3: 0, 4: 2}
    assert count_clusters_main_numbers([3, 4], max_value=11, group_size=10) == {0: 2, 1: 0}


def test_simple_counters():
    assert count_odd([1, 2, 3, 4, 5]) == 3
    assert count_multiples([3, 6, 10, 12, 49], 3) == 3
    assert max_gap_exceeds_threshold([1, 5, 30], 19)
    assert not max_gap_exceeds_threshold([1, 20, 39], 19)
    assert is_sum_in_range([10, 20], 30, 30)
    assert not is_sum_in_range([10, 21], 0, 30)
    assert combination_key([1, 12, 3]) == "1,12,3"


def test_position_counters():
    counters = position_counters([("01", "02"), ("01", "03")])
    assert counters == [{"01": 2}, {"02": 1, "03": 1}]
