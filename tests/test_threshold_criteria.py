import pytest

from draw_stats import EmptyOrMalformedInput, count_odd
from number_generator import GenerationConfig
from threshold_criteria import (DEFAULT_LUCKY_GAP, DEFAULT_MAIN_GAP, ThresholdCriteria, expand_gaps)


def test_single_draw_is_degenerate_but_valid():
    t = ThresholdCriteria([["01", "02", "03", "04", "05", "01", "02"]])
    assert t.odd_range == (3, 3)
    assert (t.sum_min, t.sum_max) == (15, 15)
    assert t.max_main_gap_threshold == 1
    assert t.max_lucky_gap_threshold == 1
    assert t.max_multiples_allowed[2] == 2
    assert t.max_multiples_allowed[7] == 0


def test_constant_even_count_gives_constant_ceiling():
    draws = [
        ("01", "02", "03", "04", "05", "01", "02"),
        ("11", "12", "13", "14", "15", "03", "07"),
        ("07", "10", "21", "33", "40", "02", "11"),
        ("09", "17", "26", "38", "49", "05", "06"),
    ]
    t = ThresholdCriteria(draws)
    assert t.max_multiples_allowed[2] == 2
    assert t.odd_range == (3, 3)


def test_ranges_are_ordered_and_tight(synthetic_draws):
    t = ThresholdCriteria(synthetic_draws)
    assert t.sum_min <= t.sum_max
    assert 15 <= t.sum_min and t.sum_max <= 240
    lo, hi = t.odd_range
    assert 0 <= lo <= hi <= 5
    odd_counts = {count_odd(int(n) for n in d[:5]) for d in synthetic_draws}
    assert lo in odd_counts and hi in odd_counts
    assert lo == min(odd_counts) and hi == max(odd_counts)
    assert set(t.max_multiples_allowed) == set(range(2, 11))


def test_analysis_is_idempotent(synthetic_draws):
    a = ThresholdCriteria(synthetic_draws).snapshot()
    b = ThresholdCriteria(list(synthetic_draws)).snapshot()
    assert a == b


def test_odd_even_table(synthetic_draws):
    t = ThresholdCriteria(synthetic_draws)
    frame = t.odd_even_frame()
    assert list(frame["odd_count"]) == [0, 1, 2, 3, 4, 5]
    assert frame["count"].sum() == len(synthetic_draws)
    assert frame["pct"].sum() == pytest.approx(100.0)
    assert frame.loc[2, "label"] == "2 odd / 3 even"


def test_gap_histograms_pool_per_pair():
    draws = [("05", "01", "10", "20", "30", "02", "09"),
             ("01", "02", "03", "04", "05", "04", "01")]
    t = ThresholdCriteria(draws)
    # main block is sorted before gaps are taken
    assert t.gap_distribution.main[0] == {4: 1, 1: 1}
    assert t.gap_distribution.lucky == [{7: 1, 3: 1}]
    assert sorted(expand_gaps(t.gap_distribution.main)) == [1, 1, 1, 1, 4, 5, 10, 10]
    assert t.max_main_gap_threshold == 10
    assert t.max_lucky_gap_threshold == 6
    hist = t.gap_histogram_frame("lucky")
    assert list(hist.columns) == ["pair", "gap", "count"]
    assert hist["count"].sum() == 2


def test_gap_fallbacks_for_single_slot_blocks():
    draws = [("01", "09", "17", "25", "33", "04"), ("02", "10", "18", "26", "34", "06")]
    t = ThresholdCriteria(draws, count_main=5, count_lucky=1)
    assert t.gap_distribution.lucky == []
    assert t.max_lucky_gap_threshold == DEFAULT_LUCKY_GAP
    t = ThresholdCriteria([("07", "03")], count_main=1, count_lucky=1)
    assert t.max_main_gap_threshold == DEFAULT_MAIN_GAP


def test_multiples_distribution_details():
    draws = [("03", "06", "09", "20", "22", "01", "02"),
             ("01", "02", "04", "05", "07", "01", "02")]
    t = ThresholdCriteria(draws)
    res = t.analyze_multiples_distribution(draws, 3)
    assert res.distribution == {0: 1, 3: 1}
    assert res.example_draws == [draws[0]]
    assert res.max_allowed == 2


def test_position_frequency_and_heatmap(synthetic_draws):
    t = ThresholdCriteria(synthetic_draws)
    assert len(t.position_counters) == 7
    assert all(sum(c.values()) == len(synthetic_draws) for c in t.position_counters)
    cells = t.to_heatmap_cells(1, 50)
    assert len(cells) == 7 * 50
    for pos in range(7):
        assert sum(c.pct for c in cells if c.pos == pos) == pytest.approx(1.0)
    frame = t.heatmap_frame(1, 11)
    assert frame.shape == (7, 11)


def test_max_pattern_probabilities():
    draws = [("01", "02", "03", "04", "05", "01", "02"),
             ("01", "07", "09", "11", "13", "03", "04")]
    t = ThresholdCriteria(draws)
    # first position 100%, every other position 50%
    assert t.max_pattern_probs["5_main+0_lucky"] == pytest.approx(60.0)
    assert t.max_pattern_probs["2_main+2_lucky"] == pytest.approx(62.5)
    assert len(t.max_pattern_probs) == 12


def test_generation_config_overlay(synthetic_draws):
    t = ThresholdCriteria(synthetic_draws)
    cfg = t.to_generation_config(min_score=0, cluster_max=2)
    assert isinstance(cfg, GenerationConfig)
    assert (cfg.sum_min, cfg.sum_max) == (t.sum_min, t.sum_max)
    assert cfg.odd_range == t.odd_range
    assert cfg.max_main_gap_threshold == t.max_main_gap_threshold
    assert cfg.cluster_max == 2 and cfg.min_score == 0
    before = dict(t.max_multiples_allowed)
    cfg.max_multiples_allowed[2] = 99
    assert t.max_multiples_allowed == before


@pytest.mark.parametrize("draws", [[], [("01", "02", "03")], [("01", "02", "03", "04", "05", "xx", "02")]])
def test_rejects_empty_or_malformed(draws):
    with pytest.raises(EmptyOrMalformedInput):
        ThresholdCriteria(draws)
