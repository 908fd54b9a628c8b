from __future__ import annotations

import pytest

from sire.aggregate import aggregate
from sire.dsa import first_index_ranks, merge_sort
from sire.models import AggregatedRow, MetricSpec
from sire.scoring import descending_ranks, filter_min_count, score, top_worst

pytestmark = pytest.mark.unit


def _row(category: str, count: int = 10, **means: float) -> AggregatedRow:
    totals = {k: v * count for k, v in means.items()}
    return AggregatedRow(category=category, count=count, totals=totals, means=dict(means))


# ---------------- descending_ranks ----------------

def test_largest_value_gets_rank_one() -> None:
    assert descending_ranks([3.0, 10.0, 8.0]) == [3, 1, 2]


def test_ties_share_first_position() -> None:
    # sorted: 10, 8, 8, 3 -> ranks 1, 2, 2, 4 (no averaging, no dense ranks)
    assert descending_ranks([8.0, 3.0, 10.0, 8.0]) == [2, 4, 1, 2]


def test_all_equal_values_rank_one() -> None:
    assert descending_ranks([5.0, 5.0, 5.0]) == [1, 1, 1]


def test_ranks_stay_in_bounds() -> None:
    values = [4.0, 4.0, 1.0, 9.0, 0.0, 9.0, 2.5]
    ranks = descending_ranks(values)
    assert all(1 <= r <= len(values) for r in ranks)
    assert ranks[values.index(max(values))] == 1


def test_nan_ranks_last() -> None:
    assert descending_ranks([float("nan"), 1.0, float("nan"), 2.0]) == [3, 2, 3, 1]


def test_empty_values() -> None:
    assert descending_ranks([]) == []


# ---------------- score ----------------

def test_example_ranking_by_total_and_mean(spec_records) -> None:
    rows = aggregate(spec_records, ["x"])
    ranked = {r.category: r for r in score(rows, [MetricSpec("x", "total"), MetricSpec("x", "mean")])}
    assert ranked["B"].scores == {"x_total_score": 1, "x_mean_score": 1}
    assert ranked["A"].scores == {"x_total_score": 2, "x_mean_score": 2}
    assert ranked["B"].composite_score == 2
    assert ranked["A"].composite_score == 4


def test_composite_is_sum_of_metric_ranks() -> None:
    rows = [_row("a", f=1.0, i=9.0), _row("b", f=5.0, i=1.0), _row("c", f=3.0, i=5.0)]
    ranked = score(rows, [("f", "mean"), ("i", "mean")])
    assert [r.category for r in ranked] == ["a", "b", "c"]
    assert [r.scores["f_mean_score"] for r in ranked] == [3, 1, 2]
    assert [r.scores["i_mean_score"] for r in ranked] == [1, 3, 2]
    for r in ranked:
        assert r.composite_score == sum(r.scores.values())


def test_single_row_scores_number_of_metrics() -> None:
    ranked = score([_row("only", f=0.0, i=0.0)], ["f", "i"])
    assert ranked[0].composite_score == 2
    assert set(ranked[0].scores.values()) == {1}


def test_zero_rows() -> None:
    assert score([], ["f"]) == []


def test_score_needs_metrics() -> None:
    with pytest.raises(ValueError):
        score([_row("a", f=1.0)], [])


def test_score_rejects_duplicate_metrics() -> None:
    with pytest.raises(ValueError):
        score([_row("a", f=1.0)], ["f", ("f", "mean")])


def test_count_statistic() -> None:
    rows = [_row("a", count=3, f=1.0), _row("b", count=7, f=1.0)]
    ranked = score(rows, [("f", "count")])
    assert [r.scores["f_count_score"] for r in ranked] == [2, 1]


def test_unknown_statistic_is_rejected() -> None:
    with pytest.raises(ValueError):
        MetricSpec("f", "median")


def test_scoring_is_idempotent(storm_events) -> None:
    metrics = [MetricSpec("fatalities"), MetricSpec("injuries")]

    def run():
        return score(filter_min_count(aggregate(storm_events, metrics), 10), metrics)

    assert run() == run()


# ---------------- filter_min_count ----------------

def test_filter_drops_rare_categories_even_if_worst() -> None:
    rows = [_row("rare", count=9, f=1000.0), _row("common", count=10, f=1.0)]
    kept = filter_min_count(rows, 10)
    assert [r.category for r in kept] == ["common"]


def test_filter_default_threshold_is_ten() -> None:
    rows = [_row("a", count=9, f=1.0), _row("b", count=10, f=1.0), _row("c", count=11, f=1.0)]
    assert [r.category for r in filter_min_count(rows)] == ["b", "c"]


def test_filter_can_return_nothing() -> None:
    assert filter_min_count([_row("a", count=1, f=1.0)], 5) == []


# ---------------- top_worst ----------------

def test_top_worst_orders_by_composite_ascending() -> None:
    rows = [_row("a", f=1.0, i=1.0), _row("b", f=9.0, i=9.0), _row("c", f=5.0, i=5.0)]
    top = top_worst(score(rows, ["f", "i"]), 2)
    assert [r.category for r in top] == ["b", "c"]


def test_top_worst_first_has_minimum_composite() -> None:
    rows = [_row(c, f=float(i % 4), i=float(i % 3)) for i, c in enumerate("abcdefg")]
    ranked = score(rows, ["f", "i"])
    top = top_worst(ranked, 3)
    assert top[0].composite_score == min(r.composite_score for r in ranked)


def test_top_worst_stable_tie_break_keeps_incoming_order() -> None:
    # z and a tie on composite (1 + 2 == 2 + 1)
    rows = [_row("z", f=9.0, i=5.0), _row("a", f=5.0, i=9.0), _row("m", f=1.0, i=1.0)]
    ranked = score(rows, ["f", "i"])
    assert [r.category for r in top_worst(ranked, 3)] == ["z", "a", "m"]
    assert [r.category for r in top_worst(ranked, 3, tie_break="category")] == ["a", "z", "m"]


def test_top_worst_truncation_and_bounds() -> None:
    ranked = score([_row("a", f=1.0), _row("b", f=2.0)], ["f"])
    assert top_worst(ranked, 0) == []
    assert len(top_worst(ranked, 10)) == 2
    with pytest.raises(ValueError):
        top_worst(ranked, -1)
    with pytest.raises(ValueError):
        top_worst(ranked, 1, tie_break="random")


# ---------------- dsa ----------------

def test_merge_sort_is_stable_in_both_directions() -> None:
    items = [("x", 1), ("y", 2), ("z", 1), ("w", 2)]
    assert merge_sort(items, key=lambda t: t[1]) == [("x", 1), ("z", 1), ("y", 2), ("w", 2)]
    assert merge_sort(items, key=lambda t: t[1], reverse=True) == [("y", 2), ("w", 2), ("x", 1), ("z", 1)]


def test_first_index_ranks() -> None:
    assert first_index_ranks([9, 7, 7, 2]) == {9: 1, 7: 2, 2: 4}


def test_ranked_rows_are_hashable() -> None:
    ranked = score([_row("a", f=1.0), _row("b", f=2.0)], ["f"])
    lookup = {r: r.composite_score for r in ranked}
    assert lookup[ranked[1]] == 1
