"""Tests for metric aggregation, windowing, and trends."""

from datetime import datetime, timedelta, timezone

import pytest

from workflowlens.engines.recommendation_engine.metrics import (
    aggregate_metrics,
    build_metric_windows,
    calculate_trend,
    latest_trends,
)
from workflowlens.engines.recommendation_engine.models import ClassifiedCommit

T0 = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def _commit(
    sha: str,
    days: float = 0,
    *,
    author: str = "human",
    category: str = "feat",
    files: int = 1,
    tests: int = 0,
    tool: str | None = None,
) -> ClassifiedCommit:
    return ClassifiedCommit(
        sha=sha,
        timestamp=T0 + timedelta(days=days),
        author_type=author,
        category=category,
        files_changed=files,
        test_files_touched=tests,
        ai_tool=tool,
    )


# ── aggregate_metrics ────────────────────────────────────────────────────


class TestAggregateMetrics:
    def test_counts_add_up(self):
        commits = [
            _commit("a", author="ai", category="feat", tool="claude"),
            _commit("b", author="ai", category="fix", tool="copilot"),
            _commit("c", author="human", category="test"),
            _commit("d", author="bot", category="chore"),
        ]
        w = aggregate_metrics(commits, T0, T0 + timedelta(days=7))
        assert w.total_commits == 4
        assert w.ai_commits + w.human_commits + w.bot_commits == w.total_commits
        assert sum(w.category_distribution.values()) == w.total_commits
        assert w.ai_commits == 2
        assert w.bot_commits == 1
        assert w.ai_ratio == pytest.approx(0.5)

    def test_distribution_has_every_category(self):
        w = aggregate_metrics([_commit("a", category="docs")], T0, T0)
        assert set(w.category_distribution) == {
            "feat", "fix", "refactor", "docs", "test", "chore", "ci", "perf", "other",
        }
        assert w.category_distribution["docs"] == 1
        assert w.other_commits == 1

    def test_zero_files_gives_zero_ratios(self):
        w = aggregate_metrics([_commit("a", files=0), _commit("b", files=0)], T0, T0)
        assert w.test_ratio == 0.0
        assert w.avg_files_per_commit == 0.0

    def test_empty_input(self):
        w = aggregate_metrics([], T0, T0)
        assert w.total_commits == 0
        assert w.ai_ratio == 0.0
        assert w.test_ratio == 0.0
        assert w.avg_files_per_commit == 0.0

    def test_file_ratios(self):
        w = aggregate_metrics(
            [_commit("a", files=6, tests=2), _commit("b", files=4, tests=1)], T0, T0
        )
        assert w.total_files_changed == 10
        assert w.total_test_files_touched == 3
        assert w.test_ratio == pytest.approx(0.3)
        assert w.avg_files_per_commit == pytest.approx(5.0)

    def test_unique_ai_tools_sorted_and_ai_only(self):
        commits = [
            _commit("a", author="ai", tool="copilot"),
            _commit("b", author="ai", tool="claude"),
            _commit("c", author="ai", tool="claude"),
            _commit("d", author="ai"),
        ]
        w = aggregate_metrics(commits, T0, T0)
        assert w.unique_ai_tools == ("claude", "copilot")

    def test_cleanup_and_feat_ratio(self):
        commits = [
            _commit("a", category="feat"),
            _commit("b", category="fix"),
            _commit("c", category="refactor"),
            _commit("d", category="chore"),
        ]
        w = aggregate_metrics(commits, T0, T0)
        assert w.feat_ratio == pytest.approx(0.25)
        assert w.cleanup_ratio == pytest.approx(0.75)


# ── build_metric_windows ─────────────────────────────────────────────────


class TestBuildMetricWindows:
    def test_empty(self):
        assert build_metric_windows([]) == []

    def test_single_window_anchored_at_first_commit(self):
        windows = build_metric_windows([_commit("a", 0), _commit("b", 3)])
        assert len(windows) == 1
        assert windows[0].window_start == T0
        assert windows[0].window_end == T0 + timedelta(days=7)
        assert windows[0].total_commits == 2

    def test_end_boundary_is_exclusive(self):
        windows = build_metric_windows([_commit("a", 0), _commit("b", 7)])
        assert [w.total_commits for w in windows] == [1, 1]
        assert windows[1].window_start == T0 + timedelta(days=7)

    def test_empty_windows_are_skipped(self):
        windows = build_metric_windows([_commit("a", 0), _commit("b", 20)])
        assert len(windows) == 2
        # day 20 falls in the third slot [14, 21)
        assert windows[1].window_start == T0 + timedelta(days=14)

    def test_unsorted_input(self):
        windows = build_metric_windows([_commit("late", 9), _commit("early", 1)])
        assert windows[0].window_start == T0 + timedelta(days=1)
        assert [w.total_commits for w in windows] == [1, 1]

    def test_every_commit_counted_once(self):
        commits = [_commit(f"c{i}", i * 1.5) for i in range(20)]
        windows = build_metric_windows(commits)
        assert sum(w.total_commits for w in windows) == 20
        starts = [w.window_start for w in windows]
        assert starts == sorted(starts)

    @pytest.mark.parametrize("window_days", [0, -1])
    def test_non_positive_window_days_rejected(self, window_days):
        with pytest.raises(ValueError, match="window_days"):
            build_metric_windows([_commit("a", 0)], window_days=window_days)

    def test_custom_window_days(self):
        windows = build_metric_windows([_commit("a", 0), _commit("b", 3)], window_days=2)
        assert len(windows) == 2


# ── calculate_trend ──────────────────────────────────────────────────────


class TestCalculateTrend:
    def test_both_zero(self):
        t = calculate_trend(0, 0)
        assert t.direction == "stable"
        assert t.change_percent == 0

    def test_from_zero_up(self):
        t = calculate_trend(5, 0)
        assert t.direction == "up"
        assert t.change_percent == 100

    def test_from_zero_negative_current_is_stable(self):
        t = calculate_trend(-1, 0)
        assert t.direction == "stable"
        assert t.change_percent == 0

    def test_small_change_is_stable(self):
        t = calculate_trend(1.05, 1.0)
        assert t.direction == "stable"
        assert t.change_percent == pytest.approx(5.0)

    def test_up(self):
        t = calculate_trend(1.2, 1.0)
        assert t.direction == "up"
        assert t.change_percent == pytest.approx(20.0)

    def test_down(self):
        t = calculate_trend(0.5, 1.0)
        assert t.direction == "down"
        assert t.change_percent == pytest.approx(-50.0)

    def test_custom_threshold(self):
        assert calculate_trend(1.2, 1.0, stable_threshold=0.25).direction == "stable"


class TestLatestTrends:
    def test_no_windows(self):
        assert latest_trends([]) == {}

    def test_single_window_compares_against_zero(self):
        windows = build_metric_windows([_commit("a", 0, files=2)])
        trends = latest_trends(windows)
        assert trends["total_commits"].direction == "up"
        assert trends["test_ratio"].direction == "stable"

    def test_two_windows(self):
        windows = build_metric_windows(
            [_commit("a", 0), _commit("b", 8), _commit("c", 9)]
        )
        trends = latest_trends(windows)
        assert trends["total_commits"].current == 2
        assert trends["total_commits"].previous == 1
        assert trends["total_commits"].direction == "up"
