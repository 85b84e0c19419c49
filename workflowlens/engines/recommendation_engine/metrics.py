"""Metric aggregation: classified commits -> weekly MetricWindows and trends.

All functions are pure. Ratios whose denominator is zero are defined as 0.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from workflowlens.engines.recommendation_engine.models import (
    ALL_CATEGORIES,
    ClassifiedCommit,
    MetricTrend,
    MetricWindow,
)

STABLE_THRESHOLD = 0.10


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def aggregate_metrics(
    commits: Iterable[ClassifiedCommit],
    window_start: datetime,
    window_end: datetime,
) -> MetricWindow:
    """Reduce *commits* into one :class:`MetricWindow` in a single pass."""
    category_distribution = {cat: 0 for cat in ALL_CATEGORIES}
    ai_commits = human_commits = bot_commits = 0
    files_changed = test_files_touched = 0
    ai_tools: set[str] = set()

    for commit in commits:
        if commit.author_type == "ai":
            ai_commits += 1
            if commit.ai_tool:
                ai_tools.add(commit.ai_tool)
        elif commit.author_type == "human":
            human_commits += 1
        else:
            bot_commits += 1

        category_distribution[commit.category] = category_distribution.get(commit.category, 0) + 1
        files_changed += commit.files_changed
        test_files_touched += commit.test_files_touched

    total = ai_commits + human_commits + bot_commits

    return MetricWindow(
        window_start=window_start,
        window_end=window_end,
        total_commits=total,
        ai_commits=ai_commits,
        human_commits=human_commits,
        bot_commits=bot_commits,
        category_distribution=category_distribution,
        total_files_changed=files_changed,
        total_test_files_touched=test_files_touched,
        ai_ratio=_ratio(ai_commits, total),
        test_ratio=_ratio(test_files_touched, files_changed),
        avg_files_per_commit=_ratio(files_changed, total),
        unique_ai_tools=tuple(sorted(ai_tools)),
    )


def build_metric_windows(
    commits: Iterable[ClassifiedCommit],
    window_days: int = 7,
) -> list[MetricWindow]:
    """Partition *commits* into contiguous ``window_days`` windows, oldest first.

    The first window starts at the earliest commit's exact timestamp. Windows
    that contain no commits are skipped, so the result is not evenly spaced
    across gaps in activity.

    Raises ``ValueError`` if *window_days* is less than 1.
    """
    if window_days < 1:
        raise ValueError(f"window_days must be at least 1, got {window_days}")
    ordered = sorted(commits, key=lambda c: c.timestamp)
    if not ordered:
        return []

    span = timedelta(days=window_days)
    latest = ordered[-1].timestamp
    windows: list[MetricWindow] = []

    idx = 0
    window_start = ordered[0].timestamp
    while window_start <= latest:
        window_end = window_start + span
        chunk: list[ClassifiedCommit] = []
        while idx < len(ordered) and ordered[idx].timestamp < window_end:
            chunk.append(ordered[idx])
            idx += 1
        if chunk:
            windows.append(aggregate_metrics(chunk, window_start, window_end))
        window_start = window_end

    return windows


def calculate_trend(
    current: float,
    previous: float,
    stable_threshold: float = STABLE_THRESHOLD,
) -> MetricTrend:
    """Classify the move from *previous* to *current*.

    Changes within ``stable_threshold`` (10 points by default) are reported
    as ``stable``.
    """
    if current == 0 and previous == 0:
        return MetricTrend(current, previous, "stable", 0.0)

    if previous == 0:
        if current > 0:
            return MetricTrend(current, previous, "up", 100.0)
        return MetricTrend(current, previous, "stable", 0.0)

    change_percent = (current - previous) / previous * 100
    direction = "stable"
    if abs(change_percent) > stable_threshold * 100:
        direction = "up" if change_percent > 0 else "down"

    return MetricTrend(current, previous, direction, change_percent)


def latest_trends(
    windows: Sequence[MetricWindow],
    stable_threshold: float = STABLE_THRESHOLD,
) -> dict[str, MetricTrend]:
    """Trends of the headline metrics between the two most recent windows."""
    if not windows:
        return {}
    current = windows[-1]
    previous = windows[-2] if len(windows) > 1 else None
    fields = ("total_commits", "ai_ratio", "test_ratio", "avg_files_per_commit")
    return {
        name: calculate_trend(
            getattr(current, name),
            getattr(previous, name) if previous is not None else 0,
            stable_threshold,
        )
        for name in fields
    }
