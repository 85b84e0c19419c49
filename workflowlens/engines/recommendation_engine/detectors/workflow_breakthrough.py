"""Workflow breakthrough: a sustained step up in AI-assisted output.

This is the one positive pattern. It fires when the AI ratio has sat well
above its historical baseline for at least two consecutive windows.
"""

from __future__ import annotations

from collections.abc import Sequence

from workflowlens.core.config import DEFAULT_THRESHOLDS, DetectorThresholds
from workflowlens.engines.recommendation_engine.models import (
    ClassifiedCommit,
    Evidence,
    MetricWindow,
    RecommendationCandidate,
)


def _average_ai_ratio(windows: Sequence[MetricWindow]) -> float:
    if not windows:
        return 0.0
    return sum(w.ai_ratio for w in windows) / len(windows)


def count_sustained_windows(
    history: Sequence[MetricWindow],
    thresholds: DetectorThresholds = DEFAULT_THRESHOLDS,
) -> int:
    """Count consecutive elevated windows ending at the current one.

    The current window always counts as one. Walking history newest first,
    a window is elevated when its AI ratio beats the mean of every earlier
    window by more than the breakthrough threshold. The walk stops at the
    first window that is not elevated or lacks enough earlier windows.
    """
    count = 1
    for i in range(len(history) - 1, -1, -1):
        earlier = history[:i]
        if len(earlier) < thresholds.breakthrough_min_history:
            break
        if history[i].ai_ratio - _average_ai_ratio(earlier) > thresholds.breakthrough_increase:
            count += 1
        else:
            break
    return count


def detect_workflow_breakthrough(
    current: MetricWindow,
    history: Sequence[MetricWindow],
    commits: Sequence[ClassifiedCommit],
    thresholds: DetectorThresholds = DEFAULT_THRESHOLDS,
) -> RecommendationCandidate | None:
    if len(history) < thresholds.breakthrough_min_history:
        return None

    sustained = count_sustained_windows(history, thresholds)
    if sustained < thresholds.breakthrough_min_sustained:
        return None

    baseline = list(history[: len(history) - (sustained - 1)])
    if len(baseline) < thresholds.breakthrough_min_history:
        return None

    historical_average = _average_ai_ratio(baseline)
    increase = current.ai_ratio - historical_average
    if increase <= thresholds.breakthrough_increase:
        return None

    return RecommendationCandidate(
        pattern="workflow-breakthrough",
        severity="low",
        title="Workflow Breakthrough: AI Acceleration Detected",
        description=(
            "Your AI workflow is accelerating! AI-assisted development jumped from "
            f"{round(historical_average * 100)}% to {round(current.ai_ratio * 100)}% "
            f"and has been sustained for {sustained} weeks."
        ),
        evidence=Evidence(
            commits=[
                c.sha
                for c in commits
                if c.author_type == "ai" and c.timestamp >= current.window_start
            ],
            metrics={
                "currentAiRatio": round(current.ai_ratio, 3),
                "historicalAverage": round(historical_average, 3),
                "sustainedWeeks": sustained,
                "increasePct": round(increase * 100),
            },
        ),
        next_steps=[
            "Document what changed in your workflow to maintain this acceleration",
            "Share your AI prompting patterns with your team",
            "Monitor test coverage to ensure quality stays high during rapid development",
        ],
    )
