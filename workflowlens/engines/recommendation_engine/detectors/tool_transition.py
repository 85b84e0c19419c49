"""Tool transition: the set of AI tools in use changed since the previous window."""

from __future__ import annotations

from collections.abc import Sequence

from workflowlens.core.config import DEFAULT_THRESHOLDS, DetectorThresholds
from workflowlens.engines.recommendation_engine.metrics import calculate_trend
from workflowlens.engines.recommendation_engine.models import (
    ClassifiedCommit,
    Evidence,
    MetricWindow,
    RecommendationCandidate,
)


def detect_tool_transition(
    current: MetricWindow,
    history: Sequence[MetricWindow],
    commits: Sequence[ClassifiedCommit],
    thresholds: DetectorThresholds = DEFAULT_THRESHOLDS,
) -> RecommendationCandidate | None:
    if not history:
        return None

    previous = history[-1]
    current_tools = set(current.unique_ai_tools)
    previous_tools = set(previous.unique_ai_tools)
    if current_tools == previous_tools:
        return None

    added = sorted(current_tools - previous_tools)
    removed = sorted(previous_tools - current_tools)
    velocity = calculate_trend(current.avg_files_per_commit, previous.avg_files_per_commit)

    changes = []
    if added:
        changes.append(f"started using {', '.join(added)}")
    if removed:
        changes.append(f"stopped using {', '.join(removed)}")

    return RecommendationCandidate(
        pattern="tool-transition",
        severity="low",
        title="Tool Transition Detected",
        description=(
            f"You {' and '.join(changes)}. Files per commit moved "
            f"{velocity.change_percent:+.0f}% since the previous week."
        ),
        evidence=Evidence(
            commits=[c.sha for c in commits],
            metrics={
                "currentAvgFiles": current.avg_files_per_commit,
                "previousAvgFiles": previous.avg_files_per_commit,
                "velocityChangePercent": round(velocity.change_percent),
                "addedTools": len(added),
                "removedTools": len(removed),
            },
        ),
        next_steps=[
            "Monitor velocity for the next 1-2 weeks to see if it stabilizes.",
            "Note which tool works better for different types of tasks.",
        ],
    )
