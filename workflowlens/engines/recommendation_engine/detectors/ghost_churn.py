"""Ghost churn: AI-authored work that is reverted or deleted within days."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import timedelta

from workflowlens.core.config import DEFAULT_THRESHOLDS, DetectorThresholds
from workflowlens.engines.recommendation_engine.models import (
    ClassifiedCommit,
    Evidence,
    MetricWindow,
    RecommendationCandidate,
)

GHOST_MESSAGE = re.compile(r"\b(revert|delete|remove|undo|rollback)\b", re.IGNORECASE)


def _is_ghost(
    commit: ClassifiedCommit,
    ai_commits: Sequence[ClassifiedCommit],
    window: timedelta,
) -> bool:
    if not GHOST_MESSAGE.search(commit.message or ""):
        return False
    return any(
        ai.timestamp <= commit.timestamp <= ai.timestamp + window for ai in ai_commits
    )


def detect_ghost_churn(
    current: MetricWindow,
    history: Sequence[MetricWindow],
    commits: Sequence[ClassifiedCommit],
    thresholds: DetectorThresholds = DEFAULT_THRESHOLDS,
) -> RecommendationCandidate | None:
    """Fire when reversal commits exceed the ghost ratio of AI commits.

    Only commits inside the current window (bounds inclusive) are considered,
    since the engine hands every detector the full lookback.
    """
    window_commits = [
        c for c in commits if current.window_start <= c.timestamp <= current.window_end
    ]
    ai_commits = [c for c in window_commits if c.author_type == "ai"]
    if not ai_commits:
        return None

    span = timedelta(days=thresholds.ghost_window_days)
    ghosts = [
        c
        for c in window_commits
        if c.author_type != "ai" and _is_ghost(c, ai_commits, span)
    ]
    if not ghosts:
        return None

    ghost_ratio = len(ghosts) / len(ai_commits)
    if ghost_ratio <= thresholds.ghost_churn_ratio:
        return None

    return RecommendationCandidate(
        pattern="ghost-churn",
        severity="high",
        title="AI-generated code is being reverted shortly after commit",
        description=(
            "A significant portion of AI-generated commits are being reverted, deleted, "
            "or removed within days. The AI-generated code may not be meeting quality "
            "standards or may be introducing issues that require rollback."
        ),
        evidence=Evidence(
            commits=[c.sha for c in ai_commits] + [c.sha for c in ghosts],
            metrics={
                "aiCommitCount": len(ai_commits),
                "ghostCommitCount": len(ghosts),
                "ghostRatioPercent": round(ghost_ratio * 100),
            },
        ),
        next_steps=[
            "Review the reverted commits to identify common patterns or quality issues",
            "Consider adjusting your AI prompts or context to improve code quality",
            "Add integration tests to catch issues before committing AI-generated code",
            "Increase code review rigor for AI-generated changes",
        ],
    )
