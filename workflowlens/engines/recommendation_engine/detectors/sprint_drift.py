"""Sprint-drift cycle: heavy AI generation followed by a wave of cleanup commits."""

from __future__ import annotations

from collections.abc import Sequence

from workflowlens.core.config import DEFAULT_THRESHOLDS, DetectorThresholds
from workflowlens.engines.recommendation_engine.models import (
    CLEANUP_CATEGORIES,
    ClassifiedCommit,
    Evidence,
    MetricWindow,
    RecommendationCandidate,
)


def detect_sprint_drift(
    current: MetricWindow,
    history: Sequence[MetricWindow],
    commits: Sequence[ClassifiedCommit],
    thresholds: DetectorThresholds = DEFAULT_THRESHOLDS,
) -> RecommendationCandidate | None:
    """Fire when AI ratio and the non-bot cleanup ratio are both high."""
    if not commits:
        return None
    if current.ai_ratio < thresholds.sprint_drift_ai_ratio:
        return None

    non_bot = [c for c in commits if c.author_type != "bot"]
    if not non_bot:
        return None

    cleanup = [c for c in non_bot if c.category in CLEANUP_CATEGORIES]
    cleanup_ratio = len(cleanup) / len(non_bot)
    if cleanup_ratio < thresholds.sprint_drift_cleanup_ratio:
        return None

    return RecommendationCandidate(
        pattern="sprint-drift",
        severity="medium",
        title="Sprint-Drift Cycle Detected",
        description=(
            "High AI-assisted development followed by cleanup commits. This pattern "
            "suggests rapid AI-generated code followed by human refinement."
        ),
        evidence=Evidence(
            commits=[c.sha for c in cleanup],
            metrics={
                "aiRatio": current.ai_ratio,
                "cleanupRatio": cleanup_ratio,
                "cleanupCommitCount": len(cleanup),
                "totalNonBotCommits": len(non_bot),
            },
        ),
        next_steps=[
            "Review AI-generated code before committing to reduce cleanup cycles",
            "Consider pairing AI generation with immediate human review",
            "Track whether cleanup reduces over time as AI prompts improve",
        ],
    )
