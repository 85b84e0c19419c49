"""AI handoff cliff: AI output outpacing the developer's capacity to test it."""

from __future__ import annotations

from collections.abc import Sequence

from workflowlens.core.config import DEFAULT_THRESHOLDS, DetectorThresholds
from workflowlens.engines.recommendation_engine.models import (
    ClassifiedCommit,
    Evidence,
    MetricWindow,
    RecommendationCandidate,
)


def detect_ai_handoff_cliff(
    current: MetricWindow,
    history: Sequence[MetricWindow],
    commits: Sequence[ClassifiedCommit],
    thresholds: DetectorThresholds = DEFAULT_THRESHOLDS,
) -> RecommendationCandidate | None:
    if not commits:
        return None
    if current.ai_ratio <= thresholds.handoff_ai_ratio:
        return None
    if current.test_ratio >= thresholds.handoff_test_ratio:
        return None

    return RecommendationCandidate(
        pattern="ai-handoff-cliff",
        severity="critical",
        title="AI Handoff Cliff",
        description=(
            f"AI ratio is {current.ai_ratio * 100:.0f}% but test ratio is only "
            f"{current.test_ratio * 100:.0f}%. AI-generated code may be exceeding "
            "your review capacity."
        ),
        evidence=Evidence(
            commits=[c.sha for c in commits if c.author_type == "ai"],
            metrics={
                "aiRatio": current.ai_ratio,
                "testRatio": current.test_ratio,
                "avgFilesPerCommit": current.avg_files_per_commit,
            },
        ),
        next_steps=[
            "Add tests for recent AI-generated code before generating more.",
            "Review large AI commits for correctness before moving on.",
            "Consider smaller, more focused AI prompts.",
        ],
    )
