"""Changelog silence: plenty of commits, almost none of them user-facing."""

from __future__ import annotations

from collections.abc import Sequence

from workflowlens.core.config import DEFAULT_THRESHOLDS, DetectorThresholds
from workflowlens.engines.recommendation_engine.models import (
    ClassifiedCommit,
    Evidence,
    MetricWindow,
    RecommendationCandidate,
)

MAX_EVIDENCE_COMMITS = 10


def detect_changelog_silence(
    current: MetricWindow,
    history: Sequence[MetricWindow],
    commits: Sequence[ClassifiedCommit],
    thresholds: DetectorThresholds = DEFAULT_THRESHOLDS,
) -> RecommendationCandidate | None:
    non_bot = [c for c in commits if c.author_type != "bot"]
    if len(non_bot) <= thresholds.silence_min_commits:
        return None

    feat_count = sum(1 for c in non_bot if c.category == "feat")
    feat_ratio = feat_count / len(non_bot)
    if feat_ratio >= thresholds.silence_feat_ratio:
        return None

    return RecommendationCandidate(
        pattern="changelog-silence",
        severity="medium",
        title="Changelog Silence",
        description=(
            f"{len(non_bot)} commits but only {feat_count} features "
            f"({feat_ratio * 100:.0f}%). You're shipping code but not features. "
            "Consider prioritizing user-visible work."
        ),
        evidence=Evidence(
            commits=[c.sha for c in non_bot[:MAX_EVIDENCE_COMMITS]],
            metrics={
                "totalCommits": len(non_bot),
                "featCommits": feat_count,
                "featRatio": feat_ratio,
            },
        ),
        next_steps=[
            "Identify the next user-visible feature and prioritize it.",
            "Check if cleanup work is blocking feature delivery.",
            "Consider whether refactoring is producing diminishing returns.",
        ],
    )
