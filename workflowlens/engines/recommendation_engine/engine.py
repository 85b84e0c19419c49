"""Recommendation engine: commits -> windows -> phase + detectors -> dedup -> store.

:func:`evaluate` and :func:`plan_changes` are pure. :class:`RecommendationEngine`
runs them against a :class:`RecommendationStore`, awaiting each storage call
in turn. Storage errors are not caught here; they reach the caller as raised.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

import structlog

from workflowlens.core.config import AnalysisSettings
from workflowlens.engines.recommendation_engine.detectors import DETECTORS, Detector
from workflowlens.engines.recommendation_engine.metrics import build_metric_windows
from workflowlens.engines.recommendation_engine.models import (
    ActiveRecommendation,
    AnalysisResult,
    ClassifiedCommit,
    Evaluation,
    MetricWindow,
    RecommendationCandidate,
)
from workflowlens.engines.recommendation_engine.phase import detect_phase
from workflowlens.engines.recommendation_engine.store import RecommendationStore

log = structlog.get_logger("workflowlens.engine")


def evaluate(
    commits: Sequence[ClassifiedCommit],
    settings: AnalysisSettings | None = None,
    *,
    now: datetime | None = None,
    detectors: Sequence[Detector] | None = None,
) -> Evaluation:
    """Build windows, classify the phase, and run every detector.

    Detectors receive the whole of *commits*, not just the current window's
    slice; a detector that needs window-scoped input filters on its own.
    """
    settings = settings or AnalysisSettings()
    detectors = DETECTORS if detectors is None else detectors

    windows = build_metric_windows(commits, settings.window_days)
    if windows:
        current = windows[-1]
    else:
        current = MetricWindow.empty(now or datetime.now(timezone.utc))
    history = windows[:-1]

    phase = detect_phase(current, history)

    detected: list[RecommendationCandidate] = []
    for detector in detectors:
        found = detector(current, history, commits, settings.thresholds)
        if found is not None:
            detected.append(found)

    return Evaluation(
        windows=windows,
        current=current,
        history=history,
        phase=phase,
        detected=detected,
    )


def plan_changes(
    detected: Sequence[RecommendationCandidate],
    active: Sequence[ActiveRecommendation],
) -> tuple[list[RecommendationCandidate], list[uuid.UUID]]:
    """Split a run's detections into rows to create and active rows to resolve.

    A pattern that is detected and already active is left untouched, which
    makes a repeat run over unchanged data a no-op.
    """
    active_patterns = {r.pattern for r in active}
    detected_patterns = {r.pattern for r in detected}

    new = [r for r in detected if r.pattern not in active_patterns]
    resolved_ids = [r.id for r in active if r.pattern not in detected_patterns]
    return new, resolved_ids


class RecommendationEngine:
    """Runs one analysis pass for a project against a store."""

    def __init__(
        self,
        settings: AnalysisSettings | None = None,
        detectors: Sequence[Detector] | None = None,
    ) -> None:
        self._settings = settings or AnalysisSettings()
        self._detectors = detectors

    @property
    def settings(self) -> AnalysisSettings:
        return self._settings

    async def analyze(
        self,
        project_id: uuid.UUID,
        store: RecommendationStore,
        now: datetime | None = None,
    ) -> AnalysisResult:
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(weeks=self._settings.lookback_weeks)

        commits = await store.load_commits(project_id, since)
        evaluation = evaluate(commits, self._settings, now=now, detectors=self._detectors)

        active = await store.find_active_recommendations(project_id)
        new, resolved_ids = plan_changes(evaluation.detected, active)

        if new:
            await store.create_recommendations(project_id, new, detected_at=now)
            log.info(
                "recommendations.created",
                project_id=str(project_id),
                patterns=[r.pattern for r in new],
            )
        if resolved_ids:
            await store.resolve_recommendations(resolved_ids, resolved_at=now)
            log.info(
                "recommendations.resolved",
                project_id=str(project_id),
                count=len(resolved_ids),
            )

        await store.set_project_checkpoint(project_id, now)

        log.info(
            "recommendations.analyzed",
            project_id=str(project_id),
            commits=len(commits),
            windows=len(evaluation.windows),
            phase=evaluation.phase.phase,
            detected=len(evaluation.detected),
        )

        return AnalysisResult(
            recommendations=evaluation.detected,
            phase=evaluation.phase,
            windows=evaluation.windows,
            created=[r.pattern for r in new],
            resolved_ids=resolved_ids,
        )
