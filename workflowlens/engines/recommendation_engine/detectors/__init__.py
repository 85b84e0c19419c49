"""Pattern detector registry.

Every detector is a pure function
``(current, history, commits, thresholds) -> RecommendationCandidate | None``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from workflowlens.core.config import DetectorThresholds
from workflowlens.engines.recommendation_engine.detectors.ai_handoff_cliff import (
    detect_ai_handoff_cliff,
)
from workflowlens.engines.recommendation_engine.detectors.changelog_silence import (
    detect_changelog_silence,
)
from workflowlens.engines.recommendation_engine.detectors.ghost_churn import detect_ghost_churn
from workflowlens.engines.recommendation_engine.detectors.sprint_drift import detect_sprint_drift
from workflowlens.engines.recommendation_engine.detectors.test_drift import detect_test_drift
from workflowlens.engines.recommendation_engine.detectors.tool_transition import (
    detect_tool_transition,
)
from workflowlens.engines.recommendation_engine.detectors.workflow_breakthrough import (
    detect_workflow_breakthrough,
)
from workflowlens.engines.recommendation_engine.models import (
    ClassifiedCommit,
    MetricWindow,
    RecommendationCandidate,
)

Detector = Callable[
    [MetricWindow, Sequence[MetricWindow], Sequence[ClassifiedCommit], DetectorThresholds],
    RecommendationCandidate | None,
]

DETECTORS: list[Detector] = [
    detect_sprint_drift,
    detect_ghost_churn,
    detect_ai_handoff_cliff,
    detect_tool_transition,
    detect_test_drift,
    detect_changelog_silence,
    detect_workflow_breakthrough,
]

__all__ = [
    "DETECTORS",
    "Detector",
    "detect_ai_handoff_cliff",
    "detect_changelog_silence",
    "detect_ghost_churn",
    "detect_sprint_drift",
    "detect_test_drift",
    "detect_tool_transition",
    "detect_workflow_breakthrough",
]
