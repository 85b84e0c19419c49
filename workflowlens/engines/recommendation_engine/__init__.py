"""Recommendation engine: weekly metrics, workflow phase, and pattern detection."""

from workflowlens.engines.recommendation_engine.engine import (
    RecommendationEngine,
    evaluate,
    plan_changes,
)
from workflowlens.engines.recommendation_engine.metrics import (
    aggregate_metrics,
    build_metric_windows,
    calculate_trend,
)
from workflowlens.engines.recommendation_engine.phase import detect_phase
from workflowlens.engines.recommendation_engine.runner import RecommendationRunner
from workflowlens.engines.recommendation_engine.store import (
    RecommendationStore,
    SqlRecommendationStore,
)

__all__ = [
    "RecommendationEngine",
    "RecommendationRunner",
    "RecommendationStore",
    "SqlRecommendationStore",
    "aggregate_metrics",
    "build_metric_windows",
    "calculate_trend",
    "detect_phase",
    "evaluate",
    "plan_changes",
]
