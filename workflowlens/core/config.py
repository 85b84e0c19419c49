"""Analysis settings and detector thresholds.

Every numeric constant a pattern detector compares against lives in
:class:`DetectorThresholds`, so tuning never touches detection code.
Runtime knobs are read from ``WORKFLOWLENS_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_float(key: str, default: float) -> float:
    return float(os.environ.get(key, default))


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


@dataclass(frozen=True)
class DetectorThresholds:
    """Fixed thresholds for the seven pattern detectors."""

    # sprint-drift
    sprint_drift_ai_ratio: float = 0.6
    sprint_drift_cleanup_ratio: float = 0.5

    # ghost-churn
    ghost_window_days: int = 7
    ghost_churn_ratio: float = 0.2

    # ai-handoff-cliff
    handoff_ai_ratio: float = 0.7
    handoff_test_ratio: float = 0.1

    # test-drift
    test_drift_ai_ratio: float = 0.5
    test_drift_test_ratio: float = 0.15

    # changelog-silence
    silence_min_commits: int = 10
    silence_feat_ratio: float = 0.1

    # workflow-breakthrough
    breakthrough_increase: float = 0.15
    breakthrough_min_history: int = 2
    breakthrough_min_sustained: int = 2


DEFAULT_THRESHOLDS = DetectorThresholds()


@dataclass(frozen=True)
class AnalysisSettings:
    window_days: int = 7
    lookback_weeks: int = 12
    trend_stable_threshold: float = 0.10
    thresholds: DetectorThresholds = field(default_factory=DetectorThresholds)

    def __post_init__(self) -> None:
        if self.window_days < 1:
            raise ValueError(f"window_days must be at least 1, got {self.window_days}")
        if self.lookback_weeks < 1:
            raise ValueError(f"lookback_weeks must be at least 1, got {self.lookback_weeks}")

    @classmethod
    def from_env(cls) -> AnalysisSettings:
        """Build settings from ``WORKFLOWLENS_WINDOW_DAYS``, ``WORKFLOWLENS_LOOKBACK_WEEKS``
        and ``WORKFLOWLENS_TREND_STABLE_THRESHOLD``.
        """
        return cls(
            window_days=_env_int("WORKFLOWLENS_WINDOW_DAYS", 7),
            lookback_weeks=_env_int("WORKFLOWLENS_LOOKBACK_WEEKS", 12),
            trend_stable_threshold=_env_float("WORKFLOWLENS_TREND_STABLE_THRESHOLD", 0.10),
        )


def analyze_interval() -> float:
    """Seconds between scheduled analysis cycles."""
    return _env_float("WORKFLOWLENS_ANALYZE_INTERVAL", 3600)


def analyze_cutoff_minutes() -> int:
    """A project is due for analysis when its checkpoint is older than this."""
    return _env_int("WORKFLOWLENS_ANALYZE_CUTOFF_MINUTES", 60)
