"""Workflow phase detection.

Each run scores four candidate phases from the latest window and its history
and picks the best one. Nothing is carried over between runs: any phase can
follow any other.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from workflowlens.engines.recommendation_engine.models import (
    MetricWindow,
    PhaseIndicator,
    ProjectPhase,
)

GUIDANCE: dict[str, str] = {
    "building": "Keep shipping. Watch for churn creeping in.",
    "drifting": "Slow down. Focus on refactoring and adding tests before generating more code.",
    "stabilizing": "Polish. Write docs. Prepare to ship.",
    "ship-ready": "Ready to ship. Focus on polish and documentation.",
}

VELOCITY_DEVIATION_LIMIT = 0.3


@dataclass
class _PhaseScore:
    phase: ProjectPhase
    score: float = 0.0
    signals: list[str] = field(default_factory=list)

    def add(self, points: float, signal: str | None = None) -> None:
        self.score += points
        if signal:
            self.signals.append(signal)


def _pct(value: float) -> str:
    return f"{value * 100:.0f}%"


def _score_building(current: MetricWindow, history: Sequence[MetricWindow]) -> _PhaseScore:
    result = _PhaseScore("building", score=0.2)

    fr = current.feat_ratio
    if fr > 0.3:
        result.add(0.4, f"Feature ratio {_pct(fr)}: features are landing")
    elif fr > 0.15:
        result.add(0.2, f"Feature ratio {_pct(fr)}: some features landing")

    if current.test_ratio > 0.1:
        result.add(0.2, "Tests present alongside features")

    if current.total_commits > 5:
        result.add(0.1, "Active development velocity")

    return result


def _score_drifting(current: MetricWindow, history: Sequence[MetricWindow]) -> _PhaseScore:
    result = _PhaseScore("drifting")

    if current.ai_ratio > 0.7:
        result.add(0.3, f"AI ratio {_pct(current.ai_ratio)}: heavy AI generation")
    elif current.ai_ratio > 0.5:
        result.add(0.1)

    cr = current.cleanup_ratio
    if cr > 0.5:
        result.add(0.4, f"Cleanup ratio {_pct(cr)}: fixes/refactors dominating")
    elif cr > 0.3:
        result.add(0.2, f"Cleanup ratio {_pct(cr)}: significant cleanup activity")

    if current.test_ratio < 0.1:
        result.add(0.2, "Test coverage thin")

    return result


def _score_stabilizing(current: MetricWindow, history: Sequence[MetricWindow]) -> _PhaseScore:
    result = _PhaseScore("stabilizing")
    if not history:
        return result

    previous = history[-1]
    prev_cr, cur_cr = previous.cleanup_ratio, current.cleanup_ratio
    if prev_cr > cur_cr and cur_cr < 0.5:
        result.add(0.3, f"Cleanup declining: {_pct(prev_cr)} -> {_pct(cur_cr)}")

    if current.test_ratio > previous.test_ratio:
        result.add(
            0.3,
            f"Test ratio improving: {_pct(previous.test_ratio)} -> {_pct(current.test_ratio)}",
        )

    if current.refactor_commits > 0:
        result.add(0.1, "Active refactoring")

    if current.test_ratio > 0.2:
        result.add(0.2, "Good test coverage")

    return result


def _score_ship_ready(current: MetricWindow, history: Sequence[MetricWindow]) -> _PhaseScore:
    result = _PhaseScore("ship-ready")
    if len(history) < 2:
        return result

    counts = [w.total_commits for w in (*history[-2:], current)]
    mean = sum(counts) / len(counts)
    deviation = sum(abs(c - mean) for c in counts) / len(counts)
    if mean > 0 and deviation / mean < VELOCITY_DEVIATION_LIMIT:
        result.add(0.3, "Stable development velocity")

    if current.test_ratio > 0.2:
        result.add(0.3, f"Test ratio {_pct(current.test_ratio)}: good coverage")

    if current.cleanup_ratio < 0.3:
        result.add(0.2, "Low churn: code is settling")

    if current.feat_ratio > 0.15:
        result.add(0.1, "Features still landing")

    return result


# Evaluation order doubles as the tie-break order.
_SCORERS: tuple[Callable[[MetricWindow, Sequence[MetricWindow]], _PhaseScore], ...] = (
    _score_building,
    _score_drifting,
    _score_stabilizing,
    _score_ship_ready,
)


def detect_phase(
    current: MetricWindow,
    history: Sequence[MetricWindow],
) -> PhaseIndicator:
    """Return the highest-scoring phase for *current* given *history* (oldest first)."""
    first, *rest = _SCORERS
    best = first(current, history)
    for scorer in rest:
        candidate = scorer(current, history)
        if candidate.score > best.score:
            best = candidate

    return PhaseIndicator(
        phase=best.phase,
        confidence=max(0.0, min(best.score, 1.0)),
        signals=tuple(best.signals),
        guidance=GUIDANCE[best.phase],
    )
