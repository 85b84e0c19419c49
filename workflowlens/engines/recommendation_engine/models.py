"""Value types for the recommendation engine (no ORM, no DB)."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

AuthorType = Literal["human", "ai", "bot"]
CommitCategory = Literal[
    "feat", "fix", "refactor", "docs", "test", "chore", "ci", "perf", "other"
]
TrendDirection = Literal["up", "stable", "down"]
ProjectPhase = Literal["building", "drifting", "stabilizing", "ship-ready"]
PatternType = Literal[
    "sprint-drift",
    "ghost-churn",
    "ai-handoff-cliff",
    "tool-transition",
    "test-drift",
    "changelog-silence",
    "workflow-breakthrough",
]
Severity = Literal["critical", "high", "medium", "low"]
RecommendationStatus = Literal["active", "acknowledged", "dismissed", "resolved"]

ALL_CATEGORIES: tuple[str, ...] = (
    "feat", "fix", "refactor", "docs", "test", "chore", "ci", "perf", "other",
)
CLEANUP_CATEGORIES = frozenset({"fix", "refactor", "chore"})


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit already annotated by the upstream classifier."""

    sha: str
    timestamp: datetime
    author_type: AuthorType
    category: CommitCategory
    files_changed: int = 0
    test_files_touched: int = 0
    message: str = ""
    ai_tool: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    insertions: int = 0
    deletions: int = 0
    type_files_touched: int = 0


@dataclass(frozen=True)
class MetricWindow:
    """Aggregated metrics for commits in ``[window_start, window_end)``."""

    window_start: datetime
    window_end: datetime
    total_commits: int
    ai_commits: int
    human_commits: int
    bot_commits: int
    category_distribution: dict[str, int]
    total_files_changed: int
    total_test_files_touched: int
    ai_ratio: float
    test_ratio: float
    avg_files_per_commit: float
    unique_ai_tools: tuple[str, ...] = ()

    @classmethod
    def empty(cls, at: datetime) -> MetricWindow:
        """Zero-valued window used when a project has no commits in range."""
        return cls(
            window_start=at,
            window_end=at,
            total_commits=0,
            ai_commits=0,
            human_commits=0,
            bot_commits=0,
            category_distribution={cat: 0 for cat in ALL_CATEGORIES},
            total_files_changed=0,
            total_test_files_touched=0,
            ai_ratio=0.0,
            test_ratio=0.0,
            avg_files_per_commit=0.0,
        )

    @property
    def feat_commits(self) -> int:
        return self.category_distribution.get("feat", 0)

    @property
    def fix_commits(self) -> int:
        return self.category_distribution.get("fix", 0)

    @property
    def refactor_commits(self) -> int:
        return self.category_distribution.get("refactor", 0)

    @property
    def test_commits(self) -> int:
        return self.category_distribution.get("test", 0)

    @property
    def chore_commits(self) -> int:
        return self.category_distribution.get("chore", 0)

    @property
    def other_commits(self) -> int:
        """Categories without a dedicated counter: other, docs, ci, perf."""
        dist = self.category_distribution
        return sum(dist.get(cat, 0) for cat in ("other", "docs", "ci", "perf"))

    @property
    def feat_ratio(self) -> float:
        return self.feat_commits / self.total_commits if self.total_commits else 0.0

    @property
    def cleanup_ratio(self) -> float:
        if not self.total_commits:
            return 0.0
        cleanup = self.fix_commits + self.refactor_commits + self.chore_commits
        return cleanup / self.total_commits


@dataclass(frozen=True)
class MetricTrend:
    current: float
    previous: float
    direction: TrendDirection
    change_percent: float


@dataclass(frozen=True)
class PhaseIndicator:
    phase: ProjectPhase
    confidence: float
    signals: tuple[str, ...]
    guidance: str


@dataclass
class Evidence:
    commits: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    metrics: dict[str, int | float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "commits": list(self.commits),
            "files": list(self.files),
            "metrics": dict(self.metrics),
        }


@dataclass
class RecommendationCandidate:
    """A single detector emission, not yet persisted."""

    pattern: PatternType
    severity: Severity
    title: str
    description: str
    evidence: Evidence
    next_steps: list[str]


@dataclass(frozen=True)
class ActiveRecommendation:
    """The slice of a persisted active recommendation the engine needs."""

    id: uuid.UUID
    pattern: str


@dataclass
class Evaluation:
    """Output of the pure evaluation pass (no storage involved)."""

    windows: list[MetricWindow]
    current: MetricWindow
    history: list[MetricWindow]
    phase: PhaseIndicator
    detected: list[RecommendationCandidate]


@dataclass
class AnalysisResult:
    """Result of one analysis run for a project."""

    recommendations: list[RecommendationCandidate]
    phase: PhaseIndicator
    windows: list[MetricWindow]
    created: list[str] = field(default_factory=list)
    resolved_ids: list[uuid.UUID] = field(default_factory=list)
