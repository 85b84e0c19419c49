"""Input/output schemas for the CLI's JSON documents."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from workflowlens.engines.recommendation_engine.models import ClassifiedCommit


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CommitIn(_CamelModel):
    """One classified commit as read from a JSON file (camelCase or snake_case)."""

    sha: str
    timestamp: datetime
    author_type: Literal["human", "ai", "bot"]
    category: Literal["feat", "fix", "refactor", "docs", "test", "chore", "ci", "perf", "other"]
    files_changed: int = Field(default=0, ge=0)
    test_files_touched: int = Field(default=0, ge=0)
    message: str = ""
    ai_tool: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    insertions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    type_files_touched: int = Field(default=0, ge=0)

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_commit(self) -> ClassifiedCommit:
        return ClassifiedCommit(**self.model_dump())


class CommitFile(BaseModel):
    commits: list[CommitIn]


class WindowOut(_CamelModel):
    window_start: datetime
    window_end: datetime
    total_commits: int
    ai_commits: int
    human_commits: int
    bot_commits: int
    ai_ratio: float
    test_ratio: float
    avg_files_per_commit: float
    unique_ai_tools: list[str]
    category_distribution: dict[str, int]


class TrendOut(_CamelModel):
    current: float
    previous: float
    direction: str
    change_percent: float


class PhaseOut(_CamelModel):
    phase: str
    confidence: float
    signals: list[str]
    guidance: str


class EvidenceOut(_CamelModel):
    commits: list[str]
    files: list[str]
    metrics: dict[str, int | float]


class RecommendationOut(_CamelModel):
    pattern: str
    severity: str
    title: str
    description: str
    evidence: EvidenceOut
    next_steps: list[str]


class EvaluationOut(_CamelModel):
    phase: PhaseOut
    recommendations: list[RecommendationOut]
    windows: list[WindowOut]
    trends: dict[str, TrendOut]


class AnalysisOut(EvaluationOut):
    project_id: uuid.UUID
    created: list[str]
    resolved_ids: list[uuid.UUID]
