"""recommendations table."""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Text,
    Uuid,
    desc,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from workflowlens.core.database import Base, TimestampMixin

pattern_type_enum = Enum(
    "sprint-drift",
    "ghost-churn",
    "ai-handoff-cliff",
    "tool-transition",
    "test-drift",
    "changelog-silence",
    "workflow-breakthrough",
    name="pattern_type",
    native_enum=False,
)
severity_enum = Enum(
    "critical",
    "high",
    "medium",
    "low",
    name="severity_level",
    native_enum=False,
)
recommendation_status_enum = Enum(
    "active",
    "acknowledged",
    "dismissed",
    "resolved",
    name="recommendation_status",
    native_enum=False,
)
accuracy_label_enum = Enum(
    "true-positive",
    "false-positive",
    "useful",
    "noisy",
    name="accuracy_label",
    native_enum=False,
)


class Recommendation(TimestampMixin, Base):
    __tablename__ = "recommendations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    pattern: Mapped[str] = mapped_column(pattern_type_enum, nullable=False)
    severity: Mapped[str] = mapped_column(severity_enum, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    evidence: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    next_steps: Mapped[list[str]] = mapped_column(JSON, nullable=False)

    status: Mapped[str] = mapped_column(
        recommendation_status_enum, nullable=False, server_default=text("'active'")
    )
    accuracy: Mapped[Optional[str]] = mapped_column(accuracy_label_enum)

    # status timeline
    detected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    acknowledged_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    dismissed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_recommendations_project_status", "project_id", "status"),
        Index("idx_recommendations_detected", desc("detected_at")),
    )
