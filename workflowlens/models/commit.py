"""commits table."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from workflowlens.core.database import Base, TimestampMixin

author_type_enum = Enum(
    "human",
    "ai",
    "bot",
    name="author_type",
    native_enum=False,
)
commit_category_enum = Enum(
    "feat",
    "fix",
    "refactor",
    "docs",
    "test",
    "chore",
    "ci",
    "perf",
    "other",
    name="commit_category",
    native_enum=False,
)


class Commit(TimestampMixin, Base):
    __tablename__ = "commits"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    sha: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    author_name: Mapped[Optional[str]] = mapped_column(Text)
    author_email: Mapped[Optional[str]] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # classification (written upstream)
    author_type: Mapped[str] = mapped_column(author_type_enum, nullable=False)
    ai_tool: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[str] = mapped_column(commit_category_enum, nullable=False)

    # size / quality signals
    files_changed: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    insertions: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    deletions: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    test_files_touched: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    type_files_touched: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )

    __table_args__ = (
        UniqueConstraint("project_id", "sha", name="uq_commits_project_sha"),
        Index("idx_commits_project_timestamp", "project_id", "timestamp"),
    )
