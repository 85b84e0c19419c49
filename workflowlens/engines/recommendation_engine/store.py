"""Persistence boundary for the recommendation engine.

:class:`RecommendationStore` is everything the engine needs from storage.
:class:`SqlRecommendationStore` implements it over the DAO layer on a single
``AsyncSession``; the caller owns the transaction.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from workflowlens.dao.commit_dao import CommitDAO
from workflowlens.dao.project_dao import ProjectDAO
from workflowlens.dao.recommendation_dao import RecommendationDAO
from workflowlens.engines.recommendation_engine.models import (
    ActiveRecommendation,
    ClassifiedCommit,
    RecommendationCandidate,
)
from workflowlens.models.commit import Commit


class RecommendationStore(Protocol):
    async def load_commits(
        self, project_id: uuid.UUID, since: datetime
    ) -> list[ClassifiedCommit]: ...

    async def find_active_recommendations(
        self, project_id: uuid.UUID
    ) -> list[ActiveRecommendation]: ...

    async def create_recommendations(
        self,
        project_id: uuid.UUID,
        records: Sequence[RecommendationCandidate],
        detected_at: datetime,
    ) -> None: ...

    async def resolve_recommendations(
        self, ids: Sequence[uuid.UUID], resolved_at: datetime
    ) -> None: ...

    async def set_project_checkpoint(self, project_id: uuid.UUID, at: datetime) -> None: ...


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_classified_commit(row: Commit) -> ClassifiedCommit:
    return ClassifiedCommit(
        sha=row.sha,
        timestamp=_as_utc(row.timestamp),
        author_type=row.author_type,  # type: ignore[arg-type]
        category=row.category,  # type: ignore[arg-type]
        files_changed=row.files_changed,
        test_files_touched=row.test_files_touched,
        message=row.message or "",
        ai_tool=row.ai_tool,
        author_name=row.author_name,
        author_email=row.author_email,
        insertions=row.insertions,
        deletions=row.deletions,
        type_files_touched=row.type_files_touched,
    )


class SqlRecommendationStore:
    """SQLAlchemy-backed :class:`RecommendationStore` bound to one session."""

    def __init__(
        self,
        session: AsyncSession,
        commit_dao: CommitDAO,
        recommendation_dao: RecommendationDAO,
        project_dao: ProjectDAO,
    ) -> None:
        self._session = session
        self._commit_dao = commit_dao
        self._rec_dao = recommendation_dao
        self._project_dao = project_dao

    async def load_commits(self, project_id: uuid.UUID, since: datetime) -> list[ClassifiedCommit]:
        rows = await self._commit_dao.list_since(self._session, project_id, since)
        return [to_classified_commit(r) for r in rows]

    async def find_active_recommendations(
        self, project_id: uuid.UUID
    ) -> list[ActiveRecommendation]:
        rows = await self._rec_dao.list_active(self._session, project_id)
        return [ActiveRecommendation(id=r.id, pattern=r.pattern) for r in rows]

    async def create_recommendations(
        self,
        project_id: uuid.UUID,
        records: Sequence[RecommendationCandidate],
        detected_at: datetime,
    ) -> None:
        await self._rec_dao.bulk_create(
            self._session,
            [
                {
                    "project_id": project_id,
                    "pattern": r.pattern,
                    "severity": r.severity,
                    "title": r.title,
                    "description": r.description,
                    "evidence": r.evidence.to_dict(),
                    "next_steps": list(r.next_steps),
                    "status": "active",
                    "detected_at": detected_at,
                }
                for r in records
            ],
        )

    async def resolve_recommendations(
        self, ids: Sequence[uuid.UUID], resolved_at: datetime
    ) -> None:
        await self._rec_dao.resolve_many(self._session, list(ids), resolved_at)

    async def set_project_checkpoint(self, project_id: uuid.UUID, at: datetime) -> None:
        await self._project_dao.set_checkpoint(self._session, project_id, at)
