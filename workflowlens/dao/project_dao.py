"""ProjectDAO: projects table operations."""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from workflowlens.dao.base import BaseDAO
from workflowlens.models.project import Project


class ProjectDAO(BaseDAO[Project]):
    model = Project

    async def list_due_for_analysis(
        self,
        session: AsyncSession,
        cutoff_minutes: int,
        limit: int | None = None,
    ) -> list[Project]:
        """Return projects never analyzed, or analyzed before the cutoff.

        Never-analyzed projects come first, then oldest checkpoint first.
        """
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=cutoff_minutes)
        stmt = (
            select(Project)
            .where((Project.last_analyzed_at.is_(None)) | (Project.last_analyzed_at < cutoff))
            .order_by(Project.last_analyzed_at.is_not(None), Project.last_analyzed_at.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def set_checkpoint(
        self, session: AsyncSession, pk: uuid.UUID, analyzed_at: datetime
    ) -> None:
        self._require_pk(pk)
        stmt = update(Project).where(Project.id == pk).values(last_analyzed_at=analyzed_at)
        await session.execute(stmt)
