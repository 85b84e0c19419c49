"""CommitDAO: commits table operations."""

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workflowlens.dao.base import BaseDAO
from workflowlens.models.commit import Commit


class CommitDAO(BaseDAO[Commit]):
    model = Commit

    async def list_by_project(
        self,
        session: AsyncSession,
        project_id: uuid.UUID,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[Commit]:
        """Commits for a project within ``[since, until]``, oldest first.

        Either bound may be omitted. Uses idx_commits_project_timestamp.
        """
        stmt = select(Commit).where(Commit.project_id == project_id)
        if since is not None:
            stmt = stmt.where(Commit.timestamp >= since)
        if until is not None:
            stmt = stmt.where(Commit.timestamp <= until)
        stmt = stmt.order_by(Commit.timestamp.asc(), Commit.sha.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_since(
        self,
        session: AsyncSession,
        project_id: uuid.UUID,
        since: datetime,
    ) -> list[Commit]:
        """Commits for a project with ``timestamp >= since``, oldest first."""
        return await self.list_by_project(session, project_id, since=since)
