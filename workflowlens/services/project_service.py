"""ProjectService: project registry and analysis checkpoints."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from workflowlens.dao.commit_dao import CommitDAO
from workflowlens.dao.project_dao import ProjectDAO
from workflowlens.models.commit import Commit
from workflowlens.models.project import Project
from workflowlens.services import ConflictError, NotFoundError


class ProjectService:
    """Stateless service for projects and their commit history."""

    def __init__(self, project_dao: ProjectDAO, commit_dao: CommitDAO) -> None:
        self._project_dao = project_dao
        self._commit_dao = commit_dao

    async def get(self, session: AsyncSession, project_id: uuid.UUID) -> Project:
        """Raises :class:`NotFoundError` if the project does not exist."""
        project = await self._project_dao.get_by_id(session, project_id)
        if project is None:
            raise NotFoundError("project not found")
        return project

    async def create(self, session: AsyncSession, *, name: str, repo_full_name: str) -> Project:
        """Register a project. Raises :class:`ConflictError` on a duplicate repo."""
        existing = await self._project_dao.get_by_field(session, repo_full_name=repo_full_name)
        if existing is not None:
            raise ConflictError(f"project for '{repo_full_name}' already exists")
        return await self._project_dao.create(session, name=name, repo_full_name=repo_full_name)

    async def list_due_for_analysis(
        self,
        session: AsyncSession,
        cutoff_minutes: int,
        limit: int | None = None,
    ) -> list[Project]:
        return await self._project_dao.list_due_for_analysis(session, cutoff_minutes, limit)

    async def add_commits(
        self,
        session: AsyncSession,
        project_id: uuid.UUID,
        commits: list[dict[str, Any]],
    ) -> list[Commit]:
        """Store already-classified commits for a project.

        Classification happens upstream; rows are inserted as given.
        """
        await self.get(session, project_id)
        return await self._commit_dao.bulk_create(
            session, [{**c, "project_id": project_id} for c in commits]
        )
