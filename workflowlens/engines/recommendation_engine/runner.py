"""RecommendationRunner: runs the engine against the database."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from workflowlens.dao.commit_dao import CommitDAO
from workflowlens.dao.project_dao import ProjectDAO
from workflowlens.dao.recommendation_dao import RecommendationDAO
from workflowlens.engines.recommendation_engine.engine import RecommendationEngine
from workflowlens.engines.recommendation_engine.models import AnalysisResult
from workflowlens.engines.recommendation_engine.store import SqlRecommendationStore
from workflowlens.services.project_service import ProjectService

log = structlog.get_logger("workflowlens.engine")


class RecommendationRunner:
    """Integrated mode: analyze projects and persist recommendations."""

    def __init__(
        self,
        engine: RecommendationEngine,
        project_service: ProjectService,
        project_dao: ProjectDAO,
        commit_dao: CommitDAO,
        recommendation_dao: RecommendationDAO,
    ) -> None:
        self._engine = engine
        self._project_service = project_service
        self._project_dao = project_dao
        self._commit_dao = commit_dao
        self._rec_dao = recommendation_dao

    def store_for(self, session: AsyncSession) -> SqlRecommendationStore:
        return SqlRecommendationStore(session, self._commit_dao, self._rec_dao, self._project_dao)

    async def analyze_one(self, session: AsyncSession, project_id: uuid.UUID) -> AnalysisResult:
        """Analyze a single project inside the caller's session.

        Raises :class:`~workflowlens.services.NotFoundError` for an unknown project.
        """
        await self._project_service.get(session, project_id)
        return await self._engine.analyze(project_id, self.store_for(session))

    async def run_batch(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cutoff_minutes: int = 60,
        limit: int = 20,
    ) -> int:
        """Analyze up to *limit* projects that are due, one after another.

        Each project runs in its own session and transaction, so a failure
        in one does not affect the others. Projects are never analyzed
        concurrently from here.

        Returns the number of projects analyzed.
        """
        async with session_factory() as session:
            projects = await self._project_service.list_due_for_analysis(
                session, cutoff_minutes, limit
            )
        if not projects:
            return 0

        analyzed = 0
        for project in projects:
            try:
                async with session_factory() as session:
                    async with session.begin():
                        await self.analyze_one(session, project.id)
                analyzed += 1
            except Exception:
                log.error(
                    "recommendations.batch_project_failed",
                    project_id=str(project.id),
                    exc_info=True,
                )

        return analyzed
