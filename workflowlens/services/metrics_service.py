"""MetricsService: weekly metric history for a stored project."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from workflowlens.dao.commit_dao import CommitDAO
from workflowlens.engines.recommendation_engine.metrics import build_metric_windows
from workflowlens.engines.recommendation_engine.models import MetricWindow
from workflowlens.engines.recommendation_engine.store import to_classified_commit
from workflowlens.services import ValidationError
from workflowlens.services.project_service import ProjectService


class MetricsService:
    """Stateless service for metric history. Never writes, never runs an analysis."""

    def __init__(self, project_service: ProjectService, commit_dao: CommitDAO) -> None:
        self._project_service = project_service
        self._commit_dao = commit_dao

    async def history(
        self,
        session: AsyncSession,
        project_id: uuid.UUID,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        window_days: int = 7,
    ) -> list[MetricWindow]:
        """Metric windows over the project's commits in ``[since, until]``.

        Raises :class:`NotFoundError` if the project does not exist.
        Raises :class:`ValidationError` if *since* is after *until*.
        """
        if since is not None and until is not None and since > until:
            raise ValidationError("since must not be after until")
        await self._project_service.get(session, project_id)
        rows = await self._commit_dao.list_by_project(
            session, project_id, since=since, until=until
        )
        return build_metric_windows([to_classified_commit(r) for r in rows], window_days)
