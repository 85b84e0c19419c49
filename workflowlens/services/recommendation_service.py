"""RecommendationService: listing and feedback on stored recommendations."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from workflowlens.dao.recommendation_dao import RecommendationDAO, RecommendationFilters
from workflowlens.models.recommendation import Recommendation
from workflowlens.services import NotFoundError, ValidationError

FEEDBACK_STATUSES = ("acknowledged", "dismissed")
FILTER_STATUSES = ("active", "acknowledged", "dismissed", "resolved")
SEVERITIES = ("critical", "high", "medium", "low")
ACCURACY_LABELS = ("true-positive", "false-positive", "useful", "noisy")


class RecommendationService:
    """Stateless service for the externally driven part of the lifecycle.

    The engine creates and resolves rows; people acknowledge or dismiss them
    here. Only ``active`` rows accept a status change.
    """

    def __init__(self, recommendation_dao: RecommendationDAO) -> None:
        self._dao = recommendation_dao

    async def list(
        self,
        session: AsyncSession,
        project_id: uuid.UUID,
        *,
        status: str | None = "active",
        severity: str | None = None,
    ) -> list[Recommendation]:
        """Recommendations for a project, newest first.

        Unknown status falls back to ``active``; unknown severity is ignored.
        """
        if status not in FILTER_STATUSES:
            status = "active"
        if severity not in SEVERITIES:
            severity = None
        filters = RecommendationFilters(status=status, severity=severity)
        return await self._dao.list_by_project(session, project_id, filters)

    async def update_status(
        self,
        session: AsyncSession,
        recommendation_id: uuid.UUID,
        *,
        status: str | None = None,
        accuracy: str | None = None,
    ) -> Recommendation:
        """Acknowledge/dismiss a recommendation and/or label its accuracy.

        Raises :class:`NotFoundError` if not found.
        Raises :class:`ValidationError` on an invalid value or transition.
        """
        if status is None and accuracy is None:
            raise ValidationError("must provide status or accuracy")
        if status is not None and status not in FEEDBACK_STATUSES:
            raise ValidationError(
                f"invalid status '{status}', must be one of: {', '.join(FEEDBACK_STATUSES)}"
            )
        if accuracy is not None and accuracy not in ACCURACY_LABELS:
            raise ValidationError(
                f"invalid accuracy '{accuracy}', must be one of: {', '.join(ACCURACY_LABELS)}"
            )

        rec = await self._dao.get_by_id(session, recommendation_id)
        if rec is None:
            raise NotFoundError("recommendation not found")
        if status is not None and rec.status != "active":
            raise ValidationError(f"cannot transition from terminal status '{rec.status}'")

        updated = await self._dao.update_status(
            session,
            recommendation_id,
            status=status,
            accuracy=accuracy,
            changed_at=datetime.now(timezone.utc),
        )
        await session.refresh(rec)
        if updated == 0:
            raise ValidationError(f"cannot transition from terminal status '{rec.status}'")
        return rec
