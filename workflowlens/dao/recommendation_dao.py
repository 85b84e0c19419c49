"""RecommendationDAO: recommendations table operations."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from workflowlens.dao.base import BaseDAO
from workflowlens.models.recommendation import Recommendation


@dataclass
class RecommendationFilters:
    """Optional filters for recommendation list queries."""

    status: str | None = None
    severity: str | None = None


class RecommendationDAO(BaseDAO[Recommendation]):
    model = Recommendation

    @staticmethod
    def _apply_filters(query: Select, filters: RecommendationFilters) -> Select:
        if filters.status is not None:
            query = query.where(Recommendation.status == filters.status)
        if filters.severity is not None:
            query = query.where(Recommendation.severity == filters.severity)
        return query

    # ── read ──────────────────────────────────────────────────────────────

    async def list_by_project(
        self,
        session: AsyncSession,
        project_id: uuid.UUID,
        filters: RecommendationFilters | None = None,
    ) -> list[Recommendation]:
        """Recommendations for a project, newest detection first."""
        query = select(Recommendation).where(Recommendation.project_id == project_id)
        if filters:
            query = self._apply_filters(query, filters)
        query = query.order_by(Recommendation.detected_at.desc(), Recommendation.id.desc())
        result = await session.execute(query)
        return list(result.scalars().all())

    async def list_active(
        self, session: AsyncSession, project_id: uuid.UUID
    ) -> list[Recommendation]:
        """Active recommendations for a project (engine dedup input)."""
        return await self.list_by_project(
            session, project_id, RecommendationFilters(status="active")
        )

    # ── write ─────────────────────────────────────────────────────────────

    async def resolve_many(
        self,
        session: AsyncSession,
        ids: list[uuid.UUID],
        resolved_at: datetime,
    ) -> int:
        """Mark still-active rows in *ids* as resolved. Returns rows updated."""
        if not ids:
            return 0
        stmt = (
            update(Recommendation)
            .where(Recommendation.id.in_(ids), Recommendation.status == "active")
            .values(status="resolved", resolved_at=resolved_at)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def update_status(
        self,
        session: AsyncSession,
        pk: uuid.UUID,
        *,
        status: str | None = None,
        accuracy: str | None = None,
        changed_at: datetime,
    ) -> int:
        """Record external feedback on a recommendation. Returns rows updated.

        Sets acknowledged_at for 'acknowledged', dismissed_at for 'dismissed'.
        A status change only applies while the row is still active, so 0 is
        returned for a row that reached a terminal status in the meantime.
        """
        self._require_pk(pk)
        values: dict[str, Any] = {}
        if status is not None:
            values["status"] = status
            if status == "acknowledged":
                values["acknowledged_at"] = changed_at
            elif status == "dismissed":
                values["dismissed_at"] = changed_at
        if accuracy is not None:
            values["accuracy"] = accuracy
        if not values:
            return 0

        stmt = update(Recommendation).where(Recommendation.id == pk)
        if status is not None:
            stmt = stmt.where(Recommendation.status == "active")
        result = await session.execute(stmt.values(**values))
        return result.rowcount
