"""Dependency wiring: DAO, service, and runner singletons plus the session factory."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from workflowlens.core.config import AnalysisSettings
from workflowlens.core.database import create_engine, create_session_factory
from workflowlens.dao.commit_dao import CommitDAO
from workflowlens.dao.project_dao import ProjectDAO
from workflowlens.dao.recommendation_dao import RecommendationDAO
from workflowlens.engines.recommendation_engine.engine import RecommendationEngine
from workflowlens.engines.recommendation_engine.runner import RecommendationRunner
from workflowlens.services.metrics_service import MetricsService
from workflowlens.services.project_service import ProjectService
from workflowlens.services.recommendation_service import RecommendationService

# ---------------------------------------------------------------------------
# DAO singletons
# ---------------------------------------------------------------------------
_project_dao = ProjectDAO()
_commit_dao = CommitDAO()
_recommendation_dao = RecommendationDAO()

# ---------------------------------------------------------------------------
# Service singletons
# ---------------------------------------------------------------------------
_project_service = ProjectService(_project_dao, _commit_dao)
_recommendation_service = RecommendationService(_recommendation_dao)
_metrics_service = MetricsService(_project_service, _commit_dao)

# ---------------------------------------------------------------------------
# Engine / session factory (initialised once per process)
# ---------------------------------------------------------------------------
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_session_factory(database_url: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Create the async engine and session factory. Called once at startup."""
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_engine(database_url)
    _session_factory = create_session_factory(_engine)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def get_project_service() -> ProjectService:
    return _project_service


def get_recommendation_service() -> RecommendationService:
    return _recommendation_service


def get_metrics_service() -> MetricsService:
    return _metrics_service


def get_recommendation_runner(settings: AnalysisSettings | None = None) -> RecommendationRunner:
    return RecommendationRunner(
        RecommendationEngine(settings or AnalysisSettings.from_env()),
        _project_service,
        _project_dao,
        _commit_dao,
        _recommendation_dao,
    )
