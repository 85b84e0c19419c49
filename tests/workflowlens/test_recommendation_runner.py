"""Tests for RecommendationRunner (integrated mode)."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from workflowlens.core.config import AnalysisSettings
from workflowlens.dao.commit_dao import CommitDAO
from workflowlens.dao.project_dao import ProjectDAO
from workflowlens.dao.recommendation_dao import RecommendationDAO
from workflowlens.deps import get_recommendation_runner
from workflowlens.engines.recommendation_engine.runner import RecommendationRunner
from workflowlens.services import NotFoundError
from workflowlens.services.project_service import ProjectService


@pytest.fixture
def runner():
    return get_recommendation_runner(AnalysisSettings())


async def _seed_project(session_factory, repo: str, *, handoff: bool = False) -> uuid.UUID:
    """Create a project; with *handoff*, give it a week of AI-heavy, untested commits."""
    service = ProjectService(ProjectDAO(), CommitDAO())
    base = datetime.now(timezone.utc) - timedelta(days=4)
    async with session_factory() as session:
        async with session.begin():
            project = await service.create(session, name=repo, repo_full_name=repo)
            if handoff:
                await service.add_commits(
                    session,
                    project.id,
                    [
                        {
                            "sha": f"{repo}-{i}",
                            "timestamp": base + timedelta(hours=i),
                            "author_type": "ai" if i < 9 else "human",
                            "category": "feat",
                            "files_changed": 4,
                        }
                        for i in range(10)
                    ],
                )
            return project.id


class TestAnalyzeOne:
    async def test_unknown_project(self, runner, session_factory):
        async with session_factory() as session:
            with pytest.raises(NotFoundError):
                await runner.analyze_one(session, uuid.uuid4())

    async def test_persists_recommendations(self, runner, session_factory):
        pid = await _seed_project(session_factory, "acme/app", handoff=True)

        async with session_factory() as session:
            async with session.begin():
                result = await runner.analyze_one(session, pid)

        assert "ai-handoff-cliff" in result.created
        async with session_factory() as session:
            rows = await RecommendationDAO().list_active(session, pid)
            project = await ProjectDAO().get_by_id(session, pid)
        assert {r.pattern for r in rows} == set(result.created)
        assert project.last_analyzed_at is not None


class TestRunBatch:
    async def test_no_projects(self, runner, session_factory):
        assert await runner.run_batch(session_factory) == 0

    async def test_analyzes_due_projects_once(self, runner, session_factory):
        await _seed_project(session_factory, "acme/a", handoff=True)
        await _seed_project(session_factory, "acme/b")

        assert await runner.run_batch(session_factory, cutoff_minutes=60) == 2
        # checkpoints are fresh now, so nothing is due
        assert await runner.run_batch(session_factory, cutoff_minutes=60) == 0

    async def test_limit(self, runner, session_factory):
        for i in range(3):
            await _seed_project(session_factory, f"acme/p{i}")
        assert await runner.run_batch(session_factory, limit=2) == 2
        assert await runner.run_batch(session_factory, limit=2) == 1

    async def test_failure_does_not_stop_batch(self, session_factory):
        await _seed_project(session_factory, "acme/a")
        await _seed_project(session_factory, "acme/b")

        engine = MagicMock()
        engine.analyze = AsyncMock(side_effect=[RuntimeError("boom"), MagicMock()])
        project_dao, commit_dao = ProjectDAO(), CommitDAO()
        runner = RecommendationRunner(
            engine,
            ProjectService(project_dao, commit_dao),
            project_dao,
            commit_dao,
            RecommendationDAO(),
        )

        assert await runner.run_batch(session_factory) == 1
        assert engine.analyze.await_count == 2
