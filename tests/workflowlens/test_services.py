"""Tests for ProjectService, MetricsService, and RecommendationService."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import update

from workflowlens.dao.commit_dao import CommitDAO
from workflowlens.dao.project_dao import ProjectDAO
from workflowlens.dao.recommendation_dao import RecommendationDAO
from workflowlens.models.recommendation import Recommendation
from workflowlens.services import ConflictError, NotFoundError, ValidationError
from workflowlens.services.metrics_service import MetricsService
from workflowlens.services.project_service import ProjectService
from workflowlens.services.recommendation_service import RecommendationService

T0 = datetime(2026, 1, 5, tzinfo=timezone.utc)


@pytest.fixture
def project_service():
    return ProjectService(ProjectDAO(), CommitDAO())


@pytest.fixture
def metrics_service(project_service):
    return MetricsService(project_service, CommitDAO())


@pytest.fixture
def rec_dao():
    return RecommendationDAO()


@pytest.fixture
def rec_service(rec_dao):
    return RecommendationService(rec_dao)


@pytest_asyncio.fixture
async def project(project_service, session):
    return await project_service.create(session, name="lens", repo_full_name="acme/lens")


async def _make_rec(rec_dao, session, project_id, pattern="test-drift", **overrides):
    values = {
        "project_id": project_id,
        "pattern": pattern,
        "severity": "high",
        "title": pattern,
        "description": "desc",
        "evidence": {"commits": [], "files": [], "metrics": {}},
        "next_steps": [],
    }
    values.update(overrides)
    return await rec_dao.create(session, **values)


# ── ProjectService ───────────────────────────────────────────────────────


class TestProjectService:
    async def test_get(self, project_service, session, project):
        found = await project_service.get(session, project.id)
        assert found.repo_full_name == "acme/lens"

    async def test_get_not_found(self, project_service, session):
        with pytest.raises(NotFoundError):
            await project_service.get(session, uuid.uuid4())

    async def test_create_duplicate(self, project_service, session, project):
        with pytest.raises(ConflictError):
            await project_service.create(session, name="again", repo_full_name="acme/lens")

    async def test_add_commits(self, project_service, session, project):
        rows = await project_service.add_commits(
            session,
            project.id,
            [
                {
                    "sha": "abc",
                    "timestamp": T0,
                    "author_type": "ai",
                    "ai_tool": "claude",
                    "category": "feat",
                    "files_changed": 3,
                }
            ],
        )
        assert len(rows) == 1
        assert rows[0].project_id == project.id
        assert rows[0].ai_tool == "claude"

    async def test_add_commits_unknown_project(self, project_service, session):
        with pytest.raises(NotFoundError):
            await project_service.add_commits(session, uuid.uuid4(), [])

    async def test_list_due_for_analysis(self, project_service, session, project):
        due = await project_service.list_due_for_analysis(session, cutoff_minutes=60)
        assert [p.id for p in due] == [project.id]


# ── MetricsService ───────────────────────────────────────────────────────


async def _seed_commits(project_service, session, project_id, days):
    await project_service.add_commits(
        session,
        project_id,
        [
            {
                "sha": f"d{day}",
                "timestamp": T0 + timedelta(days=day),
                "author_type": "ai" if day % 2 else "human",
                "ai_tool": "claude" if day % 2 else None,
                "category": "feat",
                "files_changed": 2,
            }
            for day in days
        ],
    )


class TestMetricsHistory:
    async def test_weekly_windows(self, metrics_service, project_service, session, project):
        await _seed_commits(project_service, session, project.id, [0, 1, 8, 9])

        windows = await metrics_service.history(session, project.id)

        assert [w.total_commits for w in windows] == [2, 2]
        assert windows[0].window_start == T0
        assert windows[0].ai_commits == 1
        assert windows[1].unique_ai_tools == ("claude",)

    async def test_since_and_until(self, metrics_service, project_service, session, project):
        await _seed_commits(project_service, session, project.id, [0, 1, 8, 9])

        since = await metrics_service.history(
            session, project.id, since=T0 + timedelta(days=1)
        )
        until = await metrics_service.history(
            session, project.id, until=T0 + timedelta(days=1)
        )

        assert [w.total_commits for w in since] == [1, 2]
        assert since[0].window_start == T0 + timedelta(days=1)
        assert [w.total_commits for w in until] == [2]

    async def test_window_days(self, metrics_service, project_service, session, project):
        await _seed_commits(project_service, session, project.id, [0, 1, 8, 9])
        windows = await metrics_service.history(session, project.id, window_days=1)
        assert len(windows) == 4

    async def test_no_commits(self, metrics_service, session, project):
        assert await metrics_service.history(session, project.id) == []

    async def test_does_not_touch_checkpoint(
        self, metrics_service, project_service, session, project
    ):
        await _seed_commits(project_service, session, project.id, [0])
        await metrics_service.history(session, project.id)
        await session.refresh(project)
        assert project.last_analyzed_at is None

    async def test_inverted_range(self, metrics_service, session, project):
        with pytest.raises(ValidationError, match="since"):
            await metrics_service.history(
                session, project.id, since=T0 + timedelta(days=2), until=T0
            )

    async def test_unknown_project(self, metrics_service, session):
        with pytest.raises(NotFoundError):
            await metrics_service.history(session, uuid.uuid4())


# ── RecommendationService.list ───────────────────────────────────────────


class TestRecommendationList:
    async def test_defaults_to_active(self, rec_service, rec_dao, session, project):
        await _make_rec(rec_dao, session, project.id, "test-drift")
        await _make_rec(rec_dao, session, project.id, "ghost-churn", status="resolved")

        rows = await rec_service.list(session, project.id)
        assert [r.pattern for r in rows] == ["test-drift"]

    async def test_status_filter(self, rec_service, rec_dao, session, project):
        await _make_rec(rec_dao, session, project.id, "test-drift")
        await _make_rec(rec_dao, session, project.id, "ghost-churn", status="resolved")

        rows = await rec_service.list(session, project.id, status="resolved")
        assert [r.pattern for r in rows] == ["ghost-churn"]

    async def test_unknown_status_falls_back_to_active(
        self, rec_service, rec_dao, session, project
    ):
        await _make_rec(rec_dao, session, project.id, "test-drift")
        await _make_rec(rec_dao, session, project.id, "ghost-churn", status="dismissed")

        rows = await rec_service.list(session, project.id, status="bogus")
        assert [r.pattern for r in rows] == ["test-drift"]

    async def test_severity_filter(self, rec_service, rec_dao, session, project):
        await _make_rec(rec_dao, session, project.id, "test-drift", severity="high")
        await _make_rec(rec_dao, session, project.id, "tool-transition", severity="low")

        rows = await rec_service.list(session, project.id, severity="low")
        assert [r.pattern for r in rows] == ["tool-transition"]

    async def test_unknown_severity_ignored(self, rec_service, rec_dao, session, project):
        await _make_rec(rec_dao, session, project.id, "test-drift", severity="high")
        await _make_rec(rec_dao, session, project.id, "tool-transition", severity="low")

        rows = await rec_service.list(session, project.id, severity="urgent")
        assert len(rows) == 2


# ── RecommendationService.update_status ──────────────────────────────────


class TestRecommendationUpdateStatus:
    async def test_acknowledge(self, rec_service, rec_dao, session, project):
        rec = await _make_rec(rec_dao, session, project.id)
        updated = await rec_service.update_status(session, rec.id, status="acknowledged")
        assert updated.status == "acknowledged"
        assert updated.acknowledged_at is not None
        assert updated.dismissed_at is None

    async def test_dismiss_with_accuracy(self, rec_service, rec_dao, session, project):
        rec = await _make_rec(rec_dao, session, project.id)
        updated = await rec_service.update_status(
            session, rec.id, status="dismissed", accuracy="false-positive"
        )
        assert updated.status == "dismissed"
        assert updated.accuracy == "false-positive"
        assert updated.dismissed_at is not None

    async def test_accuracy_only_keeps_status(self, rec_service, rec_dao, session, project):
        rec = await _make_rec(rec_dao, session, project.id)
        updated = await rec_service.update_status(session, rec.id, accuracy="useful")
        assert updated.status == "active"
        assert updated.accuracy == "useful"

    async def test_accuracy_on_terminal_row_allowed(
        self, rec_service, rec_dao, session, project
    ):
        rec = await _make_rec(rec_dao, session, project.id, status="resolved")
        updated = await rec_service.update_status(session, rec.id, accuracy="noisy")
        assert updated.status == "resolved"
        assert updated.accuracy == "noisy"

    @pytest.mark.parametrize("terminal", ["acknowledged", "dismissed", "resolved"])
    async def test_terminal_status_rejected(
        self, rec_service, rec_dao, session, project, terminal
    ):
        rec = await _make_rec(rec_dao, session, project.id, status=terminal)
        with pytest.raises(ValidationError, match="terminal"):
            await rec_service.update_status(session, rec.id, status="acknowledged")

    async def test_cannot_set_active_or_resolved(self, rec_service, rec_dao, session, project):
        rec = await _make_rec(rec_dao, session, project.id)
        for status in ("active", "resolved"):
            with pytest.raises(ValidationError, match="invalid status"):
                await rec_service.update_status(session, rec.id, status=status)

    async def test_invalid_accuracy(self, rec_service, rec_dao, session, project):
        rec = await _make_rec(rec_dao, session, project.id)
        with pytest.raises(ValidationError, match="invalid accuracy"):
            await rec_service.update_status(session, rec.id, accuracy="meh")

    async def test_nothing_to_update(self, rec_service, session):
        with pytest.raises(ValidationError):
            await rec_service.update_status(session, uuid.uuid4())

    async def test_not_found(self, rec_service, session):
        with pytest.raises(NotFoundError):
            await rec_service.update_status(session, uuid.uuid4(), status="dismissed")

    async def test_row_resolved_after_check_stays_resolved(
        self, rec_service, rec_dao, session, project, monkeypatch
    ):
        rec = await _make_rec(rec_dao, session, project.id)
        load = rec_dao.get_by_id

        async def _load_then_resolve(session_, pk):
            loaded = await load(session_, pk)
            await session_.execute(
                update(Recommendation)
                .where(Recommendation.id == pk)
                .values(status="resolved")
                .execution_options(synchronize_session=False)
            )
            return loaded

        monkeypatch.setattr(rec_dao, "get_by_id", _load_then_resolve)

        with pytest.raises(ValidationError, match="terminal status 'resolved'"):
            await rec_service.update_status(session, rec.id, status="acknowledged")

        await session.refresh(rec)
        assert rec.status == "resolved"
        assert rec.acknowledged_at is None
