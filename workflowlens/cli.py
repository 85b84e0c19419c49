"""CLI entry point: workflowlens.

Subcommands:
    workflowlens evaluate commits.json        # Standalone: windows, phase, detections
    workflowlens analyze <project-id>         # Integrated: one project against the DB
    workflowlens metrics <project-id>         # Weekly metric history from stored commits
    workflowlens recommendations <project-id> # List stored recommendations
    workflowlens feedback <rec-id> --status acknowledged
    workflowlens watch                        # Run the periodic analysis loop
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import click
import pydantic
import structlog
from pydantic.alias_generators import to_camel

from workflowlens.core.config import AnalysisSettings
from workflowlens.core.logging import setup_logging
from workflowlens.engines.recommendation_engine.engine import evaluate as evaluate_commits
from workflowlens.engines.recommendation_engine.metrics import latest_trends
from workflowlens.engines.recommendation_engine.models import AnalysisResult, Evaluation
from workflowlens.schemas import AnalysisOut, CommitFile, EvaluationOut, WindowOut
from workflowlens.services import ServiceError

log = structlog.get_logger("workflowlens.cli")


def _load_commits(path: str) -> CommitFile:
    """Read a commit list (bare array or ``{"commits": [...]}``) from *path*."""
    try:
        payload = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise click.ClickException(f"invalid JSON in {path}: {e}") from e
    if isinstance(payload, list):
        payload = {"commits": payload}
    try:
        return CommitFile.model_validate(payload)
    except pydantic.ValidationError as e:
        raise click.ClickException(f"invalid commit data in {path}:\n{e}") from e


def _echo_json(model: pydantic.BaseModel) -> None:
    click.echo(model.model_dump_json(by_alias=True, indent=2))


def _evaluation_out(evaluation: Evaluation | AnalysisResult, settings: AnalysisSettings) -> dict:
    if isinstance(evaluation, Evaluation):
        recommendations = evaluation.detected
    else:
        recommendations = evaluation.recommendations
    trends = latest_trends(evaluation.windows, settings.trend_stable_threshold)
    return {
        "phase": evaluation.phase,
        "recommendations": recommendations,
        "windows": evaluation.windows,
        "trends": {to_camel(k): v for k, v in trends.items()},
    }


def _settings(**overrides: Any) -> AnalysisSettings:
    try:
        settings = AnalysisSettings.from_env()
        if overrides:
            settings = dataclasses.replace(settings, **overrides)
    except ValueError as e:
        raise click.ClickException(f"invalid analysis settings: {e}") from e
    return settings


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_uuid(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError as e:
        raise click.BadParameter(f"'{value}' is not a valid UUID") from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """WorkflowLens: commit-history pattern detection and recommendations."""
    setup_logging(level="DEBUG" if verbose else None)


@main.command()
@click.argument("commits_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--window-days", type=click.IntRange(min=1), default=None, help="Window size in days")
def evaluate(commits_json: str, window_days: int | None) -> None:
    """Evaluate classified commits from a JSON file without a database."""
    data = _load_commits(commits_json)
    settings = _settings() if window_days is None else _settings(window_days=window_days)
    result = evaluate_commits([c.to_commit() for c in data.commits], settings)
    _echo_json(EvaluationOut.model_validate(_evaluation_out(result, settings)))


@main.command()
@click.argument("project_id")
@click.option("--database-url", default=None, help="Overrides WORKFLOWLENS_DATABASE_URL")
def analyze(project_id: str, database_url: str | None) -> None:
    """Analyze one project and persist its recommendations."""
    pid = _parse_uuid(project_id)
    settings = _settings()

    async def _run() -> AnalysisResult:
        from workflowlens.deps import dispose_engine, get_recommendation_runner, init_session_factory

        factory = init_session_factory(database_url)
        runner = get_recommendation_runner(settings)
        try:
            async with factory() as session:
                async with session.begin():
                    return await runner.analyze_one(session, pid)
        finally:
            await dispose_engine()

    try:
        result = asyncio.run(_run())
    except ServiceError as e:
        raise click.ClickException(str(e)) from e

    out = AnalysisOut.model_validate(
        {
            **_evaluation_out(result, settings),
            "project_id": pid,
            "created": result.created,
            "resolved_ids": result.resolved_ids,
        }
    )
    _echo_json(out)


@main.command()
@click.argument("project_id")
@click.option("--since", type=click.DateTime(), default=None, help="Only commits at or after (UTC)")
@click.option("--until", type=click.DateTime(), default=None, help="Only commits at or before (UTC)")
@click.option("--window-days", type=click.IntRange(min=1), default=None, help="Window size in days")
@click.option("--database-url", default=None, help="Overrides WORKFLOWLENS_DATABASE_URL")
def metrics(
    project_id: str,
    since: datetime | None,
    until: datetime | None,
    window_days: int | None,
    database_url: str | None,
) -> None:
    """Print metric window history from a project's stored commits."""
    pid = _parse_uuid(project_id)
    settings = _settings() if window_days is None else _settings(window_days=window_days)

    async def _run() -> list[dict]:
        from workflowlens.deps import dispose_engine, get_metrics_service, init_session_factory

        factory = init_session_factory(database_url)
        service = get_metrics_service()
        try:
            async with factory() as session:
                windows = await service.history(
                    session,
                    pid,
                    since=_as_utc(since),
                    until=_as_utc(until),
                    window_days=settings.window_days,
                )
                return [
                    WindowOut.model_validate(w).model_dump(mode="json", by_alias=True)
                    for w in windows
                ]
        finally:
            await dispose_engine()

    try:
        rows = asyncio.run(_run())
    except ServiceError as e:
        raise click.ClickException(str(e)) from e
    click.echo(json.dumps(rows, indent=2))


@main.command()
@click.argument("project_id")
@click.option(
    "--status",
    type=click.Choice(["active", "acknowledged", "dismissed", "resolved"]),
    default="active",
    show_default=True,
)
@click.option("--severity", type=click.Choice(["critical", "high", "medium", "low"]), default=None)
@click.option("--database-url", default=None, help="Overrides WORKFLOWLENS_DATABASE_URL")
def recommendations(
    project_id: str, status: str, severity: str | None, database_url: str | None
) -> None:
    """List stored recommendations for a project."""
    pid = _parse_uuid(project_id)

    async def _run() -> list[dict]:
        from workflowlens.deps import dispose_engine, get_recommendation_service, init_session_factory

        factory = init_session_factory(database_url)
        service = get_recommendation_service()
        try:
            async with factory() as session:
                rows = await service.list(session, pid, status=status, severity=severity)
                return [
                    {
                        "id": str(r.id),
                        "pattern": r.pattern,
                        "severity": r.severity,
                        "title": r.title,
                        "status": r.status,
                        "accuracy": r.accuracy,
                        "detectedAt": r.detected_at.isoformat(),
                    }
                    for r in rows
                ]
        finally:
            await dispose_engine()

    click.echo(json.dumps(asyncio.run(_run()), indent=2))


@main.command()
@click.argument("recommendation_id")
@click.option("--status", type=click.Choice(["acknowledged", "dismissed"]), default=None)
@click.option(
    "--accuracy",
    type=click.Choice(["true-positive", "false-positive", "useful", "noisy"]),
    default=None,
)
@click.option("--database-url", default=None, help="Overrides WORKFLOWLENS_DATABASE_URL")
def feedback(
    recommendation_id: str,
    status: str | None,
    accuracy: str | None,
    database_url: str | None,
) -> None:
    """Acknowledge or dismiss a recommendation and/or label its accuracy."""
    rid = _parse_uuid(recommendation_id)

    async def _run() -> str:
        from workflowlens.deps import dispose_engine, get_recommendation_service, init_session_factory

        factory = init_session_factory(database_url)
        service = get_recommendation_service()
        try:
            async with factory() as session:
                async with session.begin():
                    rec = await service.update_status(
                        session, rid, status=status, accuracy=accuracy
                    )
                    return rec.status
        finally:
            await dispose_engine()

    try:
        new_status = asyncio.run(_run())
    except ServiceError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"{rid}: {new_status}")


@main.command()
@click.option("--database-url", default=None, help="Overrides WORKFLOWLENS_DATABASE_URL")
@click.option("--interval", type=float, default=None, help="Seconds between runs")
@click.option("--cutoff-minutes", type=int, default=None, help="Re-analyze projects older than this")
def watch(database_url: str | None, interval: float | None, cutoff_minutes: int | None) -> None:
    """Analyze due projects periodically until interrupted."""
    settings = _settings()

    async def _run() -> None:
        from workflowlens.deps import dispose_engine, get_recommendation_runner, init_session_factory
        from workflowlens.scheduler import create_scheduler

        factory = init_session_factory(database_url)
        scheduler = create_scheduler(
            factory,
            recommendation_runner=get_recommendation_runner(settings),
            interval=interval,
            cutoff_minutes=cutoff_minutes,
        )
        await scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            await scheduler.stop()
            await dispose_engine()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        log.info("watch.interrupted")


if __name__ == "__main__":
    main()
