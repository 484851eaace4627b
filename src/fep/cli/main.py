"""Typer CLI entry point."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from fep.catalog.lifecycle import deactivate_past
from fep.catalog.query import WINDOWS, EventQueryService
from fep.config import Settings
from fep.db.client import apply_schema, db_cursor, get_connection
from fep.db.enrichment_log import PostgresEnrichmentLogStore
from fep.db.events import PostgresEventRepository
from fep.db.memory import MemoryEventRepository
from fep.db.repository import EnrichmentLogStore, EventRepository
from fep.enrichment.dispatch import dispatch_pending
from fep.enrichment.job import EnrichEventJob
from fep.enrichment.llm import build_client
from fep.enrichment.orchestrator import EnrichmentOrchestrator
from fep.enrichment.providers import AiEnrichmentProvider, RulesEnrichmentProvider
from fep.enrichment.queue import RecordingQueue, StaggeredDispatcher, WorkerPoolQueue
from fep.ingestion.adapters import JsonLinesAdapter
from fep.ingestion.runner import run_source
from fep.ingestion.upsert import UpsertCoordinator
from fep.models import CanonicalEvent
from fep.utils.logging import configure_logging, get_logger
from fep.utils.time import localize


app = typer.Typer(help="Family event pipeline CLI")
ingest_app = typer.Typer(help="Ingestion commands")
enrich_app = typer.Typer(help="Enrichment commands")
events_app = typer.Typer(help="Catalog commands")
db_app = typer.Typer(help="Database utilities")

app.add_typer(ingest_app, name="ingest")
app.add_typer(enrich_app, name="enrich")
app.add_typer(events_app, name="events")
app.add_typer(db_app, name="db")

logger = get_logger(__name__)


@app.callback()
def main() -> None:
    """Initialize logging for all commands."""
    settings = Settings()
    configure_logging(settings.log_level)


def build_job(
    settings: Settings,
    repo: EventRepository,
    logs: EnrichmentLogStore,
) -> EnrichEventJob:
    config = settings.enrichment_config()
    ai_provider = None
    if config.mode == "ai" or (config.mode == "hybrid" and config.ai_enabled):
        ai_provider = AiEnrichmentProvider(
            build_client(settings),
            logs,
            prompt_version=config.prompt_version,
            tz_name=settings.catalog_timezone,
        )
    orchestrator = EnrichmentOrchestrator(config, ai_provider, RulesEnrichmentProvider(logs))
    return EnrichEventJob(repo, orchestrator, max_attempts=config.max_attempts)


@ingest_app.command("file")
def ingest_file(
    source: str = typer.Argument(..., help="Source name, e.g. visitostrava"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON lines file"),
    days: Optional[int] = typer.Option(None, help="Window in days (default per source)"),
    dry_run: bool = typer.Option(False, help="Do not write to DB"),
) -> None:
    """Upsert normalized records exported by a scraper."""
    settings = Settings()
    window = days if days is not None else settings.days_for_source(source)

    if dry_run:
        repo = MemoryEventRepository()
        queue = RecordingQueue()
        dispatcher = StaggeredDispatcher(queue, settings.enrichment_dispatch_interval_seconds)
        upserter = UpsertCoordinator(repo, dispatch=dispatcher, tz_name=settings.catalog_timezone)
        adapter = JsonLinesAdapter(source, path, upserter, tz_name=settings.catalog_timezone)
        upserted = adapter.run(window)
        typer.echo(
            f"dry run: upserted={upserted} events={len(repo.all())} "
            f"enrichment_jobs={len(queue.items)}"
        )
        return

    # Enrichment workers write on their own connection while the upsert loop runs.
    with get_connection(settings, autocommit=True) as conn, get_connection(
        settings, autocommit=True
    ) as worker_conn:
        repo_pg = PostgresEventRepository(conn)
        job = build_job(
            settings,
            PostgresEventRepository(worker_conn),
            PostgresEnrichmentLogStore(worker_conn),
        )
        with WorkerPoolQueue(job.handle, workers=settings.enrichment_workers) as pool:
            dispatcher = StaggeredDispatcher(pool, settings.enrichment_dispatch_interval_seconds)
            upserter = UpsertCoordinator(
                repo_pg, dispatch=dispatcher, tz_name=settings.catalog_timezone
            )
            adapter = JsonLinesAdapter(source, path, upserter, tz_name=settings.catalog_timezone)
            upserted = run_source(adapter, window, conn, queue=pool)

    if upserted is None:
        typer.echo(f"Another {source} run is in progress; skipped.", err=True)
        raise typer.Exit(1)
    typer.echo(f"Upserted {upserted} events from {source}.")


@enrich_app.command("dispatch")
def enrich_dispatch(
    limit: Optional[int] = typer.Option(None, help="Max events to enrich (default 15)"),
    retry_failed: bool = typer.Option(False, help="Retry unenriched events with prior attempts"),
) -> None:
    """Enrich events that are missing a summary."""
    settings = Settings()
    with get_connection(settings, autocommit=True) as conn:
        repo = PostgresEventRepository(conn)
        job = build_job(settings, repo, PostgresEnrichmentLogStore(conn))
        with WorkerPoolQueue(job.handle, workers=settings.enrichment_workers) as pool:
            dispatcher = StaggeredDispatcher(pool, settings.enrichment_dispatch_interval_seconds)
            event_ids = dispatch_pending(
                repo,
                dispatcher,
                limit=limit if limit is not None else settings.enrichment_dispatch_limit,
                retry_failed=retry_failed,
                max_attempts=settings.enrichment_max_attempts,
            )
    typer.echo(f"Dispatched {len(event_ids)} enrichment jobs.")


@enrich_app.command("event")
def enrich_event(event_id: int = typer.Argument(..., help="Event id")) -> None:
    """Enrich one event now."""
    settings = Settings()
    with get_connection(settings, autocommit=True) as conn:
        repo = PostgresEventRepository(conn)
        enriched = build_job(settings, repo, PostgresEnrichmentLogStore(conn)).handle(event_id)
    typer.echo("enriched" if enriched else "skipped")


@events_app.command("deactivate-past")
def events_deactivate_past(
    grace_hours: Optional[int] = typer.Option(None, help="Hours past the end before deactivating"),
) -> None:
    """Mark past events as inactive."""
    settings = Settings()
    hours = grace_hours if grace_hours is not None else settings.deactivate_grace_hours
    with get_connection(settings, autocommit=True) as conn:
        count = deactivate_past(
            PostgresEventRepository(conn), grace_hours=hours, tz_name=settings.catalog_timezone
        )
    typer.echo(f"Deactivated {count} past events.")


def _age_label(event: CanonicalEvent) -> str:
    low = "?" if event.age_min is None else str(event.age_min)
    high = "?" if event.age_max is None else str(event.age_max)
    return f"{low}-{high}"


@events_app.command("list")
def events_list(
    window: str = typer.Argument("today", help="today, tomorrow, week or weekend"),
    age_min: Optional[int] = typer.Option(None, help="Youngest child age"),
    age_max: Optional[int] = typer.Option(None, help="Oldest child age"),
    limit: int = typer.Option(10, help="Max events"),
) -> None:
    """Print visible events for a time window."""
    if window not in WINDOWS:
        raise typer.BadParameter(f"window must be one of: {', '.join(WINDOWS)}")
    settings = Settings()
    with get_connection(settings, autocommit=True) as conn:
        service = EventQueryService(PostgresEventRepository(conn), tz_name=settings.catalog_timezone)
        events = service.events_in(window, age_min, age_max, limit)  # type: ignore[arg-type]
    for event in events:
        start = localize(event.start_at, settings.catalog_timezone).strftime("%Y-%m-%d %H:%M")
        typer.echo(f"{event.id}\t{start}\t{_age_label(event)}\t{event.title}")


@db_app.command("init")
def db_init() -> None:
    """Create tables and indexes."""
    apply_schema()
    logger.info("db.init.ok")


@db_app.command("check")
def db_check() -> None:
    """Check database connectivity."""
    try:
        with db_cursor() as cursor:
            cursor.execute("select 1")
            logger.info("db.check.ok")
    except Exception as exc:
        logger.error("db.check.failed: %s", exc)
        typer.echo(f"Database check failed: {exc}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
