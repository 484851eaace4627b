from datetime import datetime, timedelta

import orjson
from typer.testing import CliRunner

from fep.cli.main import app, build_job
from fep.config import Settings

from factories import PRAGUE, make_event


runner = CliRunner()


def _record(event_id: int, title: str, start: datetime) -> str:
    return orjson.dumps(
        {
            "source_url": f"https://www.visitostrava.eu/cz/akce/rodina/{event_id}-akce.html",
            "source_event_id": str(event_id),
            "title": title,
            "start_at": start.isoformat(),
            "venue": "Dům kultury Poklad",
        }
    ).decode("utf-8")


def test_ingest_file_dry_run(tmp_path):
    soon = datetime.now(PRAGUE).replace(microsecond=0) + timedelta(days=2)
    path = tmp_path / "export.jsonl"
    path.write_text(
        "\n".join(
            [
                _record(3001, "Pohádkové odpoledne", soon),
                _record(3002, "Pohádkové odpoledne", soon),
                _record(3003, "Daleko v budoucnu", soon + timedelta(days=90)),
            ]
        ),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["ingest", "file", "visitostrava", str(path), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "dry run: upserted=2 events=2 enrichment_jobs=1" in result.output


def test_events_list_rejects_unknown_window():
    result = runner.invoke(app, ["events", "list", "month"])
    assert result.exit_code == 2


class _Conn:
    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None


def test_ingest_file_gives_enrichment_workers_their_own_connection(tmp_path, monkeypatch):
    opened = []
    seen = {}

    def fake_get_connection(settings, autocommit=False):
        conn = _Conn()
        opened.append((conn, autocommit))
        return conn

    def fake_run_source(adapter, days, conn, queue=None):
        seen["run_conn"] = conn
        seen["upsert_conn"] = adapter.upserter.repo.conn
        seen["worker_conn"] = queue.handler.__self__.repo.conn
        return 0

    monkeypatch.setattr("fep.cli.main.get_connection", fake_get_connection)
    monkeypatch.setattr("fep.cli.main.run_source", fake_run_source)
    path = tmp_path / "export.jsonl"
    path.write_text("", encoding="utf-8")

    result = runner.invoke(app, ["ingest", "file", "visitostrava", str(path)])

    assert result.exit_code == 0, result.output
    assert len(opened) == 2
    assert all(autocommit for _, autocommit in opened)
    assert seen["upsert_conn"] is seen["run_conn"]
    assert seen["worker_conn"] is not seen["run_conn"]


def test_hybrid_job_without_api_key_falls_back_to_rules(repo, logs):
    settings = Settings(
        _env_file=None,
        ENRICHMENT_MODE="hybrid",
        ENRICHMENT_AI_ENABLED=True,
        ENRICHMENT_AI_PROVIDER="gemini",
        GOOGLE_API_KEY=None,
    )
    repo.put(make_event(1, title="Pohádka v parku"))

    assert build_job(settings, repo, logs).handle(1) is True

    event = repo.get(1)
    assert event.indoor_outdoor == "outdoor"
    assert event.needs_review is True
    assert [(e.mode, e.status) for e in logs.all()] == [("ai", "failed"), ("rules", "fallback")]
    assert "GOOGLE_API_KEY" in logs.all()[0].error
