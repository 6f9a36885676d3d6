"""Tests for the exercise-sync command line."""

import asyncio
from datetime import datetime, timezone

import pytest
from typer.testing import CliRunner

from exercise_sync import cli
from exercise_sync.reconciliation.pipeline import ReconciliationPipeline
from exercise_sync.records.models import ExerciseType
from exercise_sync.store.memory import InMemoryRecordStore
from tests.factories import FakeProvider, make_raw_session, make_record

runner = CliRunner()

NOW = datetime(2024, 1, 15, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def cli_store():
    return InMemoryRecordStore()


@pytest.fixture
def cli_provider():
    return FakeProvider()


@pytest.fixture
def logger_calls():
    return []


@pytest.fixture(autouse=True)
def patched_pipeline(monkeypatch, cli_store, cli_provider, logger_calls):
    """Every command builds its own pipeline; they all share one store."""

    def _build(config):
        return ReconciliationPipeline(cli_store, cli_provider, local_zone=timezone.utc, clock=lambda: NOW)

    monkeypatch.setattr(cli, "build_pipeline", _build)
    monkeypatch.setattr(cli, "setup_logger", lambda **kwargs: logger_calls.append(kwargs))


def _stored(store):
    return asyncio.run(store.list_all())


class TestAdd:
    def test_add_saves_manual_record(self, cli_store):
        """Positional type and duration plus options build the record."""
        result = runner.invoke(cli.app, ["add", "Swimming", "45", "--start", "2024-01-15T07:00:00", "--distance", "1.5"])

        assert result.exit_code == 0, result.output
        assert "Saved" in result.output
        [record] = _stored(cli_store)
        assert record.exercise_type is ExerciseType.SWIMMING
        assert record.duration_minutes == 45
        assert record.distance_km == 1.5
        assert record.start_time == datetime(2024, 1, 15, 7, 0)

    def test_add_reports_field_errors(self, cli_store):
        """Each invalid field is printed and nothing is stored."""
        result = runner.invoke(cli.app, ["add", "Running", "soon", "--calories", "many"])

        assert result.exit_code == 1
        assert "duration_minutes" in result.output
        assert "calories" in result.output
        assert _stored(cli_store) == []


class TestSync:
    def test_unavailable_provider(self, cli_provider):
        """Unavailable provider is a warning, not a failure."""
        cli_provider.available = False
        result = runner.invoke(cli.app, ["sync"])
        assert result.exit_code == 0
        assert "Provider unavailable" in result.output

    def test_missing_grants(self, cli_provider):
        """Missing grants exit with status 2."""
        cli_provider.granted = False
        result = runner.invoke(cli.app, ["sync"])
        assert result.exit_code == 2

    def test_sync_stores_provider_sessions(self, cli_store, cli_provider):
        """Fetched sessions land in the store."""
        cli_provider.sessions = [
            make_raw_session("hc-1", 56, datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc), datetime(2024, 1, 15, 9, 40, tzinfo=timezone.utc))
        ]

        result = runner.invoke(cli.app, ["sync"])

        assert result.exit_code == 0, result.output
        assert "fetched=1" in result.output
        assert [record.id for record in _stored(cli_store)] == ["hc-1"]

    def test_fetch_failure_is_reported(self, cli_provider):
        """A failed read is reported and the pass still completes."""
        cli_provider.error = RuntimeError("device gone")
        result = runner.invoke(cli.app, ["sync"])
        assert result.exit_code == 0
        assert "Could not read provider data" in result.output


class TestResolve:
    @pytest.fixture
    def conflicting(self, cli_store):
        asyncio.run(
            cli_store.upsert_many(
                [
                    make_record("run", start="09:00", duration=60),
                    make_record("yoga", exercise_type=ExerciseType.YOGA, start="09:30", duration=60),
                ]
            )
        )

    def test_conflicts_lists_group_count(self, conflicting):
        """Conflicts command reports how many groups exist."""
        result = runner.invoke(cli.app, ["conflicts"])
        assert result.exit_code == 0
        assert "1 conflict group(s)" in result.output

    def test_resolve_keeps_survivor(self, cli_store, conflicting):
        """Resolve keeps the chosen record only."""
        result = runner.invoke(cli.app, ["resolve", "yoga"])

        assert result.exit_code == 0, result.output
        assert "Kept yoga" in result.output
        assert [record.id for record in _stored(cli_store)] == ["yoga"]

    def test_resolve_rejects_foreign_id(self, cli_store, conflicting):
        """A non-member id exits 1 and deletes nothing."""
        result = runner.invoke(cli.app, ["resolve", "swim"])
        assert result.exit_code == 1
        assert len(_stored(cli_store)) == 2

    def test_resolve_without_conflicts(self):
        """Nothing to resolve is not an error."""
        result = runner.invoke(cli.app, ["resolve", "run"])
        assert result.exit_code == 0
        assert "No conflicts to resolve" in result.output


class TestDelete:
    def test_delete_requires_target(self):
        """Delete without an id or --all fails."""
        result = runner.invoke(cli.app, ["delete"])
        assert result.exit_code == 1

    def test_delete_one(self, cli_store):
        """Delete by id leaves the other records."""
        asyncio.run(cli_store.upsert_many([make_record("a", start="07:00"), make_record("b", start="12:00")]))
        result = runner.invoke(cli.app, ["delete", "a"])
        assert result.exit_code == 0
        assert [record.id for record in _stored(cli_store)] == ["b"]

    def test_delete_all(self, cli_store):
        """--all empties the store."""
        asyncio.run(cli_store.upsert_many([make_record("a", start="07:00"), make_record("b", start="12:00")]))
        result = runner.invoke(cli.app, ["delete", "--all"])
        assert result.exit_code == 0
        assert _stored(cli_store) == []


class TestLogging:
    def test_debug_steps_forwarded(self, logger_calls):
        """--debug-step opens individual pipeline steps to debug output."""
        result = runner.invoke(cli.app, ["--debug-step", "DEDUP", "--debug-step", "CONFLICTS", "list"])

        assert result.exit_code == 0, result.output
        assert list(logger_calls[0]["debug_steps"]) == ["DEDUP", "CONFLICTS"]

    def test_verbose_sets_debug_level(self, logger_calls):
        """--verbose turns on debug logging everywhere."""
        runner.invoke(cli.app, ["--verbose", "list"])
        assert logger_calls[0]["level"] == "DEBUG"
        assert list(logger_calls[0]["debug_steps"]) == []
