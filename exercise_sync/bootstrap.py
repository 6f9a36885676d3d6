"""Wiring for the default pipeline: SQL store plus JSON-export provider."""

from __future__ import annotations

from datetime import timedelta

from exercise_sync.config.settings import Settings, settings
from exercise_sync.db.session import get_session_factory
from exercise_sync.integrations.file_provider import JsonExportProvider
from exercise_sync.integrations.mapper import resolve_timezone
from exercise_sync.reconciliation.pipeline import ReconciliationPipeline
from exercise_sync.store.sql import SqlRecordStore


def build_pipeline(config: Settings = settings) -> ReconciliationPipeline:
    return ReconciliationPipeline(
        store=SqlRecordStore(get_session_factory()),
        provider=JsonExportProvider(config.provider_export_path, granted=config.provider_granted),
        duplicate_threshold_minutes=config.duplicate_threshold_minutes,
        sync_window=timedelta(days=config.sync_window_days),
        local_zone=resolve_timezone(config.local_timezone),
    )
