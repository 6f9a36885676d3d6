"""Provider backed by a JSON export of device exercise sessions.

The export is either a list of sessions or an object with a "sessions" key,
each session shaped like RawExerciseSession.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from pathlib import Path

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from exercise_sync.errors import AuthorizationRequiredError, ProviderFetchError, ProviderUnavailableError
from exercise_sync.integrations.provider import RawExerciseSession

_SESSIONS_ADAPTER = TypeAdapter(list[RawExerciseSession])


class JsonExportProvider:
    def __init__(self, path: str | Path | None, granted: bool = True) -> None:
        self.path = Path(path) if path else None
        self.granted = granted

    async def is_available(self) -> bool:
        return self.path is not None and self.path.is_file()

    async def has_grants(self) -> bool:
        return self.granted

    async def request_grants(self) -> None:
        logger.info("Access to the export file is granted through configuration (PROVIDER_GRANTED)")

    async def read_sessions(self, start: datetime, end: datetime) -> list[RawExerciseSession]:
        if not await self.is_available():
            raise ProviderUnavailableError(f"Provider export not found: {self.path}")
        if not self.granted:
            raise AuthorizationRequiredError("Reading the provider export has not been granted")
        sessions = await asyncio.to_thread(self._load, self.path)
        in_window = [session for session in sessions if start <= session.start_time <= end]
        logger.info(f"[SYNC] Read {len(in_window)} of {len(sessions)} exported sessions between {start.isoformat()} and {end.isoformat()}")
        return in_window

    @staticmethod
    def _load(path: Path) -> list[RawExerciseSession]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ProviderFetchError(f"Cannot read provider export {path}: {e}") from e

        if isinstance(payload, dict):
            payload = payload.get("sessions", [])
        try:
            return _SESSIONS_ADAPTER.validate_python(payload)
        except ValidationError as e:
            raise ProviderFetchError(f"Invalid provider export {path}: {e}") from e
