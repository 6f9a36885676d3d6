"""Health-data provider contract.

Providers hand back raw exercise sessions recorded by other apps on the
device (Samsung Health, Garmin, ...). Every call may suspend on I/O.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field, field_validator, model_validator


class RawExerciseSession(BaseModel):
    """Exercise session as reported by the provider."""

    id: str = Field(min_length=1)
    origin: str = Field(description="Package name of the app that recorded the session")
    exercise_type_code: int
    start_time: datetime
    end_time: datetime
    title: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_aware(cls, value: datetime) -> datetime:
        """Provider timestamps are instants and must carry a timezone."""
        if value.tzinfo is None:
            raise ValueError("provider timestamps must be timezone-aware")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> RawExerciseSession:
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


@runtime_checkable
class HealthDataProvider(Protocol):
    async def is_available(self) -> bool:
        """Whether the provider is installed and reachable."""
        ...

    async def has_grants(self) -> bool:
        """Whether every read permission the sync needs has been granted."""
        ...

    async def request_grants(self) -> None:
        """Hand off to the provider's consent flow."""
        ...

    async def read_sessions(self, start: datetime, end: datetime) -> list[RawExerciseSession]:
        """Read sessions starting within [start, end].

        Raises:
            ProviderFetchError: If the sessions cannot be read
        """
        ...
