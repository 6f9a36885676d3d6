"""Error types for exercise sync.

Provider outcomes (unavailable, unauthorized, fetch failure) are expected
conditions: the pipeline turns them into a sync status instead of letting
them escape. Store errors are fatal to the pass that hit them.
"""

from __future__ import annotations


class ExerciseSyncError(RuntimeError):
    """Base class for all exercise sync errors."""


class ProviderUnavailableError(ExerciseSyncError):
    """Raised when the health-data provider is not installed or not reachable."""


class AuthorizationRequiredError(ExerciseSyncError):
    """Raised when the provider is reachable but read grants are missing."""


class ProviderFetchError(ExerciseSyncError):
    """Raised by providers when reading sessions fails for any reason."""


class RecordStoreError(ExerciseSyncError):
    """Raised when the record store cannot complete an operation."""


class PipelineBusyError(ExerciseSyncError):
    """Raised when an operation needs the pipeline while a pass is in flight."""


class ResolutionStateError(ExerciseSyncError):
    """Raised when a choice is made while no conflict group is awaiting one."""


class InvalidSurvivorError(ExerciseSyncError, ValueError):
    """Raised when the chosen survivor is not a member of the current group."""

    def __init__(self, survivor_id: str, group_ids: list[str]) -> None:
        super().__init__(f"Record {survivor_id} is not part of the conflict group {group_ids}")
        self.survivor_id = survivor_id
        self.group_ids = group_ids


class ManualEntryError(ExerciseSyncError, ValueError):
    """Raised when a manual entry form fails validation.

    Attributes:
        field_errors: Mapping of form field name to a user-facing message
    """

    def __init__(self, field_errors: dict[str, str]) -> None:
        summary = "; ".join(f"{field}: {message}" for field, message in field_errors.items())
        super().__init__(f"Invalid manual entry: {summary}")
        self.field_errors = field_errors
