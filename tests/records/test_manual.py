"""Tests for manual entry validation."""

from datetime import datetime, timezone

import pytest

from exercise_sync.errors import ManualEntryError
from exercise_sync.records.manual import ManualEntry
from exercise_sync.records.models import DataSource, ExerciseType


class TestManualEntry:
    def test_builds_manual_record(self):
        """A valid form builds a Manual record with trimmed notes."""
        entry = ManualEntry(
            exercise_type="hiking",
            duration_minutes="90",
            start_time=datetime(2024, 1, 13, 8, 15),
            distance_km="12.5",
            calories="700",
            notes="  Ridge loop  ",
        )

        record = entry.to_record(id_factory=lambda: "fixed-id")

        assert record.id == "fixed-id"
        assert record.exercise_type is ExerciseType.HIKING
        assert record.source is DataSource.MANUAL
        assert record.duration_minutes == 90
        assert record.distance_km == 12.5
        assert record.calories == 700
        assert record.notes == "Ridge loop"

    def test_start_time_defaults_to_now(self):
        """Missing start time falls back to now."""
        record = ManualEntry(exercise_type="Yoga", duration_minutes=20).to_record(now=lambda: datetime(2024, 2, 1, 7, 0))
        assert record.start_time == datetime(2024, 2, 1, 7, 0)

    def test_blank_optionals_are_absent(self):
        """Blank optional fields are left empty."""
        record = ManualEntry(exercise_type="Walking", duration_minutes=15, distance_km="", calories=" ", notes="").to_record(
            now=lambda: datetime(2024, 2, 1, 7, 0)
        )
        assert record.distance_km is None
        assert record.calories is None
        assert record.notes is None

    def test_ids_are_unique(self):
        """Every record gets a fresh id."""
        entry = ManualEntry(exercise_type="Running", duration_minutes=30, start_time=datetime(2024, 1, 1, 7, 0))
        assert entry.to_record().id != entry.to_record().id

    def test_required_fields(self):
        """Type and duration are required."""
        with pytest.raises(ManualEntryError) as exc_info:
            ManualEntry().to_record()
        assert exc_info.value.field_errors == {
            "exercise_type": "Exercise type is required",
            "duration_minutes": "Duration is required",
        }

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("distance_km", "far", "Distance must be a valid number"),
            ("distance_km", "-2", "Distance cannot be negative"),
            ("distance_km", "nan", "Distance must be a valid number"),
            ("calories", "lots", "Calories must be a valid number"),
            ("calories", "-10", "Calories cannot be negative"),
            ("duration_minutes", "0", "Duration must be greater than zero"),
            ("duration_minutes", "half an hour", "Duration must be a whole number of minutes"),
        ],
    )
    def test_field_messages(self, field, value, message):
        """Each invalid value gets its own message."""
        values = {"exercise_type": "Running", "duration_minutes": "30", field: value}
        assert ManualEntry(**values).field_errors() == {field: message}

    def test_unknown_type(self):
        """Unknown types list the allowed labels."""
        errors = ManualEntry(exercise_type="Cycling", duration_minutes=30).field_errors()
        assert errors["exercise_type"].startswith("Exercise type must be one of")

    def test_aware_start_time_rejected(self):
        """Start time must be wall-clock."""
        entry = ManualEntry(exercise_type="Running", duration_minutes=30, start_time=datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert "start_time" in entry.field_errors()
