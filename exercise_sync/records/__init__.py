from exercise_sync.records.models import DataSource, ExerciseRecord, ExerciseType

__all__ = ["DataSource", "ExerciseRecord", "ExerciseType"]
