from exercise_sync.store.base import RecordStore
from exercise_sync.store.memory import InMemoryRecordStore
from exercise_sync.store.sql import SqlRecordStore

__all__ = ["InMemoryRecordStore", "RecordStore", "SqlRecordStore"]
