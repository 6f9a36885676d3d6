"""Shared fixtures for exercise sync tests."""

from datetime import datetime, timezone

import pytest

from exercise_sync.errors import ProviderFetchError
from exercise_sync.store.memory import InMemoryRecordStore
from tests.factories import FakeProvider


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def failing_provider():
    return FakeProvider(error=ProviderFetchError("boom"))


@pytest.fixture
def fixed_now():
    return datetime(2024, 1, 15, 18, 0, tzinfo=timezone.utc)
