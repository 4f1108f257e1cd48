"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from status_notifier.utils.sanitization import clear_registered_secrets
from tests.fixtures.notification_mocks import FakeClock, RecordingSleep


@pytest.fixture(autouse=True)
def _forget_secrets() -> Iterator[None]:
    """Secrets registered while validating configs must not leak between tests."""
    yield
    clear_registered_secrets()


@pytest.fixture
def clock() -> FakeClock:
    """Provide a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    """Provide a sleep that records delays instead of waiting."""
    return RecordingSleep()
