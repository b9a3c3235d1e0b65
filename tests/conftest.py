"""
Shared pytest fixtures.

Every test gets its own temporary data directory, so record files,
users.txt and exports never leak between tests or into the home directory.
"""
from datetime import datetime

import pytest

from healthdash.storage.accounts import AccountStore
from healthdash.storage.recordstore import RecordStore
from healthdash.storage.reminders import ReminderLog

TEST_USER = "alice"
TEST_PASSWORD = "s3cret"


@pytest.fixture
def data_dir(tmp_path):
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def export_dir(tmp_path):
    d = tmp_path / "exports"
    d.mkdir()
    return d


@pytest.fixture
def store(data_dir):
    return RecordStore(data_dir)


@pytest.fixture
def accounts(data_dir, store):
    return AccountStore(data_dir / "users.txt", store)


@pytest.fixture
def reminders(data_dir):
    return ReminderLog(data_dir / "reminders.txt")


@pytest.fixture
def ts():
    """Build a timestamp from 'YYYY-MM-DD HH:MM:SS'."""
    return lambda s: datetime.strptime(s, "%Y-%m-%d %H:%M:%S")
