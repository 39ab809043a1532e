# tests/conftest.py
import logging
import os
import sys
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

# Make sure `src/` is on the import path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
sys.path.insert(0, os.path.join(ROOT, "src"))

from recordings.models import Contact, FileRecord, FileSource  # noqa: E402
from recordings.services.contact_directory import ContactDirectory  # noqa: E402
from recordings.services.sync_types import SyncSession  # noqa: E402
from tests.fixtures.fakes import (  # noqa: E402
    FakeCloudStore,
    FakeContactSource,
    FakeLocalStore,
    PlayerFactory,
)

from tests.fixtures.cloud_fixtures import mock_gcs_client, gcs_manager  # noqa: E402,F401


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests away from real buckets, folders and log directories."""
    for var in (
        "RECSYNC_GCS_BUCKET",
        "RECSYNC_GCS_PREFIX",
        "RECSYNC_GCS_CREDENTIALS_BASE64",
        "RECSYNC_GCS_CREDENTIALS_JSON",
        "GOOGLE_APPLICATION_CREDENTIALS",
        "RECSYNC_RECORDINGS_DIR",
        "RECSYNC_SYNC_INTERVAL",
        "RECSYNC_CONTACTS_FILE",
    ):
        monkeypatch.delenv(var, raising=False)

    from config.settings import Settings

    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    monkeypatch.setattr(Settings, "DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(Settings, "CONTACTS_FILE", tmp_path / "data" / "contacts.csv")


def make_local(name, size=16000, modified_at=None, directory="/rec"):
    return FileRecord(
        name=name,
        source=FileSource.LOCAL,
        size=size,
        path=f"{directory}/{name}",
        modified_at=modified_at or datetime(2025, 8, 21, 15, 28),
    )


def make_cloud(name, size=16000, created_at=None):
    return FileRecord(
        name=name,
        source=FileSource.CLOUD,
        size=size,
        path=f"recordings/{name}",
        url=f"https://storage.googleapis.com/test-bucket/recordings/{name}",
        created_at=created_at or datetime(2025, 8, 22, 10, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def local_record():
    return make_local


@pytest.fixture
def cloud_record():
    return make_cloud


@pytest.fixture
def contacts():
    return [
        Contact(display_name="Alice Smith", phone_numbers=("+91 98765 43210",)),
        Contact(given_name="Bob", phone_numbers=("0091-1244999799", "1112223333")),
        Contact(phone_numbers=("5556667777",)),
    ]


@pytest.fixture
def contact_directory(contacts):
    directory = ContactDirectory(FakeContactSource(contacts))
    directory.load()
    return directory


@pytest.fixture
def session(contact_directory):
    return SyncSession(contacts=contact_directory)


@pytest.fixture
def local_store():
    return FakeLocalStore()


@pytest.fixture
def cloud_store():
    return FakeCloudStore()


@pytest.fixture
def player_factory():
    return PlayerFactory()


@pytest.fixture
def mock_logger():
    """Provide a mock logger with assertion helpers."""
    logger = MagicMock(spec=logging.Logger)
    logger._calls = {"debug": [], "info": [], "warning": [], "error": []}

    def make_log_method(level):
        def log_method(msg, *args, **kwargs):
            logger._calls[level].append(str(msg))

        return log_method

    for level in logger._calls:
        setattr(logger, level, make_log_method(level))

    def assert_logged(level, substring):
        messages = logger._calls.get(level, [])
        assert any(substring in msg for msg in messages), (
            f"'{substring}' not found in {level} logs: {messages}"
        )

    logger.assert_logged = assert_logged
    return logger
