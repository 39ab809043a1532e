from datetime import datetime
from pathlib import Path
from unittest import mock

import pytest
from typer.testing import CliRunner

from cli import app
from recordings.services.reconciliation_service import ReconciliationService
from tests.fixtures.fakes import FakeCloudStore, FakeLocalStore

runner = CliRunner()


@pytest.fixture
def local_store():
    return FakeLocalStore({
        "Alice(1234567890)_a.mp3": 500000,
        "1234567890_b.mp3": 100000,
        "notes.txt": 10,
    })


@pytest.fixture
def cloud_store():
    store = FakeCloudStore(["Alice(1234567890)_a.mp3"])
    store.object_path = lambda name: f"recordings/{name}"
    store.delete = mock.Mock(return_value=True)
    return store


@pytest.fixture
def container(local_store, cloud_store, session):
    container = mock.MagicMock()
    container.recordings_dir = Path("/rec")
    container.local_store = local_store
    container.cloud_store = cloud_store
    container.cloud_enabled = True
    container.session = session
    container.reconciliation_service = ReconciliationService(
        local_store=local_store,
        cloud_store=cloud_store,
        session=session,
        recordings_dir=Path("/rec"),
    )
    with mock.patch("cli.DependencyContainer", return_value=container):
        yield container


def _disable_cloud(container):
    container.cloud_store = None
    container.cloud_enabled = False
    container.reconciliation_service = None


def test_sync_uploads_missing_files(container, cloud_store):
    """Test sync command uploads what the cloud lacks."""
    result = runner.invoke(app, ["sync"])

    assert result.exit_code == 0
    assert "Local files: 3 | Cloud files: 1 | Uploaded: 2 | Failed: 0" in result.output
    assert cloud_store.upload_calls == ["1234567890_b.mp3", "notes.txt"]


def test_sync_reports_failures(container, cloud_store):
    cloud_store.fail_upload("notes.txt")
    result = runner.invoke(app, ["sync"])

    assert result.exit_code == 0
    assert "Failed: 1" in result.output
    assert "notes.txt: [server]" in result.output


def test_sync_cloud_listing_failure(container, cloud_store):
    cloud_store.list_error = ConnectionError("offline")
    result = runner.invoke(app, ["sync"])

    assert result.exit_code == 1
    assert "Sync failed: Cloud listing failed" in result.output


def test_sync_without_cloud_config(container):
    _disable_cloud(container)
    result = runner.invoke(app, ["sync"])

    assert result.exit_code == 1
    assert "Cloud storage is not configured" in result.output


def test_refresh_does_not_upload(container, cloud_store):
    result = runner.invoke(app, ["refresh"])

    assert result.exit_code == 0
    assert "Uploaded: 0" in result.output
    assert cloud_store.upload_calls == []


def test_upload_single_file(container, cloud_store):
    result = runner.invoke(app, ["upload", "1234567890_b.mp3"])

    assert result.exit_code == 0
    assert "File uploaded to cloud: https://storage.googleapis.com/test-bucket/recordings/1234567890_b.mp3" in result.output
    assert cloud_store.upload_calls == ["1234567890_b.mp3"]


def test_upload_already_uploaded(container, cloud_store):
    result = runner.invoke(app, ["upload", "Alice(1234567890)_a.mp3"])

    assert result.exit_code == 0
    assert "is already uploaded" in result.output
    assert cloud_store.upload_calls == []


def test_upload_unknown_file(container):
    result = runner.invoke(app, ["upload", "missing.mp3"])

    assert result.exit_code == 1
    assert "Error: Upload failed for missing.mp3: not found in /rec" in result.output


def test_upload_failure(container, cloud_store):
    cloud_store.fail_upload("1234567890_b.mp3")
    result = runner.invoke(app, ["upload", "1234567890_b.mp3"])

    assert result.exit_code == 1
    assert "Error: Upload failed for 1234567890_b.mp3" in result.output


def test_groups_local_with_upload_markers(container):
    result = runner.invoke(app, ["groups"])

    assert result.exit_code == 0
    assert "Recordings (2)" in result.output
    assert "Alice  1234567890 • 2 recordings" in result.output
    assert "Alice(1234567890)_a.mp3  488.3KB" in result.output
    assert "[cloud]" in result.output
    assert "1234567890_b.mp3  97.7KB • 2025-08-21 • 0:12 [local only]" in result.output


def test_groups_filtered(container):
    result = runner.invoke(app, ["groups", "--min-duration", "30"])

    assert result.exit_code == 0
    assert "Recordings (1)" in result.output
    assert "1234567890_b.mp3" not in result.output


def test_groups_cloud_source(container):
    result = runner.invoke(app, ["groups", "--source", "cloud"])

    assert result.exit_code == 0
    assert "Recordings (1)" in result.output
    assert "Alice  1234567890 • 1 recordings" in result.output
    assert "[cloud]" not in result.output


def test_groups_local_only_mode(container):
    _disable_cloud(container)
    result = runner.invoke(app, ["groups", "--month", "8"])

    assert result.exit_code == 0
    assert "Recordings (2)" in result.output
    assert "[local only]" not in result.output


def test_groups_invalid_month(container):
    result = runner.invoke(app, ["groups", "--month", "13"])
    assert result.exit_code != 0


def test_detect_lists_audio_files(container):
    result = runner.invoke(app, ["detect"])

    assert result.exit_code == 0
    assert "Found 2 audio files (3 files total)" in result.output
    assert "notes.txt" not in result.output


def test_detect_missing_folder(container, local_store):
    local_store.root_exists = False
    result = runner.invoke(app, ["detect"])

    assert result.exit_code == 1
    assert "Folder does not exist: /rec" in result.output


def test_delete(container, cloud_store):
    result = runner.invoke(app, ["delete", "a.mp3"])

    assert result.exit_code == 0
    cloud_store.delete.assert_called_once_with("recordings/a.mp3")
    assert "Deleted a.mp3 from cloud storage." in result.output


def test_delete_failure(container, cloud_store):
    cloud_store.delete.return_value = False
    result = runner.invoke(app, ["delete", "a.mp3"])

    assert result.exit_code == 1
    assert "Could not delete a.mp3." in result.output


def test_watch_runs_scheduler(container):
    service = container.reconciliation_service
    with mock.patch.object(service, "run_forever", new_callable=mock.AsyncMock) as run_forever:
        result = runner.invoke(app, ["watch"])

    assert result.exit_code == 0
    assert "Watching /rec every 30s." in result.output
    run_forever.assert_awaited_once()


def test_groups_unknown_contact_lists_choices(container):
    result = runner.invoke(app, ["groups", "--contact", "Zed"])

    assert result.exit_code == 0
    assert "Recordings (0)" in result.output
    assert "No recordings for 'Zed'. Known contacts: Alice, Unknown, Alice Smith, Bob" in result.output


def test_groups_local_falls_back_when_cloud_listing_fails(container, cloud_store):
    cloud_store.list_error = ConnectionError("offline")
    result = runner.invoke(app, ["groups"])

    assert result.exit_code == 0
    assert "Warning: Cloud listing failed: [network] offline" in result.output
    assert "Recordings (2)" in result.output
    assert "Alice  1234567890 • 2 recordings" in result.output
    assert "[cloud]" not in result.output
    assert "[local only]" not in result.output


def test_groups_cloud_source_fails_when_listing_fails(container, cloud_store):
    cloud_store.list_error = ConnectionError("offline")
    result = runner.invoke(app, ["groups", "--source", "cloud"])

    assert result.exit_code == 1
    assert "Error: Cloud listing failed" in result.output
