"""
Unit tests for the expiry and cleanup Celery tasks.

Tasks resolve their services from flask_app.container, which is patched
with mocks here.
"""

from datetime import timedelta
from unittest.mock import MagicMock, Mock, patch

import pytest

from filevault.domain.errors import StorageUnavailableError
from filevault.domain.file_storage import FileReaper, ReapResult
from filevault.infrastructure.celery_expiry_scheduler import CeleryExpiryScheduler


@pytest.fixture
def mock_reaper():
    mock = Mock(spec=FileReaper)
    mock.reap.return_value = ReapResult("f1", metadata_deleted=True, blob_deleted=True)
    mock.reap_expired.return_value = 3
    mock.reap_orphaned_blobs.return_value = 2
    return mock


@pytest.fixture
def mock_scheduler():
    mock = Mock(spec=CeleryExpiryScheduler)
    mock.claim.return_value = True
    return mock


@pytest.fixture
def mock_flask_app(mock_reaper, mock_scheduler):
    app = MagicMock()
    services = {FileReaper: mock_reaper, CeleryExpiryScheduler: mock_scheduler}
    app.container.resolve.side_effect = services.__getitem__
    app.vault_config.blob_prefix = "uploads"
    app.vault_config.orphan_grace = timedelta(hours=1)
    return app


class TestExpireFile:
    def test_claims_then_reaps(self, mock_flask_app, mock_scheduler, mock_reaper):
        with patch("filevault.celery_app.flask_app", mock_flask_app):
            from filevault.tasks.expiry_task import expire_file

            result = expire_file.apply(args=["f1"], task_id="task-1").get()

        mock_scheduler.claim.assert_called_once_with("f1", "task-1")
        mock_reaper.reap.assert_called_once_with("f1", trigger="timer")
        assert result == {"file_id": "f1", "expired": True, "blob_deleted": True}

    def test_cancelled_timer_is_noop(self, mock_flask_app, mock_scheduler, mock_reaper):
        mock_scheduler.claim.return_value = False

        with patch("filevault.celery_app.flask_app", mock_flask_app):
            from filevault.tasks.expiry_task import expire_file

            result = expire_file.apply(args=["f1"], task_id="task-1").get()

        mock_reaper.reap.assert_not_called()
        assert result["expired"] is False

    def test_store_outage_is_left_to_sweep(self, mock_flask_app, mock_reaper):
        mock_reaper.reap.side_effect = StorageUnavailableError("down")

        with patch("filevault.celery_app.flask_app", mock_flask_app):
            from filevault.tasks.expiry_task import expire_file

            result = expire_file.apply(args=["f1"], task_id="task-1").get()

        assert result["expired"] is False


class TestCleanupExpiredFiles:
    def test_reports_counts(self, mock_flask_app, mock_reaper):
        with patch("filevault.celery_app.flask_app", mock_flask_app):
            from filevault.tasks.cleanup_task import cleanup_expired_files

            result = cleanup_expired_files.apply().get()

        assert result == {
            "expired_files_cleaned": 3,
            "orphaned_blobs_cleaned": 2,
            "errors": [],
        }
        mock_reaper.reap_orphaned_blobs.assert_called_once_with(
            "uploads", timedelta(hours=1)
        )

    def test_step_failures_are_collected(self, mock_reaper):
        from filevault.tasks.cleanup_task import run_cleanup

        mock_reaper.reap_expired.side_effect = StorageUnavailableError("redis down")

        result = run_cleanup(mock_reaper, "uploads", timedelta(hours=1))

        assert result["expired_files_cleaned"] == 0
        assert result["orphaned_blobs_cleaned"] == 2
        assert len(result["errors"]) == 1
        assert "redis down" in result["errors"][0]
