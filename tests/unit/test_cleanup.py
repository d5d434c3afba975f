"""
Unit tests for the cleanup coordinator.
"""

import os
from unittest.mock import patch

import pytest

from workers.extraction.cleanup import CleanupCoordinator, delete_file, delete_files

pytestmark = pytest.mark.unit


@pytest.fixture
def temp_files(tmp_path):
    paths = []
    for i in range(3):
        path = tmp_path / f"file_{i}.png"
        path.write_bytes(b"data")
        paths.append(str(path))
    return paths


class TestDeleteFile:

    def test_deletes_existing(self, temp_files):
        assert delete_file(temp_files[0]) is True
        assert not os.path.exists(temp_files[0])

    def test_missing_file_is_not_an_error(self, tmp_path):
        assert delete_file(tmp_path / "missing.png") is False

    def test_os_error_is_logged_not_raised(self, temp_files):
        with patch("workers.extraction.cleanup.os.remove", side_effect=PermissionError("denied")):
            assert delete_file(temp_files[0]) is False

    def test_delete_files_counts(self, temp_files, tmp_path):
        assert delete_files(temp_files + [str(tmp_path / "missing.png")]) == 3


class TestCleanupCoordinator:
    """Every registered path is deleted exactly once on every exit path."""

    def test_deletes_on_success(self, temp_files):
        with CleanupCoordinator() as cleanup:
            cleanup.register_all(temp_files)

        assert all(not os.path.exists(p) for p in temp_files)

    def test_deletes_on_exception(self, temp_files):
        with pytest.raises(RuntimeError):
            with CleanupCoordinator() as cleanup:
                cleanup.register_all(temp_files)
                raise RuntimeError("stage failed")

        assert all(not os.path.exists(p) for p in temp_files)

    def test_exception_not_masked_by_delete_failure(self, temp_files):
        with patch("workers.extraction.cleanup.os.remove", side_effect=OSError("busy")):
            with pytest.raises(ValueError, match="primary"):
                with CleanupCoordinator() as cleanup:
                    cleanup.register(temp_files[0])
                    raise ValueError("primary")

    def test_duplicate_registration_kept_once(self, temp_files):
        cleanup = CleanupCoordinator()
        cleanup.register(temp_files[0])
        cleanup.register(temp_files[0])

        assert cleanup.registered == [temp_files[0]]

    def test_each_path_deleted_exactly_once(self, temp_files):
        with patch("workers.extraction.cleanup.os.remove") as mock_remove:
            cleanup = CleanupCoordinator()
            cleanup.register_all(temp_files + temp_files)
            cleanup.release()
            cleanup.release()

        assert mock_remove.call_count == len(temp_files)
        assert sorted(c.args[0] for c in mock_remove.call_args_list) == sorted(temp_files)

    def test_release_returns_deleted_count(self, temp_files):
        cleanup = CleanupCoordinator()
        cleanup.register_all(temp_files)

        assert cleanup.release() == 3
        assert cleanup.release() == 0

    def test_register_after_release_deletes_immediately(self, temp_files):
        cleanup = CleanupCoordinator()
        cleanup.release()

        cleanup.register(temp_files[0])

        assert not os.path.exists(temp_files[0])
