"""Tests for the staging directory."""

from pathlib import Path

import pytest

from albumsync.client.sync import LocalIOError, StagingDirectory, SyncError


class TestStagingDirectory:
    """Tests for StagingDirectory."""

    def test_created_lazily(self, tmp_path: Path) -> None:
        """Should not create anything until a file is staged."""
        with StagingDirectory(root=tmp_path) as staging:
            assert staging.path is None
            assert list(tmp_path.iterdir()) == []

        assert list(tmp_path.iterdir()) == []

    def test_write_and_cleanup(self, tmp_path: Path) -> None:
        """Should stage files below the root and remove them on exit."""
        with StagingDirectory(root=tmp_path) as staging:
            staged = staging.write("000000", "photo.jpg", b"content")

            assert staged.read_bytes() == b"content"
            assert staged.name == "photo.jpg"
            assert staging.path is not None
            assert staging.path.parent == tmp_path
            assert staging.path.name.startswith("albumsync-")
            staging_path = staging.path

        assert not staging_path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_same_filename_in_different_slots(self, tmp_path: Path) -> None:
        """Should keep same-named files apart."""
        with StagingDirectory(root=tmp_path) as staging:
            first = staging.write("000000", "IMG_0001.jpg", b"first")
            second = staging.write("000001", "IMG_0001.jpg", b"second")

            assert first != second
            assert first.read_bytes() == b"first"
            assert second.read_bytes() == b"second"

    def test_release(self, tmp_path: Path) -> None:
        """Should remove a staged file and its slot."""
        with StagingDirectory(root=tmp_path) as staging:
            staged = staging.write("000000", "photo.jpg", b"content")
            staging.release(staged)

            assert not staged.exists()
            assert not staged.parent.exists()
            # Releasing twice is harmless
            staging.release(staged)

    def test_cleanup_on_exception(self, tmp_path: Path) -> None:
        """Should remove staged files when the scope exits with an error."""
        with pytest.raises(RuntimeError):
            with StagingDirectory(root=tmp_path) as staging:
                staging.write("000000", "photo.jpg", b"content")
                raise RuntimeError("boom")

        assert list(tmp_path.iterdir()) == []

    def test_write_outside_scope(self, tmp_path: Path) -> None:
        """Should refuse to stage outside the context."""
        staging = StagingDirectory(root=tmp_path)
        with pytest.raises(SyncError):
            staging.write("000000", "photo.jpg", b"content")

        with staging:
            pass
        with pytest.raises(SyncError):
            staging.write("000000", "photo.jpg", b"content")

    def test_write_error(self, tmp_path: Path) -> None:
        """Should raise LocalIOError when the file cannot be written."""
        with StagingDirectory(root=tmp_path) as staging:
            with pytest.raises(LocalIOError, match="Cannot stage"):
                staging.write("000000", "missing-dir/photo.jpg", b"content")
