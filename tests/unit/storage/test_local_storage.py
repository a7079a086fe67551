"""Unit tests for LocalStorage backend."""
import logging
import os

import pytest

from photoshare.infrastructure.storage import BlobNotFoundError, LocalStorage, UploadError


@pytest.fixture
def temp_storage(tmp_path):
    """Create a LocalStorage instance rooted in a temporary directory."""
    return LocalStorage(tmp_path / "blobs")


class TestLocalStorageUpload:
    """Test upload functionality."""

    def test_upload_creates_file(self, temp_storage, run_async):
        """Upload should create the blob under the root."""
        result = run_async(temp_storage.upload("abc.jpg", b"test content"))

        assert result == "abc.jpg"
        assert temp_storage.exists("abc.jpg") is True
        assert (temp_storage.root / "abc.jpg").read_bytes() == b"test content"

    def test_root_is_created(self, tmp_path):
        LocalStorage(tmp_path / "a" / "b")
        assert (tmp_path / "a" / "b").is_dir()

    def test_upload_never_overwrites(self, temp_storage, run_async):
        """An existing key is rejected instead of replaced."""
        run_async(temp_storage.upload("same.png", b"first"))

        with pytest.raises(UploadError):
            run_async(temp_storage.upload("same.png", b"second"))

        assert run_async(temp_storage.download("same.png")) == b"first"


class TestLocalStorageDownload:

    def test_download_roundtrip(self, temp_storage, run_async):
        run_async(temp_storage.upload("k", b"\x00\x01\x02"))
        assert run_async(temp_storage.download("k")) == b"\x00\x01\x02"

    def test_download_missing_raises(self, temp_storage, run_async):
        with pytest.raises(BlobNotFoundError):
            run_async(temp_storage.download("missing.jpg"))

    def test_get_path_inside_root(self, temp_storage, run_async):
        run_async(temp_storage.upload("p.gif", b"GIF89a"))
        path = temp_storage.get_path("p.gif")
        assert path.parent == temp_storage.root


class TestLocalStorageDelete:

    def test_delete_existing(self, temp_storage, run_async):
        run_async(temp_storage.upload("gone.jpg", b"x"))
        assert run_async(temp_storage.delete("gone.jpg")) is True
        assert temp_storage.exists("gone.jpg") is False

    def test_delete_missing_returns_false(self, temp_storage, run_async):
        assert run_async(temp_storage.delete("never.jpg")) is False


class TestPathTraversal:
    """Keys resolving outside the root are treated as missing and logged."""

    @pytest.mark.parametrize("key", [
        "../secret.txt",
        "../../etc/passwd",
        "sub/../../secret.txt",
        "/etc/passwd",
    ])
    def test_escape_is_not_found(self, temp_storage, key, caplog):
        secret = temp_storage.root.parent / "secret.txt"
        secret.write_bytes(b"top secret")

        with caplog.at_level(logging.WARNING, logger="photoshare.security"):
            with pytest.raises(BlobNotFoundError):
                temp_storage.get_path(key)

        assert any("traversal" in r.getMessage().lower() for r in caplog.records)

    def test_escape_on_delete_leaves_file(self, temp_storage, run_async):
        secret = temp_storage.root.parent / "keep.txt"
        secret.write_bytes(b"keep")

        with pytest.raises(BlobNotFoundError):
            run_async(temp_storage.delete("../keep.txt"))
        assert secret.exists()

    def test_escape_on_upload_writes_nothing(self, temp_storage, run_async):
        with pytest.raises(BlobNotFoundError):
            run_async(temp_storage.upload("../planted.jpg", b"x"))
        assert not (temp_storage.root.parent / "planted.jpg").exists()

    @pytest.mark.parametrize("key", ["", "bad\x00name"])
    def test_malformed_keys(self, temp_storage, key):
        with pytest.raises(BlobNotFoundError):
            temp_storage.get_path(key)
        assert temp_storage.exists(key) is False

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlink_out_of_root(self, temp_storage, tmp_path):
        outside = tmp_path / "outside.jpg"
        outside.write_bytes(b"x")
        os.symlink(outside, temp_storage.root / "link.jpg")

        with pytest.raises(BlobNotFoundError):
            temp_storage.get_path("link.jpg")
