"""Security tests for file upload spoofing protection.

Tests verify that:
1. Scripts, markup and executables disguised as images are rejected
2. A rejected upload leaves neither a database row nor a blob
3. Valid images are accepted whatever type the client declares
4. Client filenames cannot steer where blobs are written
"""
import io

import pytest
from fastapi.testclient import TestClient

from photoshare.infrastructure.repositories import PhotoRepository


@pytest.fixture
def uploader(client, make_user, login) -> TestClient:
    make_user("mallory")
    return login("mallory")


def post(client, content, filename, content_type):
    return client.post(
        "/photos",
        data={"title": "innocent"},
        files={"file": (filename, io.BytesIO(content), content_type)},
    )


def stored_blobs(env):
    return [p for d in (env["uploads_dir"], env["thumbnails_dir"]) if d.exists() for p in d.iterdir()]


class TestUploadSpoofingProtection:
    """Test protection against malicious file uploads."""

    @pytest.mark.parametrize("content,filename,content_type", [
        (b"<?php echo 'HACKED'; system($_GET['cmd']); ?>", "malicious.jpg", "image/jpeg"),
        (b"<html><script>alert('XSS')</script></html>", "xss.png", "image/png"),
        (b"MZ" + b"\x00" * 100, "virus.gif", "image/gif"),
        (b"<svg xmlns='http://www.w3.org/2000/svg'><script>alert(1)</script></svg>", "a.svg", "image/svg+xml"),
        (b"just some text", "x.jpg", "image/jpeg"),
    ])
    def test_disguised_payload_rejected(self, uploader, db, patched_config, content, filename, content_type):
        response = post(uploader, content, filename, content_type)

        assert response.status_code == 400
        assert "JPEG, PNG, GIF and WebP" in response.json()["detail"]
        assert PhotoRepository(db).count() == 0
        assert stored_blobs(patched_config) == []

    @pytest.mark.parametrize("fixture_name,expected", [
        ("jpeg_bytes", "image/jpeg"),
        ("png_bytes", "image/png"),
        ("gif_bytes", "image/gif"),
        ("webp_bytes", "image/webp"),
    ])
    def test_valid_images_accepted(self, uploader, request, fixture_name, expected):
        content = request.getfixturevalue(fixture_name)
        response = post(uploader, content, "upload.bin", "application/octet-stream")

        assert response.status_code == 201
        assert response.json()["content_type"] == expected

    def test_traversal_filename_cannot_escape(self, uploader, jpeg_bytes, patched_config):
        response = post(uploader, jpeg_bytes, "../../../../owned.jpg", "image/jpeg")

        # Rejected outright, or stored under a random key if the name was sanitised in transit
        assert response.status_code in (201, 400)
        for blob in stored_blobs(patched_config):
            assert "owned" not in blob.name
        assert not (patched_config["base_dir"] / "owned.jpg").exists()

    def test_filename_kept_for_display_only(self, uploader, db, jpeg_bytes, patched_config):
        response = post(uploader, jpeg_bytes, "My Holiday (1).JPG", "image/jpeg")

        assert response.status_code == 201
        photo = PhotoRepository(db).get_by_id(response.json()["id"])
        assert photo["original_filename"] == "My Holiday (1).JPG"
        assert "holiday" not in photo["storage_key"]
        assert (patched_config["uploads_dir"] / photo["storage_key"]).is_file()
