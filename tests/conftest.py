"""Test configuration and fixtures for PhotoShare.

This module provides isolated test environments:
- Temporary database (SQLite)
- Temporary originals/thumbnails directories
- Users, services and image payloads for each test
"""
import asyncio
import io
import sys
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure photoshare is importable
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(scope="function")
def isolated_environment(tmp_path: Path) -> Dict:
    """Create completely isolated environment for a single test.

    Returns:
        Dict with paths: db_path, uploads_dir, thumbnails_dir, base_dir
    """
    return {
        "db_path": tmp_path / "test.db",
        "uploads_dir": tmp_path / "uploads" / "photos",
        "thumbnails_dir": tmp_path / "uploads" / "thumbnails",
        "base_dir": tmp_path,
    }


@pytest.fixture(scope="function")
def patched_config(isolated_environment: Dict, monkeypatch):
    """Point configuration at the isolated directories."""
    import photoshare.config as config

    monkeypatch.setattr(config, "UPLOADS_DIR", isolated_environment["uploads_dir"])
    monkeypatch.setattr(config, "THUMBNAILS_DIR", isolated_environment["thumbnails_dir"])
    monkeypatch.setattr(config, "DATABASE_PATH", isolated_environment["db_path"])
    monkeypatch.setattr(config, "DATA_DIR", isolated_environment["base_dir"])

    yield isolated_environment


@pytest.fixture(scope="function")
def fresh_database(patched_config: Dict) -> Path:
    """Initialize fresh database with schema for each test."""
    from photoshare.database import init_db

    init_db()
    return patched_config["db_path"]


@pytest.fixture(scope="function")
def db(fresh_database: Path):
    """Open connection to the fresh database."""
    from photoshare.database import create_connection

    conn = create_connection()
    yield conn
    conn.close()


@pytest.fixture
def run_async():
    """Helper to run async functions in sync context."""
    def _run(coro):
        return asyncio.run(coro)
    return _run


@pytest.fixture(scope="function")
def make_user(db) -> Callable:
    """Factory creating users directly in the database.

    Usage:
        alice = make_user("alice")
        admin = make_user("root", role=Role.ADMIN)
    """
    from photoshare.infrastructure.repositories import UserRepository
    from photoshare.models import Principal, Role

    def _make(username: str, role: Role = Role.USER, password: str = "Password123!") -> Principal:
        repo = UserRepository(db)
        user_id = repo.create(username, f"{username}@example.com", password, role)
        return Principal.from_row(repo.get_by_id(user_id))

    return _make


@pytest.fixture(scope="function")
def services(db) -> Dict:
    """Fully wired services over the test database and storage roots."""
    from photoshare.routes import deps

    return {
        "access": deps.get_access_service(db),
        "upload": deps.get_upload_service(),
        "photos": deps.get_photo_service(db),
        "shares": deps.get_share_service(db),
        "comments": deps.get_comment_service(db),
        "albums": deps.get_album_service(db),
        "users": deps.get_user_service(db),
        "auth": deps.get_auth_service(db),
    }


def _image_bytes(fmt: str, size=(640, 480), mode="RGB", color=(200, 120, 40)) -> bytes:
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, fmt)
    return buf.getvalue()


@pytest.fixture(scope="session")
def jpeg_bytes() -> bytes:
    """A real 640x480 JPEG."""
    return _image_bytes("JPEG")


@pytest.fixture(scope="session")
def png_bytes() -> bytes:
    return _image_bytes("PNG", size=(200, 800), mode="RGBA", color=(0, 0, 255, 128))


@pytest.fixture(scope="session")
def gif_bytes() -> bytes:
    return _image_bytes("GIF", size=(50, 50), mode="P", color=3)


@pytest.fixture(scope="session")
def webp_bytes() -> bytes:
    return _image_bytes("WEBP", size=(120, 90))


@pytest.fixture(scope="function")
def client(fresh_database: Path) -> Generator[TestClient, None, None]:
    """Create test client with fresh isolated environment.

    Entering the client runs the lifespan, which seeds the default admin.
    """
    from photoshare.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def login() -> Callable:
    """Return a new client logged in as the given user.

    Each call yields an independent cookie jar so several users can act in
    one test.
    """
    from photoshare.main import app

    def _login(username: str, password: str = "Password123!") -> TestClient:
        user_client = TestClient(app)
        response = user_client.post("/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return user_client

    return _login
