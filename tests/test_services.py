"""Tests for application services.

Tests the service layer business logic in isolation.
"""
import sqlite3

import pytest
from unittest.mock import AsyncMock, Mock

from photoshare.application.services import (
    AuthService,
    CommentService,
    PhotoService,
    ShareService,
    StoredPhoto,
    UserService,
)
from photoshare.exceptions import AccessDenied, NotFound, ValidationError
from photoshare.models import PermissionLevel, Principal, Role

ALICE = Principal(id=1, username="alice", role=Role.USER)
BOB = Principal(id=2, username="bob", role=Role.USER)
ADMIN = Principal(id=9, username="admin", role=Role.ADMIN)


class TestPhotoService:
    """Test PhotoService upload orchestration."""

    @pytest.fixture
    def mock_photo_repo(self):
        return Mock()

    @pytest.fixture
    def mock_upload_service(self):
        uploads = Mock()
        uploads.store_photo = AsyncMock(return_value=StoredPhoto(
            storage_key="abc.jpg",
            thumbnail_key="thumb_abc.jpg",
            content_type="image/jpeg",
            original_filename="a.jpg",
            size=10,
        ))
        uploads.delete_photo = AsyncMock(return_value=True)
        return uploads

    @pytest.fixture
    def photo_service(self, mock_photo_repo, mock_upload_service):
        """Create PhotoService with mocked dependencies."""
        return PhotoService(
            photo_repository=mock_photo_repo,
            share_repository=Mock(),
            comment_repository=Mock(),
            album_repository=Mock(),
            access_service=Mock(),
            upload_service=mock_upload_service,
        )

    def test_upload_creates_row(self, photo_service, mock_photo_repo, run_async):
        # Arrange
        mock_photo_repo.create.return_value = 42
        mock_photo_repo.get_by_id.return_value = {"id": 42, "title": "Sunset"}

        # Act
        result = run_async(photo_service.upload_photo(ALICE, b"...", "a.jpg", "image/jpeg", 10, " Sunset "))

        # Assert
        assert result["id"] == 42
        kwargs = mock_photo_repo.create.call_args.kwargs
        assert kwargs["title"] == "Sunset"
        assert kwargs["owner_id"] == ALICE.id
        assert kwargs["storage_key"] == "abc.jpg"
        assert kwargs["content_type"] == "image/jpeg"

    def test_anonymous_upload_denied(self, photo_service, mock_upload_service, run_async):
        with pytest.raises(AccessDenied):
            run_async(photo_service.upload_photo(None, b"...", "a.jpg", None, 10, "Title"))
        mock_upload_service.store_photo.assert_not_called()

    def test_bad_metadata_stores_nothing(self, photo_service, mock_upload_service, run_async):
        with pytest.raises(ValidationError):
            run_async(photo_service.upload_photo(ALICE, b"...", "a.jpg", None, 10, "x" * 101))
        mock_upload_service.store_photo.assert_not_called()

    def test_blobs_removed_when_row_fails(self, photo_service, mock_photo_repo, mock_upload_service, run_async):
        # Arrange
        mock_photo_repo.create.side_effect = ValidationError("duplicate")

        # Act
        with pytest.raises(ValidationError):
            run_async(photo_service.upload_photo(ALICE, b"...", "a.jpg", None, 10, "Title"))

        # Assert
        mock_upload_service.delete_photo.assert_awaited_once_with("abc.jpg")

    def test_album_link_failure_rolls_back(self, mock_photo_repo, mock_upload_service, run_async):
        # Arrange
        mock_photo_repo.create.return_value = 42
        album_repo = Mock()
        album_repo.get_by_id.return_value = {"id": 7, "owner_id": ALICE.id}
        album_repo.add_photo.side_effect = sqlite3.IntegrityError("FOREIGN KEY constraint failed")
        service = PhotoService(
            photo_repository=mock_photo_repo,
            share_repository=Mock(),
            comment_repository=Mock(),
            album_repository=album_repo,
            access_service=Mock(),
            upload_service=mock_upload_service,
        )

        # Act
        with pytest.raises(NotFound):
            run_async(service.upload_photo(ALICE, b"...", "a.jpg", None, 10, "Title", album_id=7))

        # Assert
        assert mock_photo_repo.create.call_args.kwargs["commit"] is False
        mock_photo_repo._conn.rollback.assert_called_once()
        mock_photo_repo._conn.commit.assert_not_called()
        mock_upload_service.delete_photo.assert_awaited_once_with("abc.jpg")


class TestShareService:
    """Test ShareService business logic."""

    @pytest.fixture
    def mock_share_repo(self):
        return Mock()

    @pytest.fixture
    def mock_photo_repo(self):
        repo = Mock()
        repo.get_by_id.return_value = {"id": 5, "owner_id": ALICE.id, "visibility": "PRIVATE"}
        return repo

    @pytest.fixture
    def mock_user_repo(self):
        repo = Mock()
        repo.get_by_id.return_value = {"id": BOB.id, "username": "bob"}
        return repo

    @pytest.fixture
    def mock_access(self):
        access = Mock()
        access.can_read_photo.return_value = True
        access.can_manage_shares.return_value = True
        return access

    @pytest.fixture
    def share_service(self, mock_share_repo, mock_photo_repo, mock_user_repo, mock_access):
        return ShareService(
            share_repository=mock_share_repo,
            photo_repository=mock_photo_repo,
            user_repository=mock_user_repo,
            access_service=mock_access,
        )

    def test_share_defaults_to_read(self, share_service, mock_share_repo):
        share_service.share_photo(ALICE, 5, BOB.id)
        mock_share_repo.create.assert_called_once_with(5, BOB.id, PermissionLevel.READ)

    def test_share_with_owner_rejected(self, share_service, mock_share_repo):
        with pytest.raises(ValidationError):
            share_service.share_photo(ALICE, 5, ALICE.id, "COMMENT")
        mock_share_repo.create.assert_not_called()

    def test_unknown_grantee_rejected(self, share_service, mock_user_repo):
        mock_user_repo.get_by_id.return_value = None
        with pytest.raises(ValidationError, match="User not found"):
            share_service.share_photo(ALICE, 5, 77)

    def test_unreadable_photo_is_not_found(self, share_service, mock_access):
        mock_access.can_read_photo.return_value = False
        with pytest.raises(NotFound):
            share_service.share_photo(BOB, 5, 3)

    def test_readable_but_unmanageable_is_denied(self, share_service, mock_access):
        mock_access.can_manage_shares.return_value = False
        with pytest.raises(AccessDenied):
            share_service.remove_share(BOB, 5, 3)

    def test_update_missing_share(self, share_service, mock_share_repo):
        mock_share_repo.update_level.return_value = False
        with pytest.raises(NotFound):
            share_service.update_share(ALICE, 5, BOB.id, "ADMIN")

    def test_malformed_level(self, share_service, mock_share_repo):
        with pytest.raises(ValidationError):
            share_service.share_photo(ALICE, 5, BOB.id, "EVERYTHING")
        mock_share_repo.create.assert_not_called()


class TestCommentService:

    @pytest.fixture
    def mock_comment_repo(self):
        repo = Mock()
        repo.get_by_id.return_value = {"id": 3, "photo_id": 5, "author_id": BOB.id, "text": "hi"}
        return repo

    @pytest.fixture
    def mock_access(self):
        access = Mock()
        access.can_read_photo.return_value = True
        access.can_comment_on_photo.return_value = True
        access.can_delete_comment.return_value = False
        return access

    @pytest.fixture
    def comment_service(self, mock_comment_repo, mock_access):
        photo_repo = Mock()
        photo_repo.get_by_id.return_value = {"id": 5, "owner_id": ALICE.id, "visibility": "PUBLIC"}
        return CommentService(mock_comment_repo, photo_repo, mock_access)

    def test_text_is_trimmed(self, comment_service, mock_comment_repo):
        mock_comment_repo.create.return_value = 3
        comment_service.add_comment(BOB, 5, "  great shot  ")
        mock_comment_repo.create.assert_called_once_with(5, BOB.id, "great shot")

    def test_too_long(self, comment_service):
        with pytest.raises(ValidationError):
            comment_service.add_comment(BOB, 5, "x" * 2001)

    def test_comment_denied(self, comment_service, mock_access, mock_comment_repo):
        mock_access.can_comment_on_photo.return_value = False
        with pytest.raises(AccessDenied):
            comment_service.add_comment(BOB, 5, "hello")
        mock_comment_repo.create.assert_not_called()

    def test_only_author_edits(self, comment_service):
        with pytest.raises(AccessDenied):
            comment_service.update_comment(ALICE, 3, "changed")

    def test_delete_denied(self, comment_service, mock_comment_repo):
        with pytest.raises(AccessDenied):
            comment_service.delete_comment(ALICE, 3)
        mock_comment_repo.delete.assert_not_called()

    def test_missing_comment(self, comment_service, mock_comment_repo):
        mock_comment_repo.get_by_id.return_value = None
        with pytest.raises(NotFound):
            comment_service.delete_comment(ALICE, 3)

    def test_author_deletes_without_read_access(self, comment_service, mock_access, mock_comment_repo):
        mock_access.can_read_photo.return_value = False
        mock_access.can_delete_comment.return_value = True

        comment_service.delete_comment(BOB, 3)

        mock_comment_repo.delete.assert_called_once_with(3)

    def test_author_edits_without_read_access(self, comment_service, mock_access, mock_comment_repo):
        mock_access.can_read_photo.return_value = False

        comment_service.update_comment(BOB, 3, " reworded ")

        mock_comment_repo.update_text.assert_called_once_with(3, "reworded")

    def test_denied_and_unreadable_is_not_found(self, comment_service, mock_access, mock_comment_repo):
        mock_access.can_read_photo.return_value = False
        with pytest.raises(NotFound):
            comment_service.delete_comment(ALICE, 3)
        with pytest.raises(NotFound):
            comment_service.update_comment(ALICE, 3, "changed")
        mock_comment_repo.delete.assert_not_called()
        mock_comment_repo.update_text.assert_not_called()


class TestUserService:

    @pytest.fixture
    def mock_user_repo(self):
        repo = Mock()
        repo.get_by_id.side_effect = lambda uid: {
            "id": uid, "username": f"user{uid}", "email": f"u{uid}@example.com",
            "role": "USER", "enabled": 1,
        }
        repo.get_by_username.return_value = None
        repo.get_by_email.return_value = None
        return repo

    @pytest.fixture
    def mock_access(self):
        access = Mock()
        access.can_ban.side_effect = lambda actor, target_id: actor.is_admin and actor.id != target_id
        return access

    @pytest.fixture
    def user_service(self, mock_user_repo, mock_access):
        return UserService(
            user_repository=mock_user_repo,
            session_repository=Mock(),
            photo_repository=Mock(),
            album_repository=Mock(),
            share_repository=Mock(),
            comment_repository=Mock(),
            access_service=mock_access,
        )

    def test_register(self, user_service, mock_user_repo):
        mock_user_repo.create.return_value = 12
        principal = user_service.register("carol", "carol@example.com", "Password123!")

        assert principal.id == 12
        mock_user_repo.create.assert_called_once_with("carol", "carol@example.com", "Password123!", Role.USER)

    def test_register_taken_username(self, user_service, mock_user_repo):
        mock_user_repo.get_by_username.return_value = {"id": 1}
        with pytest.raises(ValidationError, match="Username already exists"):
            user_service.register("alice", "new@example.com", "Password123!")

    def test_admin_disables_other(self, user_service, mock_user_repo):
        user_service.set_enabled(ADMIN, BOB.id, False)
        mock_user_repo.set_enabled.assert_called_once_with(BOB.id, False)

    def test_self_ban_blocked(self, user_service, mock_user_repo):
        with pytest.raises(AccessDenied):
            user_service.set_enabled(ADMIN, ADMIN.id, False)
        with pytest.raises(AccessDenied):
            user_service.change_role(ADMIN, ADMIN.id, "USER")
        mock_user_repo.set_enabled.assert_not_called()
        mock_user_repo.set_role.assert_not_called()

    def test_non_admin_cannot_ban(self, user_service):
        with pytest.raises(AccessDenied):
            user_service.set_enabled(ALICE, BOB.id, False)

    def test_short_search_returns_nothing(self, user_service, mock_user_repo):
        assert user_service.search("a") == []
        mock_user_repo.search.assert_not_called()

    def test_ensure_admin_skips_when_present(self, user_service, mock_user_repo):
        mock_user_repo.count_by_role.return_value = 1
        assert user_service.ensure_admin("admin", "admin@example.com", "Admin123!") is None
        mock_user_repo.create.assert_not_called()


class TestAuthService:

    @pytest.fixture
    def mock_user_repo(self):
        return Mock()

    @pytest.fixture
    def mock_session_repo(self):
        repo = Mock()
        repo.create.return_value = "session-token"
        return repo

    @pytest.fixture
    def auth_service(self, mock_user_repo, mock_session_repo):
        return AuthService(mock_user_repo, mock_session_repo)

    def test_login_creates_session(self, auth_service, mock_user_repo, mock_session_repo):
        mock_user_repo.authenticate.return_value = {
            "id": 1, "username": "alice", "email": "a@example.com", "role": "USER", "enabled": 1,
        }

        principal, session_id = auth_service.login("alice", "Password123!")

        assert principal.id == 1
        assert session_id == "session-token"
        mock_session_repo.create.assert_called_once()

    def test_disabled_user_cannot_login(self, auth_service, mock_user_repo, mock_session_repo):
        mock_user_repo.authenticate.return_value = {
            "id": 1, "username": "alice", "email": "a@example.com", "role": "USER", "enabled": 0,
        }

        with pytest.raises(ValidationError):
            auth_service.login("alice", "Password123!")
        mock_session_repo.create.assert_not_called()

    def test_session_of_disabled_user_is_anonymous(self, auth_service, mock_session_repo):
        mock_session_repo.get_valid.return_value = {
            "id": 1, "username": "alice", "email": "a@example.com", "role": "USER", "enabled": 0,
        }
        assert auth_service.principal_for_session("token") is None

    def test_missing_cookie(self, auth_service, mock_session_repo):
        assert auth_service.principal_for_session(None) is None
        mock_session_repo.get_valid.assert_not_called()
