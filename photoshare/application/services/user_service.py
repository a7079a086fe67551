"""User service - accounts, roles and account deletion."""
import logging
import re
from typing import Optional

from ... import config
from ...database import transaction
from ...exceptions import AccessDenied, NotFound, ValidationError
from ...infrastructure.repositories import (
    AlbumRepository, CommentRepository, PhotoRepository,
    SessionRepository, ShareRepository, UserRepository
)
from ...models import Principal, Role
from .access_service import AccessService
from .photo_service import PhotoService

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def validate_username(username: Optional[str]) -> str:
    username = (username or "").strip()
    if not (config.USERNAME_MIN_LENGTH <= len(username) <= config.USERNAME_MAX_LENGTH):
        raise ValidationError(
            f"Username must be {config.USERNAME_MIN_LENGTH}-{config.USERNAME_MAX_LENGTH} characters"
        )
    if not USERNAME_PATTERN.match(username):
        raise ValidationError("Username may contain letters, digits, '.', '_' and '-' only")
    return username


def validate_email(email: Optional[str]) -> str:
    email = (email or "").strip().lower()
    local, _, domain = email.partition("@")
    if not local or not domain or " " in email:
        raise ValidationError("Invalid email address")
    return email


def validate_password(password: Optional[str]) -> str:
    if not password or len(password) < config.PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {config.PASSWORD_MIN_LENGTH} characters"
        )
    return password


class UserService:
    """Service for user management.

    Responsibilities:
    - Registration and profile changes
    - Admin actions (enable/disable, role change) with the self-ban guard
    - Transactional account deletion with cascade to owned content
    """

    def __init__(
        self,
        user_repository: UserRepository,
        session_repository: SessionRepository,
        photo_repository: PhotoRepository,
        album_repository: AlbumRepository,
        share_repository: ShareRepository,
        comment_repository: CommentRepository,
        access_service: AccessService,
        photo_service: Optional[PhotoService] = None,
    ):
        self.user_repo = user_repository
        self.session_repo = session_repository
        self.photo_repo = photo_repository
        self.album_repo = album_repository
        self.share_repo = share_repository
        self.comment_repo = comment_repository
        self.access = access_service
        self.photo_service = photo_service

    def register(self, username: str, email: str, password: str, role: Role = Role.USER) -> Principal:
        """Create an enabled account.

        Raises:
            ValidationError: invalid input or username/email taken
        """
        username = validate_username(username)
        email = validate_email(email)
        validate_password(password)

        if self.user_repo.get_by_username(username):
            raise ValidationError("Username already exists")
        if self.user_repo.get_by_email(email):
            raise ValidationError("Email already exists")

        user_id = self.user_repo.create(username, email, password, role)
        logger.info("Registered user %s (%s)", username, role.value)
        return self.get(user_id)

    def get(self, user_id: int) -> Principal:
        row = self.user_repo.get_by_id(user_id)
        if row is None:
            raise NotFound("User not found")
        return Principal.from_row(row)

    def list_users(self) -> list[dict]:
        return self.user_repo.list_all()

    def search(self, term: str, exclude_id: Optional[int] = None) -> list[dict]:
        term = (term or "").strip()
        if len(term) < 2:
            return []
        return self.user_repo.search(term, exclude_user_id=exclude_id)

    def set_enabled(self, actor: Optional[Principal], target_id: int, enabled: bool) -> Principal:
        self._check_ban(actor, target_id)
        self.user_repo.set_enabled(target_id, enabled)
        logger.info(
            "User %s %s by %s", target_id, "enabled" if enabled else "disabled", actor.username
        )
        return self.get(target_id)

    def change_role(self, actor: Optional[Principal], target_id: int, role: Role | str) -> Principal:
        if not isinstance(role, Role):
            role = Role.parse(role)
        self._check_ban(actor, target_id)
        self.user_repo.set_role(target_id, role)
        logger.info("User %s role set to %s by %s", target_id, role.value, actor.username)
        return self.get(target_id)

    def update_email(self, principal: Principal, email: str) -> Principal:
        email = validate_email(email)
        self.user_repo.update_email(principal.id, email)
        return self.get(principal.id)

    def change_password(self, principal: Principal, current: str, new: str) -> None:
        row = self.user_repo.get_by_id(principal.id)
        if row is None:
            raise NotFound("User not found")
        if not self.user_repo.authenticate(row["username"], current or ""):
            raise ValidationError("Current password is incorrect")
        self.user_repo.update_password(principal.id, validate_password(new))

    def reset_password(self, user_id: int, new: str) -> None:
        """Set a password without knowing the old one (CLI use)."""
        self.get(user_id)
        self.user_repo.update_password(user_id, validate_password(new))

    async def delete_user(self, actor: Optional[Principal], target_id: int) -> None:
        """Delete an account and everything it owns.

        Allowed for global admins and for the user themself. Rows go in one
        transaction; blobs are removed after commit and leaks only logged.
        """
        if actor is None:
            raise AccessDenied("Login required")
        if not (actor.is_admin or actor.id == target_id):
            raise AccessDenied("Not allowed to delete this user")

        target = self.user_repo.get_by_id(target_id)
        if target is None:
            raise NotFound("User not found")
        if target["role"] == Role.ADMIN.value and self.user_repo.count_by_role(Role.ADMIN) <= 1:
            raise ValidationError("Cannot delete the last administrator")

        photos = self.photo_repo.get_storage_keys_by_owner(target_id)
        photo_ids = [p["id"] for p in photos]

        with transaction(self.user_repo._conn):
            self.share_repo.delete_for_photos(photo_ids)
            self.share_repo.delete_for_grantee(target_id)
            self.comment_repo.delete_for_photos(photo_ids)
            self.comment_repo.delete_by_author(target_id)
            self.album_repo.delete_associations_for_owner(target_id)
            self.album_repo.delete_associations_for_photos(photo_ids)
            self.photo_repo.delete_by_owner(target_id)
            self.album_repo.delete_by_owner(target_id)
            self.session_repo.delete_all_for_user(target_id)
            self.user_repo.delete(target_id)

        logger.info(
            "User %s deleted by %s (%d photos)", target["username"], actor.username, len(photos)
        )
        if self.photo_service is not None:
            await self.photo_service.remove_blobs(photos)

    def ensure_admin(self, username: str, email: str, password: str) -> Optional[Principal]:
        """Seed an administrator if none exists.

        Returns:
            The created principal, or None when an admin already exists
        """
        if self.user_repo.count_by_role(Role.ADMIN) > 0:
            return None
        principal = self.register(username, email, password, role=Role.ADMIN)
        logger.warning(
            "Created default administrator %r; change its password immediately", username
        )
        return principal

    def stats(self) -> dict:
        return {
            "users": self.user_repo.count(),
            "admins": self.user_repo.count_by_role(Role.ADMIN),
            "moderators": self.user_repo.count_by_role(Role.MODERATOR),
            "photos": self.photo_repo.count(),
            "albums": self.album_repo.count(),
            "shares": self.share_repo.count(),
            "comments": self.comment_repo.count(),
            "storage_bytes": self.photo_repo.total_size(),
            "active_sessions": self.session_repo.count_active(),
        }

    def _check_ban(self, actor: Optional[Principal], target_id: int) -> None:
        if actor is None or not actor.is_admin:
            raise AccessDenied("Administrator required")
        if self.user_repo.get_by_id(target_id) is None:
            raise NotFound("User not found")
        if not self.access.can_ban(actor, target_id):
            raise AccessDenied("You cannot change your own account status or role")
