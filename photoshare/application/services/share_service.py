"""Share service - grants photo access to other users.

A photo has at most one grant per user; changing access replaces the level
of that grant. Owners never appear as grantees.
"""
import logging
from typing import Optional, Union

from ...exceptions import AccessDenied, NotFound, ValidationError
from ...infrastructure.repositories import PhotoRepository, ShareRepository, UserRepository
from ...models import PermissionLevel, Principal
from .access_service import AccessService

logger = logging.getLogger(__name__)


def _level(level: Union[PermissionLevel, str, None]) -> PermissionLevel:
    if level is None:
        return PermissionLevel.READ
    if isinstance(level, PermissionLevel):
        return level
    return PermissionLevel.parse(level)


class ShareService:
    """Service for photo share management.

    Responsibilities:
    - Create, replace and remove grants
    - List grants on a photo and photos shared with a user
    """

    def __init__(
        self,
        share_repository: ShareRepository,
        photo_repository: PhotoRepository,
        user_repository: UserRepository,
        access_service: AccessService,
    ):
        self.share_repo = share_repository
        self.photo_repo = photo_repository
        self.user_repo = user_repository
        self.access = access_service

    def _photo_for_management(self, principal: Optional[Principal], photo_id: int) -> dict:
        photo = self.photo_repo.get_by_id(photo_id)
        if photo is None or not self.access.can_read_photo(principal, photo):
            raise NotFound("Photo not found")
        if not self.access.can_manage_shares(principal, photo):
            raise AccessDenied("Not allowed to manage shares of this photo")
        return photo

    def share_photo(
        self,
        principal: Optional[Principal],
        photo_id: int,
        grantee_id: int,
        level: Union[PermissionLevel, str, None] = None,
    ) -> dict:
        """Grant ``grantee_id`` access to a photo.

        Raises:
            NotFound: photo missing or unreadable
            AccessDenied: principal may not manage shares
            ValidationError: bad level, unknown grantee, grantee is owner,
                or the pair is already shared
        """
        level = _level(level)
        photo = self._photo_for_management(principal, photo_id)

        if grantee_id == photo["owner_id"]:
            raise ValidationError("Cannot share a photo with its owner")
        if self.user_repo.get_by_id(grantee_id) is None:
            raise ValidationError("User not found")

        self.share_repo.create(photo_id, grantee_id, level)
        logger.info(
            "Photo %s shared with user %s at %s by %s",
            photo_id, grantee_id, level.value, principal.username
        )
        return self.share_repo.get(photo_id, grantee_id)

    def update_share(
        self,
        principal: Optional[Principal],
        photo_id: int,
        grantee_id: int,
        level: Union[PermissionLevel, str],
    ) -> dict:
        """Replace the level of an existing grant."""
        level = _level(level)
        self._photo_for_management(principal, photo_id)

        if not self.share_repo.update_level(photo_id, grantee_id, level):
            raise NotFound("Share not found")
        logger.info("Share on photo %s for user %s set to %s", photo_id, grantee_id, level.value)
        return self.share_repo.get(photo_id, grantee_id)

    def remove_share(self, principal: Optional[Principal], photo_id: int, grantee_id: int) -> None:
        self._photo_for_management(principal, photo_id)

        if not self.share_repo.delete(photo_id, grantee_id):
            raise NotFound("Share not found")
        logger.info("Share on photo %s for user %s removed", photo_id, grantee_id)

    def list_shares(self, principal: Optional[Principal], photo_id: int) -> list[dict]:
        self._photo_for_management(principal, photo_id)
        return self.share_repo.list_for_photo(photo_id)

    def list_shared_with_me(self, principal: Principal) -> list[dict]:
        return self.photo_repo.list_shared_with(principal.id)
