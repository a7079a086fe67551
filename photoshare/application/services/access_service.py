"""Access service - decides whether a principal may act on a resource.

Every check takes the acting principal explicitly (``None`` is anonymous)
and reads the current user and share rows; nothing is cached between calls.
Callers look the resource up first and handle "not found" themselves; the
checks here only ever answer allow or deny and never raise for missing
rows.
"""
from typing import Optional

from ...infrastructure.repositories import PhotoRepository, ShareRepository, UserRepository
from ...models import Action, PermissionLevel, Principal, Visibility, level_at_least


class AccessService:
    """Service for access decisions on photos, comments and albums.

    Examples:
        >>> access = AccessService(UserRepository(db), PhotoRepository(db), ShareRepository(db))
        >>> access.can_read_photo(None, photo)
        True
        >>> access.resolve_access(principal, photo, Action.EDIT)
        False
    """

    def __init__(
        self,
        user_repository: UserRepository,
        photo_repository: PhotoRepository,
        share_repository: ShareRepository,
    ):
        self.user_repo = user_repository
        self.photo_repo = photo_repository
        self.share_repo = share_repository

    def resolve_access(self, principal: Optional[Principal], resource: dict, action: Action) -> bool:
        """Dispatch to the check for ``action``.

        Args:
            principal: Acting principal or None
            resource: Photo row for photo actions, comment row for
                DELETE_COMMENT, album row for ACCESS_ALBUM
            action: Requested action
        """
        if action == Action.READ:
            return self.can_read_photo(principal, resource)
        if action == Action.COMMENT:
            return self.can_comment_on_photo(principal, resource)
        if action in (Action.EDIT, Action.DELETE, Action.MANAGE_SHARES):
            return self.can_edit_photo(principal, resource)
        if action == Action.DELETE_COMMENT:
            return self.can_delete_comment(principal, resource)
        if action == Action.ACCESS_ALBUM:
            return self.can_access_album(principal, resource)
        return False

    def can_read_photo(self, principal: Optional[Principal], photo: dict) -> bool:
        if photo["visibility"] == Visibility.PUBLIC.value:
            return True

        actor = self._current(principal)
        if actor is None:
            return False
        if actor.is_moderator_or_admin:
            return True
        if actor.id == photo["owner_id"]:
            return True
        return self._share_level(photo, actor) is not None

    def can_edit_photo(self, principal: Optional[Principal], photo: dict) -> bool:
        """Edit, delete and share management share one policy."""
        actor = self._current(principal)
        if actor is None:
            return False
        if actor.is_admin:
            return True
        if actor.id == photo["owner_id"]:
            return True
        return level_at_least(self._share_level(photo, actor), PermissionLevel.ADMIN)

    can_delete_photo = can_edit_photo
    can_manage_shares = can_edit_photo

    def can_comment_on_photo(self, principal: Optional[Principal], photo: dict) -> bool:
        actor = self._current(principal)
        if actor is None:
            return False
        if actor.is_moderator_or_admin:
            return True
        if actor.id == photo["owner_id"]:
            return True
        if photo["visibility"] == Visibility.PUBLIC.value:
            return True
        return level_at_least(self._share_level(photo, actor), PermissionLevel.COMMENT)

    def can_delete_comment(
        self,
        principal: Optional[Principal],
        comment: dict,
        photo: Optional[dict] = None,
    ) -> bool:
        """Author, owner of the commented photo, or moderator/admin."""
        actor = self._current(principal)
        if actor is None:
            return False
        if actor.is_moderator_or_admin:
            return True
        if actor.id == comment["author_id"]:
            return True

        if photo is None:
            photo = self.photo_repo.get_by_id(comment["photo_id"])
        return photo is not None and actor.id == photo["owner_id"]

    def can_access_album(self, principal: Optional[Principal], album: dict) -> bool:
        """Albums are private to their owner; global admins see all."""
        actor = self._current(principal)
        if actor is None:
            return False
        return actor.is_admin or actor.id == album["owner_id"]

    can_edit_album = can_access_album

    def can_ban(self, principal: Optional[Principal], target_user_id: int) -> bool:
        """Admins may disable or re-role anyone but themselves."""
        actor = self._current(principal)
        if actor is None or not actor.is_admin:
            return False
        return actor.id != target_user_id

    def _current(self, principal: Optional[Principal]) -> Optional[Principal]:
        """Reload the principal; deleted or disabled users act as anonymous."""
        if principal is None:
            return None
        row = self.user_repo.get_by_id(principal.id)
        if row is None or not row["enabled"]:
            return None
        return Principal.from_row(row)

    def _share_level(self, photo: dict, actor: Principal) -> Optional[PermissionLevel]:
        return self.share_repo.get_level(photo["id"], actor.id)
