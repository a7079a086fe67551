"""Album service - named photo collections.

Albums belong to one user and have no sharing; only the owner or a global
admin may see or change them. Removing an album or a photo from an album
never deletes photos.
"""
from typing import Dict, List, Optional

from ... import config
from ...database import transaction
from ...exceptions import AccessDenied, NotFound, ValidationError
from ...infrastructure.repositories import AlbumRepository, PhotoRepository
from ...models import Principal
from .access_service import AccessService


def clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Album name is required")
    if len(name) > config.ALBUM_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Album name must be at most {config.ALBUM_NAME_MAX_LENGTH} characters"
        )
    return name


class AlbumService:
    """Service for managing albums.

    Responsibilities:
    - Create/update/delete albums
    - Add/remove photos in albums
    """

    def __init__(
        self,
        album_repository: AlbumRepository,
        photo_repository: PhotoRepository,
        access_service: AccessService,
    ):
        self.album_repo = album_repository
        self.photo_repo = photo_repository
        self.access = access_service

    # ========================================================================
    # Album CRUD
    # ========================================================================

    def create_album(
        self,
        principal: Optional[Principal],
        name: str,
        description: Optional[str] = None,
    ) -> Dict:
        """Create a new album owned by ``principal``.

        Raises:
            AccessDenied: anonymous or disabled principal
            ValidationError: bad name or duplicate name for this owner
        """
        if principal is None or not principal.enabled:
            raise AccessDenied("Login required")

        name = clean_name(name)
        description = self._clean_description(description)
        album_id = self.album_repo.create(principal.id, name, description)
        return self.album_repo.get_by_id(album_id)

    def get_album(self, principal: Optional[Principal], album_id: int) -> Dict:
        """Album with its photos.

        Albums the principal may not access look like they do not exist.
        """
        album = self._accessible(principal, album_id)
        album["photos"] = self.album_repo.get_photos(album_id)
        return album

    def list_albums(self, principal: Principal) -> List[Dict]:
        return self.album_repo.list_by_owner(principal.id)

    def update_album(
        self,
        principal: Optional[Principal],
        album_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict:
        self._accessible(principal, album_id)
        if name is not None:
            name = clean_name(name)
        description = self._clean_description(description)
        self.album_repo.update(album_id, name=name, description=description)
        return self.album_repo.get_by_id(album_id)

    def delete_album(self, principal: Optional[Principal], album_id: int) -> None:
        """Delete the album and its photo links; photos stay."""
        self._accessible(principal, album_id)
        with transaction(self.album_repo._conn):
            self.album_repo.delete(album_id)

    # ========================================================================
    # Album contents
    # ========================================================================

    def add_photo(self, principal: Optional[Principal], album_id: int, photo_id: int) -> bool:
        """Add a photo the principal can read to one of their albums.

        Returns:
            False if the photo was already in the album
        """
        self._accessible(principal, album_id)
        photo = self.photo_repo.get_by_id(photo_id)
        if photo is None or not self.access.can_read_photo(principal, photo):
            raise NotFound("Photo not found")
        return self.album_repo.add_photo(album_id, photo_id)

    def remove_photo(self, principal: Optional[Principal], album_id: int, photo_id: int) -> None:
        self._accessible(principal, album_id)
        if not self.album_repo.remove_photo(album_id, photo_id):
            raise NotFound("Photo not in album")

    def _accessible(self, principal: Optional[Principal], album_id: int) -> Dict:
        album = self.album_repo.get_by_id(album_id)
        if album is None or not self.access.can_access_album(principal, album):
            raise NotFound("Album not found")
        return album

    @staticmethod
    def _clean_description(description: Optional[str]) -> Optional[str]:
        if description is None:
            return None
        description = description.strip()
        if len(description) > config.DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"Description must be at most {config.DESCRIPTION_MAX_LENGTH} characters"
            )
        return description
