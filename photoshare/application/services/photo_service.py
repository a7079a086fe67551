"""Photo service - photo metadata lifecycle on top of the upload pipeline.

Private photos a principal may not read are reported as ``NotFound`` so
their existence does not leak.
"""
import logging
import sqlite3
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ... import config
from ...database import transaction
from ...exceptions import AccessDenied, NotFound, PhotoShareError, ValidationError
from ...infrastructure.repositories import (
    AlbumRepository, CommentRepository, PhotoRepository, ShareRepository
)
from ...models import Principal, Visibility
from .access_service import AccessService
from .upload_service import UploadService

logger = logging.getLogger(__name__)


def clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if len(title) > config.TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {config.TITLE_MAX_LENGTH} characters")
    return title


def clean_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    description = description.strip()
    if len(description) > config.DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description must be at most {config.DESCRIPTION_MAX_LENGTH} characters"
        )
    return description


class PhotoService:
    """Service for photo operations.

    Responsibilities:
    - Upload (validation, blob storage, metadata row, optional album link)
    - Read, update and visibility changes under access checks
    - Transactional deletion with blob cleanup after commit
    - Listings and search filtered by what the principal may see
    """

    def __init__(
        self,
        photo_repository: PhotoRepository,
        share_repository: ShareRepository,
        comment_repository: CommentRepository,
        album_repository: AlbumRepository,
        access_service: AccessService,
        upload_service: UploadService,
    ):
        self.photo_repo = photo_repository
        self.share_repo = share_repository
        self.comment_repo = comment_repository
        self.album_repo = album_repository
        self.access = access_service
        self.uploads = upload_service

    async def upload_photo(
        self,
        principal: Optional[Principal],
        stream: Union[bytes, BinaryIO, None],
        filename: Optional[str],
        declared_type: Optional[str],
        size: Optional[int],
        title: Optional[str],
        description: Optional[str] = None,
        visibility: Union[Visibility, str, None] = None,
        album_id: Optional[int] = None,
    ) -> dict:
        """Store an upload and create its photo row.

        Metadata is validated before any bytes are written, so a rejected
        request leaves neither a row nor a blob behind.
        """
        if principal is None or not principal.enabled:
            raise AccessDenied("Login required")

        title = clean_title(title)
        description = clean_description(description)
        if visibility is None:
            visibility = Visibility.PRIVATE
        elif not isinstance(visibility, Visibility):
            visibility = Visibility.parse(visibility)

        album = None
        if album_id is not None:
            album = self.album_repo.get_by_id(album_id)
            if album is None or not self.access.can_access_album(principal, album):
                raise NotFound("Album not found")

        stored = await self.uploads.store_photo(stream, filename, declared_type, size)

        # Row and album link commit together; on any failure neither survives
        try:
            with transaction(self.photo_repo._conn):
                photo_id = self.photo_repo.create(
                    title=title,
                    description=description or None,
                    original_filename=stored.original_filename,
                    storage_key=stored.storage_key,
                    thumbnail_key=stored.thumbnail_key,
                    content_type=stored.content_type,
                    size=stored.size,
                    visibility=visibility,
                    owner_id=principal.id,
                    commit=False,
                )
                if album is not None:
                    try:
                        self.album_repo.add_photo(album["id"], photo_id, commit=False)
                    except sqlite3.IntegrityError as e:
                        # Album deleted between the check and the link
                        raise NotFound("Album not found") from e
        except Exception:
            await self.uploads.delete_photo(stored.storage_key)
            raise

        logger.info(
            "User %s uploaded photo %s (%s)", principal.username, photo_id, visibility.value
        )
        return self.photo_repo.get_by_id(photo_id)

    def get_photo(self, principal: Optional[Principal], photo_id: int) -> dict:
        """Photo row if the principal may read it.

        Raises:
            NotFound: missing or not readable
        """
        photo = self.photo_repo.get_by_id(photo_id)
        if photo is None or not self.access.can_read_photo(principal, photo):
            raise NotFound("Photo not found")
        return photo

    def get_photo_for_edit(self, principal: Optional[Principal], photo_id: int) -> dict:
        """Photo row if the principal may edit it.

        Readable but not editable photos raise ``AccessDenied``.
        """
        photo = self.get_photo(principal, photo_id)
        if not self.access.can_edit_photo(principal, photo):
            raise AccessDenied("Not allowed to modify this photo")
        return photo

    def update_photo(
        self,
        principal: Optional[Principal],
        photo_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        visibility: Union[Visibility, str, None] = None,
    ) -> dict:
        self.get_photo_for_edit(principal, photo_id)

        if title is not None:
            title = clean_title(title)
        description = clean_description(description)
        if visibility is not None and not isinstance(visibility, Visibility):
            visibility = Visibility.parse(visibility)

        self.photo_repo.update(photo_id, title=title, description=description, visibility=visibility)
        return self.photo_repo.get_by_id(photo_id)

    def set_visibility(
        self,
        principal: Optional[Principal],
        photo_id: int,
        visibility: Union[Visibility, str],
    ) -> dict:
        photo = self.update_photo(principal, photo_id, visibility=visibility)
        logger.info("Photo %s visibility set to %s", photo_id, photo["visibility"])
        return photo

    async def delete_photo(self, principal: Optional[Principal], photo_id: int) -> None:
        """Delete photo row with its shares, comments and album links, then blobs."""
        photo = self.get_photo_for_edit(principal, photo_id)

        with transaction(self.photo_repo._conn):
            self.share_repo.delete_for_photos([photo_id])
            self.comment_repo.delete_for_photos([photo_id])
            self.album_repo.delete_associations_for_photos([photo_id])
            self.photo_repo.delete(photo_id)

        logger.info("Photo %s deleted by %s", photo_id, principal.username)
        await self.remove_blobs([photo])

    async def remove_blobs(self, photos: list[dict]) -> None:
        """Best-effort blob removal after rows are committed.

        Failures leave orphaned blobs and are logged, never raised.
        """
        for photo in photos:
            try:
                await self.uploads.delete_photo(photo["storage_key"])
            except PhotoShareError:
                logger.warning(
                    "Leaked blob %s after deleting photo %s",
                    photo["storage_key"], photo["id"], exc_info=True
                )

    def list_public(self, limit: int = 100, offset: int = 0) -> list[dict]:
        return self.photo_repo.list_public(limit=limit, offset=offset)

    def list_owned(self, principal: Principal) -> list[dict]:
        return self.photo_repo.list_by_owner(principal.id)

    def list_shared_with(self, principal: Principal) -> list[dict]:
        return self.photo_repo.list_shared_with(principal.id)

    def list_accessible(self, principal: Optional[Principal]) -> list[dict]:
        """Everything the principal can read."""
        if principal is None or not principal.enabled:
            return self.photo_repo.list_public()
        if principal.is_moderator_or_admin:
            return self.photo_repo.list_all()
        return self.photo_repo.list_accessible(principal.id)

    def search(self, principal: Optional[Principal], term: str) -> list[dict]:
        term = (term or "").strip()
        if not term:
            return []
        if principal is None or not principal.enabled:
            return self.photo_repo.search(term, None)
        return self.photo_repo.search(
            term, principal.id, see_all=principal.is_moderator_or_admin
        )

    def original_file(self, principal: Optional[Principal], photo_id: int) -> tuple[Path, str]:
        """Path and detected content type of the original."""
        photo = self.get_photo(principal, photo_id)
        return self.uploads.load_original(photo["storage_key"]), photo["content_type"]

    def thumbnail_file(self, principal: Optional[Principal], photo_id: int) -> tuple[Path, str]:
        photo = self.get_photo(principal, photo_id)
        return self.uploads.load_thumbnail(photo["storage_key"]), photo["content_type"]
