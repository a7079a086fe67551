"""Comment service."""
import logging
from typing import Optional

from ... import config
from ...exceptions import AccessDenied, NotFound, ValidationError
from ...infrastructure.repositories import CommentRepository, PhotoRepository
from ...models import Principal
from .access_service import AccessService

logger = logging.getLogger(__name__)


def clean_text(text: Optional[str]) -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Comment cannot be empty")
    if len(text) > config.COMMENT_MAX_LENGTH:
        raise ValidationError(f"Comment must be at most {config.COMMENT_MAX_LENGTH} characters")
    return text


class CommentService:
    """Service for comments on photos."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        photo_repository: PhotoRepository,
        access_service: AccessService,
    ):
        self.comment_repo = comment_repository
        self.photo_repo = photo_repository
        self.access = access_service

    def _readable_photo(self, principal: Optional[Principal], photo_id: int) -> dict:
        photo = self.photo_repo.get_by_id(photo_id)
        if photo is None or not self.access.can_read_photo(principal, photo):
            raise NotFound("Photo not found")
        return photo

    def add_comment(self, principal: Optional[Principal], photo_id: int, text: str) -> dict:
        photo = self._readable_photo(principal, photo_id)
        if not self.access.can_comment_on_photo(principal, photo):
            raise AccessDenied("Not allowed to comment on this photo")

        comment_id = self.comment_repo.create(photo_id, principal.id, clean_text(text))
        return self.comment_repo.get_by_id(comment_id)

    def list_comments(self, principal: Optional[Principal], photo_id: int) -> list[dict]:
        self._readable_photo(principal, photo_id)
        return self.comment_repo.list_for_photo(photo_id)

    def _commented_photo(self, comment_id: int) -> tuple[dict, dict]:
        """Comment and its photo, by existence only."""
        comment = self.comment_repo.get_by_id(comment_id)
        if comment is None:
            raise NotFound("Comment not found")
        photo = self.photo_repo.get_by_id(comment["photo_id"])
        if photo is None:
            raise NotFound("Comment not found")
        return comment, photo

    def _deny(self, principal: Optional[Principal], photo: dict, message: str) -> None:
        # Callers that cannot read the photo must not learn the comment exists
        if not self.access.can_read_photo(principal, photo):
            raise NotFound("Comment not found")
        raise AccessDenied(message)

    def update_comment(self, principal: Optional[Principal], comment_id: int, text: str) -> dict:
        """Only the author may change the text, even after losing read access."""
        comment, photo = self._commented_photo(comment_id)
        if principal is None or not principal.enabled or principal.id != comment["author_id"]:
            self._deny(principal, photo, "Only the author can edit a comment")

        self.comment_repo.update_text(comment_id, clean_text(text))
        return self.comment_repo.get_by_id(comment_id)

    def delete_comment(self, principal: Optional[Principal], comment_id: int) -> None:
        """Author, photo owner or moderator/admin; no read access required."""
        comment, photo = self._commented_photo(comment_id)
        if not self.access.can_delete_comment(principal, comment, photo):
            self._deny(principal, photo, "Not allowed to delete this comment")

        self.comment_repo.delete(comment_id)
        logger.info("Comment %s deleted by %s", comment_id, principal.username)
