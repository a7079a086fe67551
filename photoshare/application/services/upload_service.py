"""Upload service - validates, stores and thumbnails inbound photos.

Nothing the client claims about a file (name, declared type) is used for a
storage or validation decision. The detected type comes from the bytes and
the storage key is random.
"""
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import BinaryIO, Optional, Union

from ... import config
from ...exceptions import ValidationError
from ...infrastructure.services.content_type import (
    ContentTypeDetector, MagicBytesDetector, extension_for
)
from ...infrastructure.services.media import create_thumbnail_bytes
from ...infrastructure.storage import BlobNotFoundError, LocalStorage, StorageInterface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredPhoto:
    """Descriptor returned by ``UploadService.store_photo``."""
    storage_key: str
    thumbnail_key: str
    content_type: str
    original_filename: str
    size: int


@dataclass(frozen=True)
class ThumbnailResult:
    """Outcome of thumbnail derivation.

    ``fallback`` is True when derivation failed and ``key`` is the
    original's key.
    """
    key: str
    fallback: bool = False


class UploadService:
    """Service for the secure upload pipeline.

    Responsibilities:
    - Size, filename and content validation
    - Random key generation
    - Persisting originals and thumbnails into two storage roots
    - Traversal-safe loading and deletion of blobs
    """

    def __init__(
        self,
        originals: Optional[StorageInterface] = None,
        thumbnails: Optional[StorageInterface] = None,
        detector: Optional[ContentTypeDetector] = None,
        max_size: Optional[int] = None,
        allowed_types: Optional[set[str]] = None,
    ):
        # Import config here to respect test patches
        self.originals = originals or LocalStorage(config.UPLOADS_DIR)
        self.thumbnails = thumbnails or LocalStorage(config.THUMBNAILS_DIR)
        self.detector = detector or MagicBytesDetector()
        self.max_size = config.MAX_UPLOAD_SIZE if max_size is None else max_size
        self.allowed_types = allowed_types or config.ALLOWED_IMAGE_TYPES

    async def store_photo(
        self,
        stream: Union[bytes, BinaryIO, None],
        claimed_filename: Optional[str],
        claimed_content_type: Optional[str],
        size_bytes: Optional[int],
    ) -> StoredPhoto:
        """Validate and persist an uploaded photo.

        Args:
            stream: File bytes or a binary file-like object
            claimed_filename: Client-supplied name (display only)
            claimed_content_type: Client-declared MIME type (ignored for decisions)
            size_bytes: Client-declared size, if known

        Returns:
            StoredPhoto descriptor

        Raises:
            ValidationError: empty file, too large, unsafe name, disallowed type
            StorageError: the original could not be written
        """
        if stream is None:
            raise ValidationError("File is required")

        if size_bytes is not None and size_bytes > self.max_size:
            self._reject("declared size %s exceeds limit", size_bytes)
            raise ValidationError(self._too_large_message())

        if claimed_filename is None or ".." in claimed_filename:
            self._reject("unsafe filename %r", claimed_filename)
            raise ValidationError("Invalid filename")

        data = self._read_capped(stream)
        if not data:
            raise ValidationError("File is empty")
        if len(data) > self.max_size:
            self._reject("body exceeds limit (claimed %s bytes)", size_bytes)
            raise ValidationError(self._too_large_message())

        content_type = self.detector.detect(data)
        if content_type not in self.allowed_types:
            self._reject(
                "detected type %s not allowed (declared %s)",
                content_type, claimed_content_type
            )
            raise ValidationError("Only JPEG, PNG, GIF and WebP images are allowed")

        storage_key = self._generate_key(claimed_filename, content_type)
        await self.originals.upload(storage_key, data)

        thumbnail = await self._derive_thumbnail(storage_key, data, content_type)

        logger.info(
            "Stored upload %s (%s, %d bytes, thumbnail %s)",
            storage_key, content_type, len(data),
            "fallback" if thumbnail.fallback else thumbnail.key
        )
        return StoredPhoto(
            storage_key=storage_key,
            thumbnail_key=thumbnail.key,
            content_type=content_type,
            original_filename=claimed_filename,
            size=len(data),
        )

    def load_original(self, key: str) -> Path:
        """Resolve an original blob.

        Raises:
            NotFound: missing, or key escapes the storage root
        """
        return self.originals.get_path(key)

    def load_thumbnail(self, key: str) -> Path:
        """Resolve the thumbnail of the original stored under ``key``.

        Falls back to the original itself when no thumbnail exists.
        """
        try:
            return self.thumbnails.get_path(self.thumbnail_key_for(key))
        except BlobNotFoundError:
            return self.originals.get_path(key)

    async def delete_photo(self, key: str) -> bool:
        """Remove original and derived thumbnail.

        Idempotent. Keys that escape the storage root are treated as
        missing.

        Returns:
            True if the original existed and was deleted
        """
        try:
            deleted = await self.originals.delete(key)
            # A fallback upload never had a thumbnail
            await self.thumbnails.delete(self.thumbnail_key_for(key))
        except BlobNotFoundError:
            return False
        return deleted

    @staticmethod
    def thumbnail_key_for(key: str) -> str:
        return f"{config.THUMBNAIL_PREFIX}{key}"

    def _read_capped(self, stream: Union[bytes, BinaryIO]) -> bytes:
        """Read at most ``max_size + 1`` bytes so oversize input is detectable."""
        limit = self.max_size + 1
        if isinstance(stream, (bytes, bytearray, memoryview)):
            return bytes(stream[:limit])

        chunks = []
        remaining = limit
        while remaining > 0:
            chunk = stream.read(min(remaining, 64 * 1024))
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _generate_key(self, claimed_filename: str, content_type: str) -> str:
        """uuid4 plus the claimed extension, which is cosmetic only."""
        ext = PurePath(claimed_filename).suffix.lower()
        if not ext or not ext[1:].isalnum():
            ext = extension_for(content_type)
        return f"{uuid.uuid4().hex}{ext}"

    async def _derive_thumbnail(self, key: str, data: bytes, content_type: str) -> ThumbnailResult:
        thumb_key = self.thumbnail_key_for(key)
        try:
            thumb_bytes, _, _ = create_thumbnail_bytes(data, content_type, config.THUMBNAIL_SIZE)
            await self.thumbnails.upload(thumb_key, thumb_bytes)
        except Exception:
            logger.warning(
                "Thumbnail generation failed for %s, using original", key, exc_info=True
            )
            return ThumbnailResult(key=key, fallback=True)
        return ThumbnailResult(key=thumb_key)

    def _too_large_message(self) -> str:
        return f"File too large (max {self.max_size / (1024 * 1024):g} MB)"

    @staticmethod
    def _reject(reason: str, *args) -> None:
        logger.warning("Upload rejected: " + reason, *args)
