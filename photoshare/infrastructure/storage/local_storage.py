"""Local filesystem storage implementation."""
import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from ...logging_config import security_logger
from .base import (
    StorageInterface,
    BlobNotFoundError,
    UploadError,
    DownloadError,
    DeleteError
)

logger = logging.getLogger(__name__)


class LocalStorage(StorageInterface):
    """Local filesystem storage backend.

    Stores blobs flat in one directory:
        root/
            <key>

    Originals and thumbnails use two separate instances with two roots.
    """

    def __init__(self, root: Path | str):
        """Initialize local storage.

        Args:
            root: Directory holding the blobs (created if missing)
        """
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        """Map key to a path strictly inside the root.

        Anything that resolves elsewhere (``..`` segments, absolute paths,
        symlinks) is logged as a security event and reported as missing.
        """
        if not key or "\x00" in key:
            raise BlobNotFoundError(key)

        candidate = (self.root / key).resolve()
        if candidate == self.root or not candidate.is_relative_to(self.root):
            security_logger.warning("Path traversal attempt blocked: key=%r", key)
            raise BlobNotFoundError(key)
        return candidate

    async def upload(self, key: str, content: bytes) -> str:
        """Write blob with exclusive create so an existing key is never overwritten."""
        file_path = self._resolve(key)

        try:
            async with aiofiles.open(file_path, 'xb') as f:
                await f.write(content)
        except FileExistsError as e:
            raise UploadError(f"Blob already exists: {key}") from e
        except OSError as e:
            logger.error("Failed to write blob %s", key, exc_info=True)
            await self._discard(file_path)
            raise UploadError(f"Failed to upload {key}: {e}") from e

        return key

    async def download(self, key: str) -> bytes:
        file_path = self.get_path(key)

        try:
            async with aiofiles.open(file_path, 'rb') as f:
                return await f.read()
        except OSError as e:
            logger.error("Failed to read blob %s", key, exc_info=True)
            raise DownloadError(f"Failed to download {key}: {e}") from e

    def get_path(self, key: str) -> Path:
        file_path = self._resolve(key)
        if not file_path.is_file():
            raise BlobNotFoundError(key)
        return file_path

    async def delete(self, key: str) -> bool:
        file_path = self._resolve(key)

        if not file_path.is_file():
            return False

        try:
            await aiofiles.os.remove(file_path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("Failed to delete blob %s", key, exc_info=True)
            raise DeleteError(f"Failed to delete {key}: {e}") from e

    def exists(self, key: str) -> bool:
        try:
            return self._resolve(key).is_file()
        except BlobNotFoundError:
            return False

    async def _discard(self, file_path: Path) -> None:
        """Remove a partially written file."""
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Could not remove partial blob %s", file_path.name)
