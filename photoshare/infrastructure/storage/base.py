"""Abstract storage interface."""
from abc import ABC, abstractmethod
from pathlib import Path

from ...exceptions import NotFound, StorageError


class BlobNotFoundError(NotFound):
    """Blob not found in storage, or its key resolves outside the root."""
    pass


class UploadError(StorageError):
    """Failed to write blob."""
    pass


class DownloadError(StorageError):
    """Failed to read blob."""
    pass


class DeleteError(StorageError):
    """Failed to delete blob."""
    pass


class StorageInterface(ABC):
    """Abstract interface for blob storage under a single root.

    Keys are opaque names generated by the application. An implementation
    must never let a key address anything outside its root.

    Implementations:
    - LocalStorage: Filesystem storage
    """

    @abstractmethod
    async def upload(self, key: str, content: bytes) -> str:
        """Store a new blob.

        Args:
            key: Unique blob key
            content: Blob bytes

        Returns:
            The key

        Raises:
            UploadError: If the write fails or the key already exists
        """
        pass

    @abstractmethod
    async def download(self, key: str) -> bytes:
        """Read a blob.

        Raises:
            BlobNotFoundError: If the blob doesn't exist
            DownloadError: If the read fails
        """
        pass

    @abstractmethod
    def get_path(self, key: str) -> Path:
        """Resolve key to an existing file.

        Raises:
            BlobNotFoundError: If the blob doesn't exist or escapes the root
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a blob.

        Returns:
            True if deleted, False if didn't exist

        Raises:
            DeleteError: If deletion fails for other reasons
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass
