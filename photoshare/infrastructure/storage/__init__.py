"""Storage abstraction layer for blob operations."""
from .base import (
    StorageInterface,
    BlobNotFoundError,
    UploadError,
    DownloadError,
    DeleteError,
)
from .local_storage import LocalStorage

__all__ = [
    "StorageInterface",
    "BlobNotFoundError",
    "UploadError",
    "DownloadError",
    "DeleteError",
    "LocalStorage",
]
