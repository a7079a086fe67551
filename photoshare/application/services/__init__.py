"""Application services - business logic layer."""

from .access_service import AccessService
from .upload_service import UploadService, StoredPhoto, ThumbnailResult
from .photo_service import PhotoService
from .share_service import ShareService
from .comment_service import CommentService
from .album_service import AlbumService
from .user_service import UserService
from .auth_service import AuthService

__all__ = [
    "AccessService",
    "UploadService",
    "StoredPhoto",
    "ThumbnailResult",
    "PhotoService",
    "ShareService",
    "CommentService",
    "AlbumService",
    "UserService",
    "AuthService",
]
