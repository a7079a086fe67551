# Repository Pattern Implementation
"""
Repositories abstract database operations.
Each entity has its own repository.

Usage:
    repo = UserRepository(db); repo.get_by_id(user_id)
"""
from .base import Repository, ConnectionProtocol
from .user_repository import UserRepository
from .session_repository import SessionRepository
from .photo_repository import PhotoRepository
from .album_repository import AlbumRepository
from .share_repository import ShareRepository
from .comment_repository import CommentRepository

__all__ = [
    "Repository",
    "ConnectionProtocol",
    "UserRepository",
    "SessionRepository",
    "PhotoRepository",
    "AlbumRepository",
    "ShareRepository",
    "CommentRepository",
]
