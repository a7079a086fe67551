"""Shared dependencies for routes.

This module contains factory functions for creating services
used across all route modules. Each takes the request's connection.
"""
from ..application.services import (
    AccessService, AlbumService, AuthService, CommentService,
    PhotoService, ShareService, UploadService, UserService
)
from ..infrastructure.repositories import (
    AlbumRepository, CommentRepository, PhotoRepository,
    SessionRepository, ShareRepository, UserRepository
)


def get_access_service(db) -> AccessService:
    return AccessService(
        user_repository=UserRepository(db),
        photo_repository=PhotoRepository(db),
        share_repository=ShareRepository(db)
    )


def get_upload_service() -> UploadService:
    """Create UploadService over the configured storage roots."""
    return UploadService()


def get_photo_service(db) -> PhotoService:
    """Create PhotoService with repositories."""
    return PhotoService(
        photo_repository=PhotoRepository(db),
        share_repository=ShareRepository(db),
        comment_repository=CommentRepository(db),
        album_repository=AlbumRepository(db),
        access_service=get_access_service(db),
        upload_service=get_upload_service()
    )


def get_share_service(db) -> ShareService:
    return ShareService(
        share_repository=ShareRepository(db),
        photo_repository=PhotoRepository(db),
        user_repository=UserRepository(db),
        access_service=get_access_service(db)
    )


def get_comment_service(db) -> CommentService:
    return CommentService(
        comment_repository=CommentRepository(db),
        photo_repository=PhotoRepository(db),
        access_service=get_access_service(db)
    )


def get_album_service(db) -> AlbumService:
    return AlbumService(
        album_repository=AlbumRepository(db),
        photo_repository=PhotoRepository(db),
        access_service=get_access_service(db)
    )


def get_user_service(db) -> UserService:
    """Create UserService; account deletion also removes blobs."""
    return UserService(
        user_repository=UserRepository(db),
        session_repository=SessionRepository(db),
        photo_repository=PhotoRepository(db),
        album_repository=AlbumRepository(db),
        share_repository=ShareRepository(db),
        comment_repository=CommentRepository(db),
        access_service=get_access_service(db),
        photo_service=get_photo_service(db)
    )


def get_auth_service(db) -> AuthService:
    return AuthService(
        user_repository=UserRepository(db),
        session_repository=SessionRepository(db)
    )
