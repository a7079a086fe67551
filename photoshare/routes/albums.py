"""Album routes - create, view, edit, delete albums and their photo lists."""
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ..database import create_connection
from ..dependencies import require_principal
from .deps import get_album_service

router = APIRouter()


class AlbumInput(BaseModel):
    name: str
    description: Optional[str] = None


class AlbumUpdateInput(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


@router.get("/albums")
def list_albums(request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_album_service(db).list_albums(principal)
    finally:
        db.close()


@router.post("/albums", status_code=201)
def create_album(data: AlbumInput, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_album_service(db).create_album(principal, data.name, data.description)
    finally:
        db.close()


@router.get("/albums/{album_id}")
def get_album(album_id: int, request: Request):
    """Album with its photos."""
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_album_service(db).get_album(principal, album_id)
    finally:
        db.close()


@router.patch("/albums/{album_id}")
def update_album(album_id: int, data: AlbumUpdateInput, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_album_service(db).update_album(
            principal, album_id, name=data.name, description=data.description
        )
    finally:
        db.close()


@router.delete("/albums/{album_id}")
def delete_album(album_id: int, request: Request):
    """Delete album. Photos are kept."""
    principal = require_principal(request)

    db = create_connection()
    try:
        get_album_service(db).delete_album(principal, album_id)
        return {"status": "ok"}
    finally:
        db.close()


@router.post("/albums/{album_id}/photos/{photo_id}")
def add_photo_to_album(album_id: int, photo_id: int, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        added = get_album_service(db).add_photo(principal, album_id, photo_id)
        return {"status": "ok", "added": added}
    finally:
        db.close()


@router.delete("/albums/{album_id}/photos/{photo_id}")
def remove_photo_from_album(album_id: int, photo_id: int, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        get_album_service(db).remove_photo(principal, album_id, photo_id)
        return {"status": "ok"}
    finally:
        db.close()
