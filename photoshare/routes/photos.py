"""Photo routes - upload, CRUD, listings and file serving."""
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel

from ..database import create_connection
from ..dependencies import get_principal, require_principal
from .deps import get_photo_service

router = APIRouter()

# Blob keys are internal and never leave the server
_HIDDEN_FIELDS = {"storage_key", "thumbnail_key"}


def photo_out(photo: dict) -> dict:
    return {k: v for k, v in photo.items() if k not in _HIDDEN_FIELDS}


class PhotoUpdateInput(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    visibility: Optional[str] = None


@router.post("/photos", status_code=201)
async def upload_photo(
    request: Request,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    visibility: Optional[str] = Form(None),
    album_id: Optional[int] = Form(None),
):
    """Upload a single photo (multipart)."""
    principal = require_principal(request)

    db = create_connection()
    try:
        photo = await get_photo_service(db).upload_photo(
            principal,
            stream=file.file if file else None,
            filename=file.filename if file else None,
            declared_type=file.content_type if file else None,
            size=file.size if file else None,
            title=title,
            description=description,
            visibility=visibility,
            album_id=album_id,
        )
        return photo_out(photo)
    finally:
        db.close()


@router.get("/photos")
def list_accessible(request: Request):
    """All photos the caller can see."""
    db = create_connection()
    try:
        return [photo_out(p) for p in get_photo_service(db).list_accessible(get_principal(request))]
    finally:
        db.close()


@router.get("/photos/public")
def list_public(limit: int = 100, offset: int = 0):
    db = create_connection()
    try:
        photos = get_photo_service(db).list_public(limit=min(max(limit, 1), 500), offset=max(offset, 0))
        return [photo_out(p) for p in photos]
    finally:
        db.close()


@router.get("/photos/mine")
def list_owned(request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        return [photo_out(p) for p in get_photo_service(db).list_owned(principal)]
    finally:
        db.close()


@router.get("/photos/shared")
def list_shared(request: Request):
    """Photos other users shared with the caller."""
    principal = require_principal(request)

    db = create_connection()
    try:
        return [photo_out(p) for p in get_photo_service(db).list_shared_with(principal)]
    finally:
        db.close()


@router.get("/photos/search")
def search_photos(request: Request, q: str = ""):
    db = create_connection()
    try:
        return [photo_out(p) for p in get_photo_service(db).search(get_principal(request), q)]
    finally:
        db.close()


@router.get("/photos/{photo_id}")
def get_photo(photo_id: int, request: Request):
    db = create_connection()
    try:
        return photo_out(get_photo_service(db).get_photo(get_principal(request), photo_id))
    finally:
        db.close()


@router.patch("/photos/{photo_id}")
def update_photo(photo_id: int, data: PhotoUpdateInput, request: Request):
    """Change title, description or visibility."""
    principal = require_principal(request)

    db = create_connection()
    try:
        photo = get_photo_service(db).update_photo(
            principal, photo_id,
            title=data.title,
            description=data.description,
            visibility=data.visibility,
        )
        return photo_out(photo)
    finally:
        db.close()


@router.delete("/photos/{photo_id}")
async def delete_photo(photo_id: int, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        await get_photo_service(db).delete_photo(principal, photo_id)
        return {"status": "ok"}
    finally:
        db.close()


@router.get("/photos/{photo_id}/file")
def get_photo_file(photo_id: int, request: Request):
    """Serve the original with its detected content type."""
    db = create_connection()
    try:
        path, content_type = get_photo_service(db).original_file(get_principal(request), photo_id)
    finally:
        db.close()
    return FileResponse(path, media_type=content_type, headers={"X-Content-Type-Options": "nosniff"})


@router.get("/photos/{photo_id}/thumbnail")
def get_photo_thumbnail(photo_id: int, request: Request):
    db = create_connection()
    try:
        path, content_type = get_photo_service(db).thumbnail_file(get_principal(request), photo_id)
    finally:
        db.close()
    return FileResponse(path, media_type=content_type, headers={"X-Content-Type-Options": "nosniff"})
