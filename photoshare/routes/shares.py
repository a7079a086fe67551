"""Share routes - grant other users access to a photo."""
from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from ..database import create_connection
from ..dependencies import require_principal
from .deps import get_share_service

router = APIRouter()


class ShareInput(BaseModel):
    user_id: int = Field(gt=0)
    permission_level: str = "READ"


class ShareLevelInput(BaseModel):
    permission_level: str


@router.get("/photos/{photo_id}/shares")
def list_shares(photo_id: int, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_share_service(db).list_shares(principal, photo_id)
    finally:
        db.close()


@router.post("/photos/{photo_id}/shares", status_code=201)
def share_photo(photo_id: int, data: ShareInput, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_share_service(db).share_photo(
            principal, photo_id, data.user_id, data.permission_level
        )
    finally:
        db.close()


@router.put("/photos/{photo_id}/shares/{user_id}")
def update_share(photo_id: int, user_id: int, data: ShareLevelInput, request: Request):
    """Replace the level of an existing share."""
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_share_service(db).update_share(
            principal, photo_id, user_id, data.permission_level
        )
    finally:
        db.close()


@router.delete("/photos/{photo_id}/shares/{user_id}")
def remove_share(photo_id: int, user_id: int, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        get_share_service(db).remove_share(principal, photo_id, user_id)
        return {"status": "ok"}
    finally:
        db.close()
