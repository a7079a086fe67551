"""Admin routes - user management and statistics."""
from fastapi import APIRouter, Request
from pydantic import BaseModel

from ..database import create_connection
from ..dependencies import require_admin
from .auth import principal_out
from .deps import get_user_service

router = APIRouter(prefix="/admin")


class RoleInput(BaseModel):
    role: str


@router.get("/users")
def list_users(request: Request):
    require_admin(request)

    db = create_connection()
    try:
        return get_user_service(db).list_users()
    finally:
        db.close()


@router.post("/users/{user_id}/enable")
def enable_user(user_id: int, request: Request):
    admin = require_admin(request)

    db = create_connection()
    try:
        return principal_out(get_user_service(db).set_enabled(admin, user_id, True))
    finally:
        db.close()


@router.post("/users/{user_id}/disable")
def disable_user(user_id: int, request: Request):
    admin = require_admin(request)

    db = create_connection()
    try:
        return principal_out(get_user_service(db).set_enabled(admin, user_id, False))
    finally:
        db.close()


@router.put("/users/{user_id}/role")
def change_role(user_id: int, data: RoleInput, request: Request):
    admin = require_admin(request)

    db = create_connection()
    try:
        return principal_out(get_user_service(db).change_role(admin, user_id, data.role))
    finally:
        db.close()


@router.delete("/users/{user_id}")
async def delete_user(user_id: int, request: Request):
    """Delete a user with all their photos, albums, shares and comments."""
    admin = require_admin(request)

    db = create_connection()
    try:
        await get_user_service(db).delete_user(admin, user_id)
        return {"status": "ok"}
    finally:
        db.close()


@router.get("/stats")
def stats(request: Request):
    require_admin(request)

    db = create_connection()
    try:
        return get_user_service(db).stats()
    finally:
        db.close()
