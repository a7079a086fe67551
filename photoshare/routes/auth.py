"""Authentication and account routes."""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import SESSION_COOKIE, SESSION_MAX_AGE
from ..database import create_connection
from ..dependencies import require_principal
from ..models import Principal
from .deps import get_auth_service, get_user_service

router = APIRouter()


class RegisterInput(BaseModel):
    username: str
    email: str
    password: str


class LoginInput(BaseModel):
    username: str
    password: str


class EmailInput(BaseModel):
    email: str


class PasswordInput(BaseModel):
    current_password: str
    new_password: str = Field(min_length=1)


def principal_out(principal: Principal) -> dict:
    return {
        "id": principal.id,
        "username": principal.username,
        "email": principal.email,
        "role": principal.role.value,
        "enabled": principal.enabled,
    }


@router.post("/register", status_code=201)
def register(data: RegisterInput):
    """Create a regular account."""
    db = create_connection()
    try:
        principal = get_user_service(db).register(data.username, data.email, data.password)
        return principal_out(principal)
    finally:
        db.close()


@router.post("/login")
def login(data: LoginInput):
    """Check credentials and set the session cookie."""
    db = create_connection()
    try:
        principal, session_id = get_auth_service(db).login(data.username, data.password)
    finally:
        db.close()

    response = JSONResponse(principal_out(principal))
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_id,
        httponly=True,
        samesite="lax",
        max_age=SESSION_MAX_AGE
    )
    return response


@router.post("/logout")
def logout(request: Request):
    """Logout user."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if session_id:
        db = create_connection()
        try:
            get_auth_service(db).logout(session_id)
        finally:
            db.close()

    response = JSONResponse({"status": "ok"})
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/me")
def me(request: Request):
    return principal_out(require_principal(request))


@router.patch("/me")
def update_me(data: EmailInput, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        return principal_out(get_user_service(db).update_email(principal, data.email))
    finally:
        db.close()


@router.post("/me/password")
def change_password(data: PasswordInput, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        get_user_service(db).change_password(principal, data.current_password, data.new_password)
        return {"status": "ok"}
    finally:
        db.close()


@router.delete("/me")
async def delete_me(request: Request):
    """Delete own account with all owned content."""
    principal = require_principal(request)

    db = create_connection()
    try:
        await get_user_service(db).delete_user(principal, principal.id)
    finally:
        db.close()

    response = JSONResponse({"status": "ok"})
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/users/search")
def search_users(request: Request, q: str = ""):
    """Find users to share with."""
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_user_service(db).search(q, exclude_id=principal.id)
    finally:
        db.close()
