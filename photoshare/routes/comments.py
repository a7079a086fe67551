"""Comment routes."""
from fastapi import APIRouter, Request
from pydantic import BaseModel

from ..database import create_connection
from ..dependencies import get_principal, require_principal
from .deps import get_comment_service

router = APIRouter()


class CommentInput(BaseModel):
    text: str


@router.get("/photos/{photo_id}/comments")
def list_comments(photo_id: int, request: Request):
    db = create_connection()
    try:
        return get_comment_service(db).list_comments(get_principal(request), photo_id)
    finally:
        db.close()


@router.post("/photos/{photo_id}/comments", status_code=201)
def add_comment(photo_id: int, data: CommentInput, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_comment_service(db).add_comment(principal, photo_id, data.text)
    finally:
        db.close()


@router.patch("/comments/{comment_id}")
def update_comment(comment_id: int, data: CommentInput, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        return get_comment_service(db).update_comment(principal, comment_id, data.text)
    finally:
        db.close()


@router.delete("/comments/{comment_id}")
def delete_comment(comment_id: int, request: Request):
    principal = require_principal(request)

    db = create_connection()
    try:
        get_comment_service(db).delete_comment(principal, comment_id)
        return {"status": "ok"}
    finally:
        db.close()
