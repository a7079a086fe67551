"""Application middleware."""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .application.services import AuthService
from .config import SESSION_COOKIE
from .database import create_connection
from .infrastructure.repositories import SessionRepository, UserRepository


class AuthMiddleware(BaseHTTPMiddleware):
    """Resolve the session cookie to a principal on every request.

    The principal is stored on ``request.state.principal``; it is None for
    anonymous requests, expired sessions and disabled users. Routes decide
    for themselves whether anonymous access is acceptable.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.principal = None

        session_id = request.cookies.get(SESSION_COOKIE)
        if session_id:
            db = create_connection()
            try:
                auth = AuthService(UserRepository(db), SessionRepository(db))
                request.state.principal = auth.principal_for_session(session_id)
            finally:
                db.close()

        return await call_next(request)
