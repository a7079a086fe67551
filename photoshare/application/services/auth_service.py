"""Authentication service - handles login/logout and session management."""
import logging
from typing import Optional

from ... import config
from ...exceptions import ValidationError
from ...infrastructure.repositories import UserRepository, SessionRepository
from ...models import Principal

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations.

    Responsibilities:
    - User authentication (disabled users are rejected)
    - Session management
    """

    def __init__(
        self,
        user_repository: UserRepository,
        session_repository: SessionRepository
    ):
        self.user_repo = user_repository
        self.session_repo = session_repository

    def authenticate(self, username: str, password: str) -> Optional[Principal]:
        """Authenticate user with username and password.

        Returns:
            Principal if the credentials match an enabled user, None otherwise
        """
        user = self.user_repo.authenticate(username, password)
        if user is None:
            logger.info("Failed login for %r", username)
            return None
        if not user["enabled"]:
            logger.info("Login refused for disabled user %s", user["username"])
            return None
        return Principal.from_row(user)

    def login(self, username: str, password: str) -> tuple[Principal, str]:
        """Authenticate and open a session.

        Returns:
            Tuple of (principal, session_id)

        Raises:
            ValidationError: bad credentials or disabled account
        """
        principal = self.authenticate(username, password)
        if principal is None:
            raise ValidationError("Invalid username or password")
        session_id = self.create_session(principal.id)
        return principal, session_id

    def create_session(self, user_id: int, expires_hours: Optional[int] = None) -> str:
        if expires_hours is None:
            expires_hours = config.SESSION_MAX_AGE // 3600
        return self.session_repo.create(user_id, expires_hours)

    def principal_for_session(self, session_id: Optional[str]) -> Optional[Principal]:
        """Principal behind a valid session, or None.

        Sessions of disabled users do not resolve.
        """
        if not session_id:
            return None
        session = self.session_repo.get_valid(session_id)
        if session is None or not session["enabled"]:
            return None
        return Principal.from_row(session)

    def logout(self, session_id: Optional[str]) -> bool:
        if not session_id:
            return False
        return self.session_repo.delete(session_id)
