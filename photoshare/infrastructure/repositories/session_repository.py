"""Session repository - handles all session-related database operations.

Sessions are temporary authentication tokens for logged-in users.
"""
import secrets

from .base import Repository


class SessionRepository(Repository):
    """Repository for session management.

    Sessions track logged-in users via secure tokens stored in cookies.

    Examples:
        >>> repo = SessionRepository(db)
        >>> session_id = repo.create(1, expires_hours=24)
        >>> session = repo.get_valid(session_id)
        >>> repo.delete(session_id)  # logout
    """

    def create(self, user_id: int, expires_hours: int = 24 * 7) -> str:
        """Create new session for user.

        Args:
            user_id: User ID to create session for
            expires_hours: Session lifetime in hours (default: 7 days)

        Returns:
            Secure random session ID
        """
        session_id = secrets.token_urlsafe(32)

        self._execute(
            """INSERT INTO sessions (id, user_id, expires_at)
               VALUES (?, ?, datetime('now', '+' || ? || ' hours'))""",
            (session_id, user_id, expires_hours)
        )
        self._commit()
        return session_id

    def get_valid(self, session_id: str) -> dict | None:
        """Get session joined with its user if not expired.

        Args:
            session_id: Session ID from cookie

        Returns:
            Session dict with user columns, or None if invalid/expired
        """
        return self._fetchone(
            """SELECT s.id AS session_id, s.expires_at,
                      u.id, u.username, u.email, u.role, u.enabled
               FROM sessions s
               JOIN users u ON s.user_id = u.id
               WHERE s.id = ? AND s.expires_at > datetime('now')""",
            (session_id,)
        )

    def delete(self, session_id: str) -> bool:
        """Delete session (logout)."""
        cursor = self._execute(
            "DELETE FROM sessions WHERE id = ?",
            (session_id,)
        )
        self._commit()
        return cursor.rowcount > 0

    def delete_all_for_user(self, user_id: int) -> int:
        """Delete all sessions for user. Does not commit."""
        cursor = self._execute(
            "DELETE FROM sessions WHERE user_id = ?",
            (user_id,)
        )
        return cursor.rowcount

    def cleanup_expired(self) -> int:
        """Delete all expired sessions.

        Returns:
            Number of sessions cleaned up
        """
        cursor = self._execute(
            "DELETE FROM sessions WHERE expires_at <= datetime('now')"
        )
        self._commit()
        return cursor.rowcount

    def count_active(self) -> int:
        row = self._fetchone(
            "SELECT COUNT(*) as count FROM sessions WHERE expires_at > datetime('now')"
        )
        return row["count"] if row else 0
