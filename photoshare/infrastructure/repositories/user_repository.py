"""User repository - handles all user-related database operations."""
import bcrypt

from ...models import Role
from .base import Repository


class UserRepository(Repository):
    """Repository for user entity operations.

    Examples:
        >>> repo = UserRepository(db)
        >>> user = repo.get_by_id(1)
        >>> user_id = repo.create("john", "john@example.com", "password123")
    """

    def get_by_id(self, user_id: int) -> dict | None:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User dict or None if not found
        """
        return self._fetchone("SELECT * FROM users WHERE id = ?", (user_id,))

    def get_by_username(self, username: str) -> dict | None:
        """Get user by username (case-insensitive)."""
        return self._fetchone(
            "SELECT * FROM users WHERE username = ?",
            (username.lower().strip(),)
        )

    def get_by_email(self, email: str) -> dict | None:
        return self._fetchone(
            "SELECT * FROM users WHERE email = ?",
            (email.lower().strip(),)
        )

    def create(self, username: str, email: str, password: str, role: Role = Role.USER) -> int:
        """Create new user.

        Args:
            username: Unique username
            email: Unique email address
            password: Plain text password (will be hashed)
            role: Initial role

        Returns:
            New user ID

        Raises:
            ValidationError: username or email already taken
        """
        password_hash = self._hash_password(password)

        with self._unique("Username or email already exists"):
            cursor = self._execute(
                """INSERT INTO users
                   (username, email, password_hash, role, enabled)
                   VALUES (?, ?, ?, ?, 1)""",
                (username.lower().strip(), email.lower().strip(), password_hash, role.value)
            )
            self._commit()
        return cursor.lastrowid

    def update_password(self, user_id: int, new_password: str) -> bool:
        """Update user password.

        Returns:
            True if user existed and was updated
        """
        cursor = self._execute(
            "UPDATE users SET password_hash = ? WHERE id = ?",
            (self._hash_password(new_password), user_id)
        )
        self._commit()
        return cursor.rowcount > 0

    def update_email(self, user_id: int, email: str) -> bool:
        with self._unique("Email already exists"):
            cursor = self._execute(
                "UPDATE users SET email = ? WHERE id = ?",
                (email.lower().strip(), user_id)
            )
            self._commit()
        return cursor.rowcount > 0

    def set_role(self, user_id: int, role: Role) -> bool:
        cursor = self._execute(
            "UPDATE users SET role = ? WHERE id = ?",
            (role.value, user_id)
        )
        self._commit()
        return cursor.rowcount > 0

    def set_enabled(self, user_id: int, enabled: bool) -> bool:
        cursor = self._execute(
            "UPDATE users SET enabled = ? WHERE id = ?",
            (1 if enabled else 0, user_id)
        )
        self._commit()
        return cursor.rowcount > 0

    def delete(self, user_id: int) -> bool:
        """Delete the user row. Does not commit.

        Dependent rows must already be gone; see ``UserService.delete_user``.
        """
        cursor = self._execute("DELETE FROM users WHERE id = ?", (user_id,))
        return cursor.rowcount > 0

    def list_all(self) -> list[dict]:
        """List all users."""
        return self._fetchall(
            "SELECT id, username, email, role, enabled, created_at FROM users ORDER BY id"
        )

    def count(self) -> int:
        row = self._fetchone("SELECT COUNT(*) AS count FROM users")
        return row["count"] if row else 0

    def count_by_role(self, role: Role) -> int:
        row = self._fetchone(
            "SELECT COUNT(*) AS count FROM users WHERE role = ?",
            (role.value,)
        )
        return row["count"] if row else 0

    def search(self, query: str, exclude_user_id: int | None = None, limit: int = 10) -> list[dict]:
        """Search users by username or email.

        Args:
            query: Search string
            exclude_user_id: Optional user ID to exclude from results
            limit: Maximum results

        Returns:
            List of matching users
        """
        search_pattern = f"%{query.lower()}%"

        if exclude_user_id:
            return self._fetchall(
                """SELECT id, username, email
                   FROM users
                   WHERE id != ? AND enabled = 1
                     AND (LOWER(username) LIKE ? OR LOWER(email) LIKE ?)
                   ORDER BY username
                   LIMIT ?""",
                (exclude_user_id, search_pattern, search_pattern, limit)
            )
        return self._fetchall(
            """SELECT id, username, email
               FROM users
               WHERE enabled = 1 AND (LOWER(username) LIKE ? OR LOWER(email) LIKE ?)
               ORDER BY username
               LIMIT ?""",
            (search_pattern, search_pattern, limit)
        )

    def authenticate(self, username: str, password: str) -> dict | None:
        """Check username and password.

        Returns:
            User dict if the credentials match, None otherwise. Enabled state
            is checked by the caller.
        """
        user = self.get_by_username(username)
        if not user:
            return None

        if self._verify_password(password, user["password_hash"]):
            return user
        return None

    # Private helper methods

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt."""
        hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
        return hashed.decode('utf-8')

    def _verify_password(self, password: str, hashed: str) -> bool:
        if not (hashed.startswith("$2b$") or hashed.startswith("$2a$")):
            return False
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
