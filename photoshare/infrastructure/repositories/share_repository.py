"""Share repository - per-photo access grants.

One row per (photo, grantee) pair holds the current permission level:
- READ: view the photo
- COMMENT: view and comment
- ADMIN: view, comment, edit, delete and manage shares
"""
from typing import Optional

from ...models import PermissionLevel
from .base import Repository


class ShareRepository(Repository):
    """Repository for photo share operations.

    Examples:
        >>> repo = ShareRepository(db)
        >>> repo.create(photo_id, user_id, PermissionLevel.COMMENT)
        >>> repo.get_level(photo_id, user_id)
        <PermissionLevel.COMMENT: 'COMMENT'>
    """

    def create(self, photo_id: int, user_id: int, level: PermissionLevel) -> int:
        """Create a grant.

        Raises:
            ValidationError: the pair already has a grant
        """
        with self._unique("Photo is already shared with this user"):
            cursor = self._execute(
                """INSERT INTO shares (photo_id, user_id, permission_level)
                   VALUES (?, ?, ?)""",
                (photo_id, user_id, level.value)
            )
            self._commit()
        return cursor.lastrowid

    def update_level(self, photo_id: int, user_id: int, level: PermissionLevel) -> bool:
        """Replace the current level of an existing grant."""
        cursor = self._execute(
            """UPDATE shares SET permission_level = ?
               WHERE photo_id = ? AND user_id = ?""",
            (level.value, photo_id, user_id)
        )
        self._commit()
        return cursor.rowcount > 0

    def delete(self, photo_id: int, user_id: int) -> bool:
        cursor = self._execute(
            "DELETE FROM shares WHERE photo_id = ? AND user_id = ?",
            (photo_id, user_id)
        )
        self._commit()
        return cursor.rowcount > 0

    def get(self, photo_id: int, user_id: int) -> Optional[dict]:
        return self._fetchone(
            "SELECT * FROM shares WHERE photo_id = ? AND user_id = ?",
            (photo_id, user_id)
        )

    def get_level(self, photo_id: int, user_id: int) -> Optional[PermissionLevel]:
        """Current level of the grant, or None when there is none."""
        row = self._fetchone(
            "SELECT permission_level FROM shares WHERE photo_id = ? AND user_id = ?",
            (photo_id, user_id)
        )
        return PermissionLevel(row["permission_level"]) if row else None

    def list_for_photo(self, photo_id: int) -> list[dict]:
        return self._fetchall(
            """SELECT s.id, s.photo_id, s.user_id, s.permission_level, s.created_at,
                      u.username
               FROM shares s JOIN users u ON s.user_id = u.id
               WHERE s.photo_id = ?
               ORDER BY u.username""",
            (photo_id,)
        )

    def delete_for_photos(self, photo_ids: list[int]) -> int:
        """Does not commit."""
        if not photo_ids:
            return 0
        cursor = self._execute(
            f"DELETE FROM shares WHERE photo_id IN ({self._placeholders(photo_ids)})",
            tuple(photo_ids)
        )
        return cursor.rowcount

    def delete_for_grantee(self, user_id: int) -> int:
        """Does not commit."""
        cursor = self._execute("DELETE FROM shares WHERE user_id = ?", (user_id,))
        return cursor.rowcount

    def count(self) -> int:
        row = self._fetchone("SELECT COUNT(*) AS count FROM shares")
        return row["count"] if row else 0
