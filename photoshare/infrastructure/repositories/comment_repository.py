"""Comment repository."""
from typing import Optional

from .base import Repository


class CommentRepository(Repository):
    """Repository for comments on photos."""

    def create(self, photo_id: int, author_id: int, text: str) -> int:
        cursor = self._execute(
            "INSERT INTO comments (text, photo_id, author_id) VALUES (?, ?, ?)",
            (text, photo_id, author_id)
        )
        self._commit()
        return cursor.lastrowid

    def get_by_id(self, comment_id: int) -> Optional[dict]:
        return self._fetchone(
            """SELECT c.*, u.username AS author_username
               FROM comments c JOIN users u ON c.author_id = u.id
               WHERE c.id = ?""",
            (comment_id,)
        )

    def list_for_photo(self, photo_id: int) -> list[dict]:
        return self._fetchall(
            """SELECT c.id, c.text, c.photo_id, c.author_id, c.created_at,
                      u.username AS author_username
               FROM comments c JOIN users u ON c.author_id = u.id
               WHERE c.photo_id = ?
               ORDER BY c.created_at, c.id""",
            (photo_id,)
        )

    def update_text(self, comment_id: int, text: str) -> bool:
        cursor = self._execute(
            "UPDATE comments SET text = ? WHERE id = ?",
            (text, comment_id)
        )
        self._commit()
        return cursor.rowcount > 0

    def delete(self, comment_id: int) -> bool:
        cursor = self._execute("DELETE FROM comments WHERE id = ?", (comment_id,))
        self._commit()
        return cursor.rowcount > 0

    def delete_for_photos(self, photo_ids: list[int]) -> int:
        """Does not commit."""
        if not photo_ids:
            return 0
        cursor = self._execute(
            f"DELETE FROM comments WHERE photo_id IN ({self._placeholders(photo_ids)})",
            tuple(photo_ids)
        )
        return cursor.rowcount

    def delete_by_author(self, author_id: int) -> int:
        """Does not commit."""
        cursor = self._execute("DELETE FROM comments WHERE author_id = ?", (author_id,))
        return cursor.rowcount

    def count(self) -> int:
        row = self._fetchone("SELECT COUNT(*) AS count FROM comments")
        return row["count"] if row else 0
