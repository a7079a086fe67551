"""Photo repository - handles all photo-related database operations.

Manages photo metadata rows:
- Storage references (original and thumbnail keys)
- Detected content type and byte size
- Visibility and ownership
"""
from ...models import Visibility
from .base import Repository

_LISTING_COLUMNS = """p.id, p.title, p.description, p.original_filename, p.content_type,
                      p.size, p.visibility, p.owner_id, p.created_at,
                      u.username AS owner_username"""


class PhotoRepository(Repository):
    """Repository for photo entity operations.

    Examples:
        >>> repo = PhotoRepository(db)
        >>> photo_id = repo.create("Summer Trip", None, "beach.jpg", key, thumb_key,
        ...                        "image/jpeg", 1024, Visibility.PUBLIC, owner_id=1)
        >>> photos = repo.list_public()
    """

    def create(
        self,
        title: str,
        description: str | None,
        original_filename: str | None,
        storage_key: str,
        thumbnail_key: str,
        content_type: str,
        size: int,
        visibility: Visibility,
        owner_id: int,
        commit: bool = True,
    ) -> int:
        """Create new photo record.

        Args:
            title: Display title
            description: Optional description
            original_filename: Client-supplied name, display only
            storage_key: Generated blob key (unique)
            thumbnail_key: Thumbnail key, or the storage key on fallback
            content_type: Detected MIME type
            size: Byte size of the original
            visibility: PRIVATE or PUBLIC
            owner_id: Uploading user ID
            commit: False when the insert is part of a larger transaction

        Returns:
            New photo ID
        """
        with self._unique("Storage key already exists"):
            cursor = self._execute(
                """INSERT INTO photos
                   (title, description, original_filename, storage_key, thumbnail_key,
                    content_type, size, visibility, owner_id)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    title, description, original_filename, storage_key, thumbnail_key,
                    content_type, size, visibility.value, owner_id
                )
            )
            if commit:
                self._commit()
        return cursor.lastrowid

    def get_by_id(self, photo_id: int) -> dict | None:
        """Get photo by ID."""
        return self._fetchone(
            """SELECT p.*, u.username AS owner_username
               FROM photos p JOIN users u ON p.owner_id = u.id
               WHERE p.id = ?""",
            (photo_id,)
        )

    def get_by_storage_key(self, storage_key: str) -> dict | None:
        return self._fetchone(
            "SELECT * FROM photos WHERE storage_key = ?",
            (storage_key,)
        )

    def update(
        self,
        photo_id: int,
        title: str | None = None,
        description: str | None = None,
        visibility: Visibility | None = None,
    ) -> bool:
        """Update mutable metadata. ``None`` leaves a field unchanged.

        An empty description clears it.

        Returns:
            True if photo existed
        """
        fields = []
        params: list = []
        if title is not None:
            fields.append("title = ?")
            params.append(title)
        if description is not None:
            fields.append("description = ?")
            params.append(description or None)
        if visibility is not None:
            fields.append("visibility = ?")
            params.append(visibility.value)

        if not fields:
            return self.get_by_id(photo_id) is not None

        params.append(photo_id)
        cursor = self._execute(
            f"UPDATE photos SET {', '.join(fields)} WHERE id = ?",
            tuple(params)
        )
        self._commit()
        return cursor.rowcount > 0

    def delete(self, photo_id: int) -> bool:
        """Delete photo row. Does not commit."""
        cursor = self._execute("DELETE FROM photos WHERE id = ?", (photo_id,))
        return cursor.rowcount > 0

    def delete_by_owner(self, owner_id: int) -> int:
        """Delete all photos of a user. Does not commit."""
        cursor = self._execute("DELETE FROM photos WHERE owner_id = ?", (owner_id,))
        return cursor.rowcount

    def get_storage_keys_by_owner(self, owner_id: int) -> list[dict]:
        """Collect id and blob keys of every photo the user owns."""
        return self._fetchall(
            "SELECT id, storage_key, thumbnail_key FROM photos WHERE owner_id = ?",
            (owner_id,)
        )

    def list_public(self, limit: int = 100, offset: int = 0) -> list[dict]:
        return self._fetchall(
            f"""SELECT {_LISTING_COLUMNS}
                FROM photos p JOIN users u ON p.owner_id = u.id
                WHERE p.visibility = 'PUBLIC'
                ORDER BY p.created_at DESC, p.id DESC
                LIMIT ? OFFSET ?""",
            (limit, offset)
        )

    def list_by_owner(self, owner_id: int) -> list[dict]:
        return self._fetchall(
            f"""SELECT {_LISTING_COLUMNS}
                FROM photos p JOIN users u ON p.owner_id = u.id
                WHERE p.owner_id = ?
                ORDER BY p.created_at DESC, p.id DESC""",
            (owner_id,)
        )

    def list_shared_with(self, user_id: int) -> list[dict]:
        """Photos shared with user, with the grant level."""
        return self._fetchall(
            f"""SELECT {_LISTING_COLUMNS}, s.permission_level
                FROM photos p
                JOIN shares s ON s.photo_id = p.id
                JOIN users u ON p.owner_id = u.id
                WHERE s.user_id = ?
                ORDER BY p.created_at DESC, p.id DESC""",
            (user_id,)
        )

    def list_accessible(self, user_id: int) -> list[dict]:
        """Owned, shared-with and public photos for a regular user."""
        return self._fetchall(
            f"""SELECT {_LISTING_COLUMNS}
                FROM photos p JOIN users u ON p.owner_id = u.id
                WHERE p.owner_id = ?
                   OR p.visibility = 'PUBLIC'
                   OR p.id IN (SELECT photo_id FROM shares WHERE user_id = ?)
                ORDER BY p.created_at DESC, p.id DESC""",
            (user_id, user_id)
        )

    def list_all(self) -> list[dict]:
        return self._fetchall(
            f"""SELECT {_LISTING_COLUMNS}
                FROM photos p JOIN users u ON p.owner_id = u.id
                ORDER BY p.created_at DESC, p.id DESC"""
        )

    def search(self, term: str, user_id: int | None, see_all: bool = False) -> list[dict]:
        """Search titles and descriptions among photos the user may see.

        Args:
            term: Search string
            user_id: Searching user, or None for anonymous (public only)
            see_all: Admins and moderators see every photo
        """
        pattern = f"%{term.lower()}%"
        match = "(LOWER(p.title) LIKE ? OR LOWER(COALESCE(p.description, '')) LIKE ?)"

        if see_all:
            where, params = match, (pattern, pattern)
        elif user_id is None:
            where, params = f"p.visibility = 'PUBLIC' AND {match}", (pattern, pattern)
        else:
            where = f"""(p.owner_id = ? OR p.visibility = 'PUBLIC'
                         OR p.id IN (SELECT photo_id FROM shares WHERE user_id = ?))
                        AND {match}"""
            params = (user_id, user_id, pattern, pattern)

        return self._fetchall(
            f"""SELECT {_LISTING_COLUMNS}
                FROM photos p JOIN users u ON p.owner_id = u.id
                WHERE {where}
                ORDER BY p.created_at DESC, p.id DESC""",
            params
        )

    def count(self) -> int:
        row = self._fetchone("SELECT COUNT(*) AS count FROM photos")
        return row["count"] if row else 0

    def total_size(self) -> int:
        row = self._fetchone("SELECT COALESCE(SUM(size), 0) AS total FROM photos")
        return row["total"] if row else 0
