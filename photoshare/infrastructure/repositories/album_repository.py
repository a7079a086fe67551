"""Album repository - album management.

This repository handles albums and their many-to-many relationship with
photos via the album_photos junction table. Removing an album or a photo
from an album never touches the photo rows themselves.
"""
from typing import Dict, List, Optional

from .base import Repository


class AlbumRepository(Repository):
    """Repository for albums."""

    def create(self, owner_id: int, name: str, description: str | None = None) -> int:
        """Create a new album.

        Args:
            owner_id: Owner user ID
            name: Album name (unique per owner)
            description: Optional description

        Returns:
            New album ID
        """
        with self._unique("You already have an album with this name"):
            cursor = self._execute(
                """INSERT INTO albums (name, description, owner_id)
                   VALUES (?, ?, ?)""",
                (name, description, owner_id)
            )
            self._commit()
        return cursor.lastrowid

    def get_by_id(self, album_id: int) -> Optional[Dict]:
        """Get album by ID."""
        return self._fetchone(
            """SELECT a.*,
                (SELECT COUNT(*) FROM album_photos WHERE album_id = a.id) as photo_count
               FROM albums a WHERE a.id = ?""",
            (album_id,)
        )

    def list_by_owner(self, owner_id: int) -> List[Dict]:
        return self._fetchall(
            """SELECT a.*,
                (SELECT COUNT(*) FROM album_photos WHERE album_id = a.id) as photo_count
               FROM albums a
               WHERE a.owner_id = ?
               ORDER BY a.created_at DESC, a.id DESC""",
            (owner_id,)
        )

    def list_all(self) -> List[Dict]:
        return self._fetchall(
            """SELECT a.*,
                (SELECT COUNT(*) FROM album_photos WHERE album_id = a.id) as photo_count
               FROM albums a
               ORDER BY a.created_at DESC, a.id DESC"""
        )

    def update(self, album_id: int, name: str | None = None, description: str | None = None) -> bool:
        fields = []
        params: list = []
        if name is not None:
            fields.append("name = ?")
            params.append(name)
        if description is not None:
            fields.append("description = ?")
            params.append(description)
        if not fields:
            return self.get_by_id(album_id) is not None

        params.append(album_id)
        with self._unique("You already have an album with this name"):
            cursor = self._execute(
                f"UPDATE albums SET {', '.join(fields)} WHERE id = ?",
                tuple(params)
            )
            self._commit()
        return cursor.rowcount > 0

    def delete(self, album_id: int) -> bool:
        """Delete album and its photo associations. Does not commit."""
        self._execute("DELETE FROM album_photos WHERE album_id = ?", (album_id,))
        cursor = self._execute("DELETE FROM albums WHERE id = ?", (album_id,))
        return cursor.rowcount > 0

    def delete_by_owner(self, owner_id: int) -> int:
        """Delete all albums of a user. Associations must be gone. Does not commit."""
        cursor = self._execute("DELETE FROM albums WHERE owner_id = ?", (owner_id,))
        return cursor.rowcount

    def add_photo(self, album_id: int, photo_id: int, commit: bool = True) -> bool:
        """Add photo to album. Pass ``commit=False`` inside a transaction.

        Returns:
            False if the photo was already in the album
        """
        cursor = self._execute(
            "INSERT OR IGNORE INTO album_photos (album_id, photo_id) VALUES (?, ?)",
            (album_id, photo_id)
        )
        if commit:
            self._commit()
        return cursor.rowcount > 0

    def remove_photo(self, album_id: int, photo_id: int) -> bool:
        cursor = self._execute(
            "DELETE FROM album_photos WHERE album_id = ? AND photo_id = ?",
            (album_id, photo_id)
        )
        self._commit()
        return cursor.rowcount > 0

    def get_photos(self, album_id: int) -> List[Dict]:
        """Photos in album in insertion order."""
        return self._fetchall(
            """SELECT p.id, p.title, p.description, p.content_type, p.size,
                      p.visibility, p.owner_id, p.created_at, ap.added_at
               FROM album_photos ap
               JOIN photos p ON ap.photo_id = p.id
               WHERE ap.album_id = ?
               ORDER BY ap.added_at, p.id""",
            (album_id,)
        )

    def delete_associations_for_photos(self, photo_ids: list[int]) -> int:
        """Remove the given photos from every album. Does not commit."""
        if not photo_ids:
            return 0
        cursor = self._execute(
            f"DELETE FROM album_photos WHERE photo_id IN ({self._placeholders(photo_ids)})",
            tuple(photo_ids)
        )
        return cursor.rowcount

    def delete_associations_for_owner(self, owner_id: int) -> int:
        """Empty every album of a user. Does not commit."""
        cursor = self._execute(
            """DELETE FROM album_photos
               WHERE album_id IN (SELECT id FROM albums WHERE owner_id = ?)""",
            (owner_id,)
        )
        return cursor.rowcount

    def count(self) -> int:
        row = self._fetchone("SELECT COUNT(*) AS count FROM albums")
        return row["count"] if row else 0
