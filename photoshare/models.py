"""Domain value types: roles, visibility, permission levels, principals."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import ValidationError


class Role(str, Enum):
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value: str) -> "Role":
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown role: {value}")


class Visibility(str, Enum):
    PRIVATE = "PRIVATE"
    PUBLIC = "PUBLIC"

    @classmethod
    def parse(cls, value: str) -> "Visibility":
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown visibility: {value}")


class PermissionLevel(str, Enum):
    """Share permission level.

    Levels are totally ordered READ < COMMENT < ADMIN and a higher level
    carries every capability of the lower ones. All comparisons go through
    ``at_least`` so the ordering lives in one place.
    """

    READ = "READ"
    COMMENT = "COMMENT"
    ADMIN = "ADMIN"

    @property
    def rank(self) -> int:
        return _PERMISSION_RANK[self]

    def at_least(self, other: "PermissionLevel") -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: str) -> "PermissionLevel":
        """Parse a level from user input, raising ValidationError if malformed."""
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(
                f"Invalid permission level: {value}. Use READ, COMMENT or ADMIN"
            )


_PERMISSION_RANK = {
    PermissionLevel.READ: 1,
    PermissionLevel.COMMENT: 2,
    PermissionLevel.ADMIN: 3,
}


def level_at_least(level: Optional[PermissionLevel], required: PermissionLevel) -> bool:
    """Missing share counts as below READ."""
    return level is not None and level.at_least(required)


class Action(str, Enum):
    """Actions the access resolver can be asked about."""

    READ = "READ"
    COMMENT = "COMMENT"
    EDIT = "EDIT"
    DELETE = "DELETE"
    MANAGE_SHARES = "MANAGE_SHARES"
    DELETE_COMMENT = "DELETE_COMMENT"
    ACCESS_ALBUM = "ACCESS_ALBUM"


@dataclass(frozen=True)
class Principal:
    """Authenticated actor. Anonymous requests are represented by ``None``."""

    id: int
    username: str
    role: Role = Role.USER
    enabled: bool = True
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_moderator_or_admin(self) -> bool:
        return self.role in (Role.ADMIN, Role.MODERATOR)

    @classmethod
    def from_row(cls, row: dict) -> "Principal":
        return cls(
            id=row["id"],
            username=row["username"],
            role=Role(row["role"]),
            enabled=bool(row["enabled"]),
            email=row.get("email") or "",
        )
