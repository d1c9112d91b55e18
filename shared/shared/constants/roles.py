from enum import Enum


class Role(str, Enum):
    USER = "user"
    CREATOR = "creator"
    MODERATOR = "moderator"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


# Roles that may see banned/suspended accounts and act on reports.
STAFF_ROLES: frozenset[Role] = frozenset({Role.MODERATOR, Role.ADMIN, Role.SUPER_ADMIN})
