import enum


class AccountStatus(str, enum.Enum):
    NORMAL = "normal"
    BANNED = "banned"
    SUSPENDED = "suspended"
    DEACTIVATED = "deactivated"
