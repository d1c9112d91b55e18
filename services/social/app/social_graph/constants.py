"""
Social graph domain — enums.
"""
from __future__ import annotations

import enum


class FollowState(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class Verdict(str, enum.Enum):
    """Outcome of the visibility resolver."""

    ALLOW = "allow"
    DENY_PRIVATE = "deny_private"
    DENY_BLOCKED = "deny_blocked"
    DENY_BANNED = "deny_banned"


class ReportTargetType(str, enum.Enum):
    USER = "user"
    POST = "post"
    REEL = "reel"
    STORY = "story"
    COMMENT = "comment"


class ReportStatus(str, enum.Enum):
    OPEN = "open"
    REVIEWED = "reviewed"
    ACTIONED = "actioned"
    DISMISSED = "dismissed"
