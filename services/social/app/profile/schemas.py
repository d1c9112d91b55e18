from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from app.social_graph.constants import FollowState


class ProfileResponse(BaseModel):
    """
    The summary fields (id, username, full_name, avatar_url, verified,
    is_private) are always present.  The rest is filled only when the viewer
    may see the account's content; otherwise ``is_restricted`` is true and they
    stay null.
    """

    id: uuid.UUID
    username: str
    full_name: str | None = None
    avatar_url: str | None = None
    verified: bool
    is_private: bool
    is_restricted: bool

    bio: str | None = None
    follower_count: int | None = None
    following_count: int | None = None
    created_at: datetime | None = None

    # Relationship with the viewer; null when viewing yourself.
    follow_state: FollowState | None = None
    is_followed_by: bool | None = None
