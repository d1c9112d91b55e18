"""
Profile domain — read path.  Every field beyond the minimal summary is gated by
the visibility resolver.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.service import require_account
from app.exceptions import UserHidden
from app.profile.schemas import ProfileResponse
from app.social_graph import service as graph_svc
from app.social_graph import store, visibility
from app.social_graph.constants import FollowState, Verdict


async def get_profile(
    session: AsyncSession,
    subject_id: uuid.UUID,
    *,
    viewer_id: uuid.UUID,
    viewer_is_staff: bool = False,
) -> ProfileResponse:
    subject = await require_account(session, subject_id)
    verdict = await visibility.resolve_for_account(
        session, viewer_id, subject, viewer_is_staff=viewer_is_staff
    )
    if not visibility.summary_visible(verdict):
        raise UserHidden()

    profile = ProfileResponse(
        id=subject.id,
        username=subject.username,
        full_name=subject.full_name,
        avatar_url=subject.avatar_url,
        verified=subject.verified,
        is_private=subject.is_private,
        is_restricted=verdict != Verdict.ALLOW,
    )
    if viewer_id != subject.id:
        outgoing, incoming = await graph_svc.follow_status(session, viewer_id, subject.id)
        profile.follow_state = outgoing
        profile.is_followed_by = incoming == FollowState.ACCEPTED

    if verdict == Verdict.ALLOW:
        followers, following = await store.count_accepted(session, subject.id)
        profile.bio = subject.bio
        profile.follower_count = followers
        profile.following_count = following
        profile.created_at = subject.created_at
    return profile
