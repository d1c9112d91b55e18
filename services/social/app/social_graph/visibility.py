"""
Visibility resolver.

``decide`` is the pure rule; ``resolve`` loads the facts it needs through the
relationship store and applies it.  Every read surface that returns another
account's posts, reels, follower/following lists or profile fields beyond the
minimal summary goes through here.

Rules, first match wins:
  1. subject not NORMAL and viewer not staff     → DENY_BANNED
  2. block edge in either direction              → DENY_BLOCKED
  3. viewer is subject                           → ALLOW
  4. subject public                              → ALLOW
  5. subject private: ACCEPTED edge viewer→subject → ALLOW, else DENY_PRIVATE
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.constants import AccountStatus
from app.accounts.models import Account
from app.accounts.service import require_account
from app.exceptions import UserHidden
from app.social_graph import store
from app.social_graph.constants import FollowState, Verdict


@dataclass(frozen=True)
class VisibilityFacts:
    viewer_id: uuid.UUID
    subject_id: uuid.UUID
    subject_status: AccountStatus
    subject_is_private: bool
    blocked: bool
    follow_state: FollowState | None
    viewer_is_staff: bool = False


def decide(facts: VisibilityFacts) -> Verdict:
    if facts.subject_status != AccountStatus.NORMAL and not facts.viewer_is_staff:
        return Verdict.DENY_BANNED
    if facts.blocked:
        return Verdict.DENY_BLOCKED
    if facts.viewer_id == facts.subject_id:
        return Verdict.ALLOW
    if not facts.subject_is_private:
        return Verdict.ALLOW
    if facts.follow_state == FollowState.ACCEPTED:
        return Verdict.ALLOW
    return Verdict.DENY_PRIVATE


async def resolve_for_account(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    subject: Account,
    *,
    viewer_is_staff: bool = False,
) -> Verdict:
    blocked = False
    follow_state = None
    if viewer_id != subject.id:
        blocked = await store.find_block_edge(session, viewer_id, subject.id) is not None
        if subject.is_private and not blocked:
            edge = await store.find_follow_edge(session, viewer_id, subject.id)
            follow_state = edge.state if edge is not None else None
    return decide(
        VisibilityFacts(
            viewer_id=viewer_id,
            subject_id=subject.id,
            subject_status=subject.status,
            subject_is_private=subject.is_private,
            blocked=blocked,
            follow_state=follow_state,
            viewer_is_staff=viewer_is_staff,
        )
    )


async def resolve(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    subject_id: uuid.UUID,
    *,
    viewer_is_staff: bool = False,
) -> Verdict:
    """Raises UserNotFound if the subject does not exist."""
    subject = await require_account(session, subject_id)
    return await resolve_for_account(
        session, viewer_id, subject, viewer_is_staff=viewer_is_staff
    )


async def require_visible(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    subject_id: uuid.UUID,
    *,
    viewer_is_staff: bool = False,
) -> Account:
    """Return the subject if the viewer gets ALLOW; otherwise raise UserHidden
    without saying which rule denied."""
    subject = await require_account(session, subject_id)
    verdict = await resolve_for_account(
        session, viewer_id, subject, viewer_is_staff=viewer_is_staff
    )
    if verdict != Verdict.ALLOW:
        raise UserHidden()
    return subject


def summary_visible(verdict: Verdict) -> bool:
    """The minimal public summary survives privacy but not blocks or bans."""
    return verdict in (Verdict.ALLOW, Verdict.DENY_PRIVATE)
