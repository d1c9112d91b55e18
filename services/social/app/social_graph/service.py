"""
Social graph domain — pure business logic (zero FastAPI imports).

Follow request state machine (per ordered pair follower → following):

  NONE ──request──▶ ACCEPTED                 (following is public; auto-accept)
  NONE ──request──▶ PENDING                  (following is private)
  PENDING ──approve (following)──▶ ACCEPTED
  PENDING ──decline (following)──▶ NONE
  PENDING ──cancel (follower)────▶ NONE
  ACCEPTED ──unfollow (follower)─▶ NONE

  request fails with AlreadyFollowing when any edge exists; callers treat that
  as a no-op error, never a retry signal.

Block:  cannot block self; creating one deletes follow edges in both
        directions, so no stale PENDING/ACCEPTED edge survives it.
Report: any user can report any target; a review emits ReportResolved.

Transitions return the domain events they produce; the controller hands them
to the notification generator inside the same unit of work.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.constants import AccountStatus
from app.accounts.models import Account
from app.accounts.service import require_account
from app.exceptions import (
    ActionBlocked,
    AlreadyBlocked,
    AlreadyFollowing,
    CannotBlockSelf,
    CannotFollowSelf,
    FollowCooldownActive,
    FollowRequestNotFound,
    NotBlocked,
    NotFollowing,
    ReportNotFound,
    UserHidden,
)
from app.social_graph import store
from app.social_graph.constants import FollowState, ReportStatus, ReportTargetType
from app.social_graph.cooldown import FollowCooldown
from app.social_graph.models import Block, Follow, Report
from shared.events import (
    DomainEvent,
    FollowAccepted,
    FollowCancelled,
    FollowDeclined,
    FollowRequested,
    NewFollower,
    ReportResolved,
)

logger = logging.getLogger(__name__)


@dataclass
class Transition:
    """Result of a relationship mutation: the state now held by the edge
    (None once deleted) and the events to hand to the generator."""

    state: FollowState | None
    events: list[DomainEvent] = field(default_factory=list)


# ── Follow state machine ──────────────────────────────────────────────────────

async def request_follow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
    *,
    cooldown: FollowCooldown | None = None,
) -> Transition:
    """Open a follow edge.

    The cooldown is checked last: duplicates fail with AlreadyFollowing and
    rejected attempts leave the window untouched.
    """
    if follower_id == following_id:
        raise CannotFollowSelf()
    target = await require_account(session, following_id)
    if target.status != AccountStatus.NORMAL:
        raise UserHidden()
    if await store.find_block_edge(session, follower_id, following_id) is not None:
        raise ActionBlocked()
    if await store.find_follow_edge(session, follower_id, following_id) is not None:
        raise AlreadyFollowing()
    if cooldown is not None and not await cooldown.try_acquire(follower_id, following_id):
        raise FollowCooldownActive()

    if target.is_private:
        await store.create_follow_edge(session, follower_id, following_id, FollowState.PENDING)
        logger.info("follow requested %s -> %s", follower_id, following_id)
        return Transition(
            state=FollowState.PENDING,
            events=[FollowRequested(follower_id=follower_id, following_id=following_id)],
        )

    await store.create_follow_edge(session, follower_id, following_id, FollowState.ACCEPTED)
    logger.info("follow auto-accepted %s -> %s", follower_id, following_id)
    return Transition(
        state=FollowState.ACCEPTED,
        events=[
            FollowAccepted(follower_id=follower_id, following_id=following_id, auto=True),
            NewFollower(follower_id=follower_id, following_id=following_id),
        ],
    )


async def _require_pending(
    session: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID
) -> Follow:
    edge = await store.find_follow_edge(session, follower_id, following_id)
    if edge is None or edge.state != FollowState.PENDING:
        raise FollowRequestNotFound()
    return edge


async def approve_follow(
    session: AsyncSession,
    following_id: uuid.UUID,
    follower_id: uuid.UUID,
) -> Transition:
    """The followed account (``following_id``) approves a pending request."""
    edge = await _require_pending(session, follower_id, following_id)
    await store.update_follow_edge_state(session, edge, FollowState.ACCEPTED)
    logger.info("follow approved %s -> %s", follower_id, following_id)
    return Transition(
        state=FollowState.ACCEPTED,
        events=[FollowAccepted(follower_id=follower_id, following_id=following_id)],
    )


async def decline_follow(
    session: AsyncSession,
    following_id: uuid.UUID,
    follower_id: uuid.UUID,
) -> Transition:
    await _require_pending(session, follower_id, following_id)
    await store.delete_follow_edge(session, follower_id, following_id)
    logger.info("follow declined %s -> %s", follower_id, following_id)
    return Transition(
        state=None,
        events=[FollowDeclined(follower_id=follower_id, following_id=following_id)],
    )


async def cancel_follow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> Transition:
    await _require_pending(session, follower_id, following_id)
    await store.delete_follow_edge(session, follower_id, following_id)
    logger.info("follow request cancelled %s -> %s", follower_id, following_id)
    return Transition(
        state=None,
        events=[FollowCancelled(follower_id=follower_id, following_id=following_id)],
    )


async def unfollow(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> Transition:
    edge = await store.find_follow_edge(session, follower_id, following_id)
    if edge is None or edge.state != FollowState.ACCEPTED:
        raise NotFollowing()
    await store.delete_follow_edge(session, follower_id, following_id)
    logger.info("unfollowed %s -> %s", follower_id, following_id)
    return Transition(state=None)


# ── Block ──────────────────────────────────────────────────────────────────────

async def block(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
) -> int:
    """Create the block and return how many follow edges it removed."""
    if blocker_id == blocked_id:
        raise CannotBlockSelf()
    await require_account(session, blocked_id)
    if await store.block_exists(session, blocker_id, blocked_id):
        raise AlreadyBlocked()
    await store.create_block_edge(session, blocker_id, blocked_id)
    removed = await store.delete_follow_edges_between(session, blocker_id, blocked_id)
    logger.info("blocked %s -> %s (%d follow edges removed)", blocker_id, blocked_id, removed)
    return removed


async def unblock(
    session: AsyncSession,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
) -> None:
    if not await store.delete_block_edge(session, blocker_id, blocked_id):
        raise NotBlocked()
    logger.info("unblocked %s -> %s", blocker_id, blocked_id)


# ── Follow status ─────────────────────────────────────────────────────────────

async def follow_status(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    target_id: uuid.UUID,
) -> tuple[FollowState | None, FollowState | None]:
    """Return (viewer→target state, target→viewer state)."""
    outgoing = await store.find_follow_edge(session, viewer_id, target_id)
    incoming = await store.find_follow_edge(session, target_id, viewer_id)
    return (
        outgoing.state if outgoing is not None else None,
        incoming.state if incoming is not None else None,
    )


# ── Following / Followers lists ────────────────────────────────────────────────

async def _list_edges(
    session: AsyncSession,
    *,
    where: sa.ColumnElement[bool],
    join_on: sa.ColumnElement[bool],
    page: int,
    size: int,
) -> tuple[list[tuple[Follow, Account]], int]:
    total_r = await session.execute(
        sa.select(sa.func.count()).select_from(Follow).where(where)
    )
    total = total_r.scalar_one()
    rows_r = await session.execute(
        sa.select(Follow, Account)
        .join(Account, join_on)
        .where(where)
        .order_by(Follow.created_at.desc())
        .limit(size)
        .offset((page - 1) * size)
    )
    return [(f, a) for f, a in rows_r.all()], total


async def get_following(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    viewer_id: uuid.UUID,
    page: int,
    size: int,
) -> tuple[list[tuple[Follow, Account, bool]], int]:
    """
    Return (rows, total) where each row is (Follow, Account[following], is_followed_by_viewer).
    Only ACCEPTED edges count; pending requests are private to the two parties.
    """
    rows, total = await _list_edges(
        session,
        where=sa.and_(Follow.follower_id == user_id, Follow.state == FollowState.ACCEPTED),
        join_on=Account.id == Follow.following_id,
        page=page,
        size=size,
    )
    followed = await store.accepted_targets(session, viewer_id, [a.id for _, a in rows])
    return [(f, a, a.id in followed) for f, a in rows], total


async def get_followers(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    viewer_id: uuid.UUID,
    page: int,
    size: int,
) -> tuple[list[tuple[Follow, Account, bool]], int]:
    rows, total = await _list_edges(
        session,
        where=sa.and_(Follow.following_id == user_id, Follow.state == FollowState.ACCEPTED),
        join_on=Account.id == Follow.follower_id,
        page=page,
        size=size,
    )
    followed = await store.accepted_targets(session, viewer_id, [a.id for _, a in rows])
    return [(f, a, a.id in followed) for f, a in rows], total


async def get_pending_requests(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    page: int,
    size: int,
) -> tuple[list[tuple[Follow, Account]], int]:
    """Incoming PENDING requests for user_id, newest first."""
    return await _list_edges(
        session,
        where=sa.and_(Follow.following_id == user_id, Follow.state == FollowState.PENDING),
        join_on=Account.id == Follow.follower_id,
        page=page,
        size=size,
    )


async def get_blocked(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    page: int,
    size: int,
) -> tuple[list[tuple[Block, Account]], int]:
    total_r = await session.execute(
        sa.select(sa.func.count()).select_from(Block).where(Block.blocker_id == user_id)
    )
    total = total_r.scalar_one()
    rows_r = await session.execute(
        sa.select(Block, Account)
        .join(Account, Account.id == Block.blocked_id)
        .where(Block.blocker_id == user_id)
        .order_by(Block.created_at.desc())
        .limit(size)
        .offset((page - 1) * size)
    )
    return [(b, a) for b, a in rows_r.all()], total


# ── Report ─────────────────────────────────────────────────────────────────────

async def create_report(
    session: AsyncSession,
    reporter_id: uuid.UUID,
    target_type: ReportTargetType,
    target_id: uuid.UUID,
    reason: str,
) -> Report:
    report = Report(
        reporter_id=reporter_id,
        target_type=target_type,
        target_id=target_id,
        reason=reason,
    )
    session.add(report)
    await session.flush()
    return report


async def get_reports(
    session: AsyncSession,
    *,
    status_filter: ReportStatus | None,
    page: int,
    size: int,
) -> tuple[list[Report], int]:
    base = sa.select(Report)
    count_base = sa.select(sa.func.count()).select_from(Report)
    if status_filter is not None:
        base = base.where(Report.status == status_filter)
        count_base = count_base.where(Report.status == status_filter)
    total = (await session.execute(count_base)).scalar_one()
    rows = (
        await session.execute(
            base.order_by(Report.created_at.asc()).limit(size).offset((page - 1) * size)
        )
    ).scalars().all()
    return list(rows), total


async def review_report(
    session: AsyncSession,
    report_id: uuid.UUID,
    reviewer_id: uuid.UUID,
    new_status: ReportStatus,
    action_taken: str | None,
) -> tuple[Report, list[DomainEvent]]:
    report = await session.get(Report, report_id)
    if report is None:
        raise ReportNotFound()
    report.status = new_status
    report.reviewed_by = reviewer_id
    report.action_taken = action_taken
    await session.flush()
    event = ReportResolved(
        report_id=report.report_id,
        reporter_id=report.reporter_id,
        status=new_status.value,
        action_taken=action_taken,
    )
    return report, [event]
