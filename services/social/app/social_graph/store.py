"""
Relationship store — the only module that issues queries against ``follows``
and ``blocks``.

Every call is atomic at the single-row level.  Multi-row invariants (a block
removing follow edges in both directions) are orchestrated by the state
machine in service.py, not assumed from the database.
"""
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AlreadyBlocked, AlreadyFollowing
from app.social_graph.constants import FollowState
from app.social_graph.models import Block, Follow


# ── Follow edges ───────────────────────────────────────────────────────────────

async def find_follow_edge(
    session: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID
) -> Follow | None:
    result = await session.execute(
        sa.select(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return result.scalar_one_or_none()


async def create_follow_edge(
    session: AsyncSession,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
    state: FollowState,
) -> Follow:
    """Insert a new edge.  A concurrent insert for the same pair loses with
    AlreadyFollowing; the whole unit of work is rolled back."""
    edge = Follow(follower_id=follower_id, following_id=following_id, state=state)
    session.add(edge)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise AlreadyFollowing() from exc
    return edge


async def update_follow_edge_state(
    session: AsyncSession, edge: Follow, state: FollowState
) -> Follow:
    edge.state = state
    await session.flush()
    return edge


async def delete_follow_edge(
    session: AsyncSession, follower_id: uuid.UUID, following_id: uuid.UUID
) -> bool:
    result = await session.execute(
        sa.delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return result.rowcount > 0


async def delete_follow_edges_between(
    session: AsyncSession, a: uuid.UUID, b: uuid.UUID
) -> int:
    result = await session.execute(
        sa.delete(Follow).where(
            sa.or_(
                sa.and_(Follow.follower_id == a, Follow.following_id == b),
                sa.and_(Follow.follower_id == b, Follow.following_id == a),
            )
        )
    )
    return result.rowcount


async def count_pending(session: AsyncSession, recipient_id: uuid.UUID) -> int:
    result = await session.execute(
        sa.select(sa.func.count())
        .select_from(Follow)
        .where(Follow.following_id == recipient_id, Follow.state == FollowState.PENDING)
    )
    return result.scalar_one()


async def count_accepted(
    session: AsyncSession, user_id: uuid.UUID
) -> tuple[int, int]:
    """Return (followers, following) counted over ACCEPTED edges only."""
    followers = await session.execute(
        sa.select(sa.func.count())
        .select_from(Follow)
        .where(Follow.following_id == user_id, Follow.state == FollowState.ACCEPTED)
    )
    following = await session.execute(
        sa.select(sa.func.count())
        .select_from(Follow)
        .where(Follow.follower_id == user_id, Follow.state == FollowState.ACCEPTED)
    )
    return followers.scalar_one(), following.scalar_one()


async def accepted_targets(
    session: AsyncSession, follower_id: uuid.UUID, target_ids: list[uuid.UUID]
) -> set[uuid.UUID]:
    """Return the subset of target_ids that follower_id follows (ACCEPTED)."""
    if not target_ids:
        return set()
    result = await session.execute(
        sa.select(Follow.following_id).where(
            Follow.follower_id == follower_id,
            Follow.following_id.in_(target_ids),
            Follow.state == FollowState.ACCEPTED,
        )
    )
    return {row[0] for row in result.all()}


# ── Block edges ────────────────────────────────────────────────────────────────

async def find_block_edge(
    session: AsyncSession, a: uuid.UUID, b: uuid.UUID
) -> Block | None:
    """Return a block between a and b in either direction, if any."""
    result = await session.execute(
        sa.select(Block)
        .where(
            sa.or_(
                sa.and_(Block.blocker_id == a, Block.blocked_id == b),
                sa.and_(Block.blocker_id == b, Block.blocked_id == a),
            )
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def block_exists(
    session: AsyncSession, blocker_id: uuid.UUID, blocked_id: uuid.UUID
) -> bool:
    """Directional check: has blocker_id blocked blocked_id?"""
    result = await session.execute(
        sa.select(sa.exists().where(
            Block.blocker_id == blocker_id,
            Block.blocked_id == blocked_id,
        ))
    )
    return result.scalar_one()


async def create_block_edge(
    session: AsyncSession, blocker_id: uuid.UUID, blocked_id: uuid.UUID
) -> Block:
    edge = Block(blocker_id=blocker_id, blocked_id=blocked_id)
    session.add(edge)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise AlreadyBlocked() from exc
    return edge


async def delete_block_edge(
    session: AsyncSession, blocker_id: uuid.UUID, blocked_id: uuid.UUID
) -> bool:
    result = await session.execute(
        sa.delete(Block).where(
            Block.blocker_id == blocker_id,
            Block.blocked_id == blocked_id,
        )
    )
    return result.rowcount > 0
