"""
Social graph domain — request orchestration.

Every relationship mutation runs under the pair lock, hands its events to the
runtime (generate → commit → fan out) and only then answers the caller.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.locks import pair_key
from app.runtime import SocialRuntime, commit
from app.social_graph import service as svc
from app.social_graph import store, visibility
from app.social_graph.constants import FollowState, ReportStatus
from app.social_graph.models import Report
from app.social_graph.schemas import (
    AdminReportItem,
    AdminReportListResponse,
    AdminReportReviewRequest,
    BlockResponse,
    FollowActionResponse,
    FollowListItem,
    FollowListResponse,
    FollowStatusResponse,
    PendingCountResponse,
    ReportRequest,
    ReportResponse,
    SocialRelationItem,
    SocialRelationListResponse,
    SocialUserRef,
    VisibilityResponse,
)
from shared.models.user import CurrentUser

_FOLLOW_MESSAGES = {
    FollowState.PENDING: "Follow request sent.",
    FollowState.ACCEPTED: "Successfully followed.",
}


# ── Follow state machine ──────────────────────────────────────────────────────

async def request_follow(
    session: AsyncSession,
    runtime: SocialRuntime,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> FollowActionResponse:
    async with runtime.locks.hold(pair_key(follower_id, following_id)):
        transition = await svc.request_follow(
            session, follower_id, following_id, cooldown=runtime.cooldown
        )
        await runtime.dispatch(session, transition.events)
    return FollowActionResponse(
        state=transition.state, message=_FOLLOW_MESSAGES[transition.state]
    )


async def approve_follow(
    session: AsyncSession,
    runtime: SocialRuntime,
    following_id: uuid.UUID,
    follower_id: uuid.UUID,
) -> FollowActionResponse:
    async with runtime.locks.hold(pair_key(follower_id, following_id)):
        transition = await svc.approve_follow(session, following_id, follower_id)
        await runtime.dispatch(session, transition.events)
    return FollowActionResponse(state=transition.state, message="Follow request accepted.")


async def decline_follow(
    session: AsyncSession,
    runtime: SocialRuntime,
    following_id: uuid.UUID,
    follower_id: uuid.UUID,
) -> FollowActionResponse:
    async with runtime.locks.hold(pair_key(follower_id, following_id)):
        transition = await svc.decline_follow(session, following_id, follower_id)
        await runtime.dispatch(session, transition.events)
    return FollowActionResponse(state=None, message="Follow request declined.")


async def cancel_follow(
    session: AsyncSession,
    runtime: SocialRuntime,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> FollowActionResponse:
    async with runtime.locks.hold(pair_key(follower_id, following_id)):
        transition = await svc.cancel_follow(session, follower_id, following_id)
        await runtime.dispatch(session, transition.events)
    return FollowActionResponse(state=None, message="Follow request cancelled.")


async def unfollow(
    session: AsyncSession,
    runtime: SocialRuntime,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> None:
    async with runtime.locks.hold(pair_key(follower_id, following_id)):
        await svc.unfollow(session, follower_id, following_id)
        await commit(session)


async def follow_status(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    target_id: uuid.UUID,
) -> FollowStatusResponse:
    outgoing, incoming = await svc.follow_status(session, viewer_id, target_id)
    return FollowStatusResponse(
        state=outgoing,
        is_following=outgoing == FollowState.ACCEPTED,
        has_pending_request=outgoing == FollowState.PENDING,
        is_followed_by=incoming == FollowState.ACCEPTED,
    )


async def pending_count(session: AsyncSession, user_id: uuid.UUID) -> PendingCountResponse:
    return PendingCountResponse(count=await store.count_pending(session, user_id))


async def list_pending_requests(
    session: AsyncSession,
    user_id: uuid.UUID,
    page: int,
    size: int,
) -> SocialRelationListResponse:
    rows, total = await svc.get_pending_requests(session, user_id, page=page, size=size)
    items = [
        SocialRelationItem(
            id=f.follow_id, user=SocialUserRef.model_validate(a), created_at=f.created_at
        )
        for f, a in rows
    ]
    return SocialRelationListResponse(items=items, total=total, page=page, size=size)


# ── Block ──────────────────────────────────────────────────────────────────────

async def block_user(
    session: AsyncSession,
    runtime: SocialRuntime,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
) -> BlockResponse:
    async with runtime.locks.hold(pair_key(blocker_id, blocked_id)):
        removed = await svc.block(session, blocker_id, blocked_id)
        await commit(session)
    return BlockResponse(message="User blocked.", follow_edges_removed=removed)


async def unblock_user(
    session: AsyncSession,
    runtime: SocialRuntime,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
) -> None:
    async with runtime.locks.hold(pair_key(blocker_id, blocked_id)):
        await svc.unblock(session, blocker_id, blocked_id)
        await commit(session)


async def list_blocked(
    session: AsyncSession,
    user_id: uuid.UUID,
    page: int,
    size: int,
) -> SocialRelationListResponse:
    rows, total = await svc.get_blocked(session, user_id, page=page, size=size)
    items = [
        SocialRelationItem(
            id=b.block_id, user=SocialUserRef.model_validate(a), created_at=b.created_at
        )
        for b, a in rows
    ]
    return SocialRelationListResponse(items=items, total=total, page=page, size=size)


# ── Following / Followers ─────────────────────────────────────────────────────

def _follow_list(rows, total: int, page: int, size: int) -> FollowListResponse:
    items = [
        FollowListItem(
            id=f.follow_id,
            user=SocialUserRef.model_validate(a),
            created_at=f.created_at,
            is_followed_by_me=is_followed,
        )
        for f, a, is_followed in rows
    ]
    return FollowListResponse(items=items, total=total, page=page, size=size)


async def list_following(
    session: AsyncSession,
    user_id: uuid.UUID,
    viewer: CurrentUser,
    page: int,
    size: int,
) -> FollowListResponse:
    """Raises UserHidden unless the viewer may see user_id's lists."""
    await visibility.require_visible(
        session, viewer.id, user_id, viewer_is_staff=viewer.is_staff
    )
    rows, total = await svc.get_following(
        session, user_id, viewer_id=viewer.id, page=page, size=size
    )
    return _follow_list(rows, total, page, size)


async def list_followers(
    session: AsyncSession,
    user_id: uuid.UUID,
    viewer: CurrentUser,
    page: int,
    size: int,
) -> FollowListResponse:
    await visibility.require_visible(
        session, viewer.id, user_id, viewer_is_staff=viewer.is_staff
    )
    rows, total = await svc.get_followers(
        session, user_id, viewer_id=viewer.id, page=page, size=size
    )
    return _follow_list(rows, total, page, size)


# ── Visibility ────────────────────────────────────────────────────────────────

async def get_visibility(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    subject_id: uuid.UUID,
    *,
    viewer_is_staff: bool = False,
) -> VisibilityResponse:
    verdict = await visibility.resolve(
        session, viewer_id, subject_id, viewer_is_staff=viewer_is_staff
    )
    return VisibilityResponse(
        viewer_id=viewer_id,
        subject_id=subject_id,
        verdict=verdict,
        summary_visible=visibility.summary_visible(verdict),
    )


# ── Reports ───────────────────────────────────────────────────────────────────

async def report_user(
    session: AsyncSession,
    reporter_id: uuid.UUID,
    body: ReportRequest,
) -> ReportResponse:
    report = await svc.create_report(
        session, reporter_id, body.target_type, body.target_id, body.reason
    )
    return ReportResponse(id=report.report_id, status=report.status, created_at=report.created_at)


def _admin_report_item(r: Report) -> AdminReportItem:
    return AdminReportItem(
        id=r.report_id,
        reporter_id=r.reporter_id,
        target_type=r.target_type,
        target_id=r.target_id,
        reason=r.reason,
        status=r.status,
        reviewed_by=r.reviewed_by,
        action_taken=r.action_taken,
        created_at=r.created_at,
    )


async def admin_list_reports(
    session: AsyncSession,
    status_filter: ReportStatus | None,
    page: int,
    size: int,
) -> AdminReportListResponse:
    reports, total = await svc.get_reports(
        session, status_filter=status_filter, page=page, size=size
    )
    return AdminReportListResponse(
        items=[_admin_report_item(r) for r in reports], total=total, page=page, size=size
    )


async def admin_review_report(
    session: AsyncSession,
    runtime: SocialRuntime,
    report_id: uuid.UUID,
    reviewer_id: uuid.UUID,
    body: AdminReportReviewRequest,
) -> AdminReportItem:
    report, events = await svc.review_report(
        session,
        report_id,
        reviewer_id,
        ReportStatus(body.status),
        body.action_taken,
    )
    await runtime.dispatch(session, events)
    return _admin_report_item(report)
