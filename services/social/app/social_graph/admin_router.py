"""
Social graph domain — staff-facing routes.

Routes:
  GET   /api/v1/admin/social/reports                   List all reports (filterable by status)
  PATCH /api/v1/admin/social/reports/{report_id}/review  Handle a report (reviewed/actioned/dismissed)

Requires: MODERATOR, ADMIN or SUPER_ADMIN role.  Reviewing notifies the reporter.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.runtime import SocialRuntime, get_runtime
from app.social_graph import controller as ctrl
from app.social_graph.constants import ReportStatus
from app.social_graph.schemas import (
    AdminReportItem,
    AdminReportListResponse,
    AdminReportReviewRequest,
)
from shared.auth.dependencies import require_roles
from shared.constants import STAFF_ROLES
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/social", tags=["admin-social-graph"])

require_staff = require_roles(*STAFF_ROLES)


@router.get(
    "/reports",
    response_model=AdminReportListResponse,
    summary="[Admin] List user/content reports",
    description="Optionally filter by status. Results are ordered oldest-first (FIFO review queue).",
)
async def list_reports(
    status: ReportStatus | None = Query(None, description="Filter by report status"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    staff: CurrentUser = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
) -> AdminReportListResponse:
    return await ctrl.admin_list_reports(session, status_filter=status, page=page, size=size)


@router.patch(
    "/reports/{report_id}/review",
    response_model=AdminReportItem,
    summary="[Admin] Review a report",
    description=(
        "Set the report status to 'reviewed', 'actioned', or 'dismissed'. "
        "Optionally record the action taken. The reporter is notified."
    ),
)
async def review_report(
    report_id: uuid.UUID,
    body: AdminReportReviewRequest,
    staff: CurrentUser = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> AdminReportItem:
    return await ctrl.admin_review_report(session, runtime, report_id, staff.id, body)
