"""
Social service — domain-specific HTTP exceptions.

All exceptions use preset status codes and detail messages so that callers
never need to specify these at the call site.  Each one belongs to exactly one
failure kind (``kind``) which the error envelope exposes as ``error.code``:

  validation       malformed or self-referential input             422
  not_found        referenced edge / notification / report absent  404
  conflict         duplicate edge, lost race on a unique pair      409
  blocked          action attempted across a block boundary        403
  permission       visibility denial; never says why               404
  transient_store  persistence unavailable; safe for client retry  503
  rate_limited     per-pair follow cooldown                        429
"""
from typing import ClassVar

from fastapi import HTTPException, status


class SocialError(HTTPException):
    kind: ClassVar[str] = "error"
    status_code_default: ClassVar[int] = status.HTTP_400_BAD_REQUEST
    detail_default: ClassVar[str] = "Request failed."

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            status_code=self.status_code_default,
            detail=detail or self.detail_default,
        )


# ── Taxonomy ──────────────────────────────────────────────────────────────────

class ValidationError(SocialError):
    kind = "validation"
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY
    detail_default = "Invalid request."


class NotFoundError(SocialError):
    kind = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND
    detail_default = "Resource not found."


class ConflictError(SocialError):
    kind = "conflict"
    status_code_default = status.HTTP_409_CONFLICT
    detail_default = "Resource already exists."


class BlockedError(SocialError):
    kind = "blocked"
    status_code_default = status.HTTP_403_FORBIDDEN
    detail_default = "This action is not available for this user."


class VisibilityDenied(SocialError):
    """Privacy, block and ban denials all look like a missing user."""

    kind = "permission"
    status_code_default = status.HTTP_404_NOT_FOUND
    detail_default = "User not found."


class TransientStoreError(SocialError):
    kind = "transient_store"
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE
    detail_default = "The service is temporarily unavailable. Please try again."


class RateLimitError(SocialError):
    kind = "rate_limited"
    status_code_default = status.HTTP_429_TOO_MANY_REQUESTS
    detail_default = "Rate limit exceeded. Please slow down."


# ── Social graph ──────────────────────────────────────────────────────────────

class CannotFollowSelf(ValidationError):
    detail_default = "You cannot follow yourself."


class CannotBlockSelf(ValidationError):
    detail_default = "You cannot block yourself."


class AlreadyFollowing(ConflictError):
    detail_default = "You have already requested to follow or are following this user."


class AlreadyBlocked(ConflictError):
    detail_default = "You have already blocked this user."


class FollowRequestNotFound(NotFoundError):
    detail_default = "No pending follow request found."


class NotFollowing(NotFoundError):
    detail_default = "You are not following this user."


class NotBlocked(NotFoundError):
    detail_default = "You have not blocked this user."


class ActionBlocked(BlockedError):
    pass


class FollowCooldownActive(RateLimitError):
    detail_default = "Please wait a few seconds before following again."


# ── Accounts / visibility ─────────────────────────────────────────────────────

class UserNotFound(NotFoundError):
    detail_default = "User not found."


class UserHidden(VisibilityDenied):
    pass


# ── Notifications ─────────────────────────────────────────────────────────────

class NotificationNotFound(NotFoundError):
    detail_default = "Notification not found."


# ── Moderation / verification ─────────────────────────────────────────────────

class ReportNotFound(NotFoundError):
    detail_default = "Report not found."


class VerificationRequestNotFound(NotFoundError):
    detail_default = "Verification request not found."


class VerificationAlreadyPending(ConflictError):
    detail_default = "You already have a verification request awaiting review."


class VerificationNotPending(ConflictError):
    detail_default = "This verification request has already been reviewed."


class AlreadyVerified(ConflictError):
    detail_default = "Your account is already verified."


class AlreadyBanned(ConflictError):
    detail_default = "This account is already banned."


class NotBanned(ConflictError):
    detail_default = "This account is not banned."
