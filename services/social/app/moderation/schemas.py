from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.accounts.constants import AccountStatus
from app.social_graph.schemas import SocialUserRef
from app.verification.constants import VerificationRequestStatus


class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class BanRequest(_Base):
    reason: str | None = Field(None, max_length=500)


class AccountStatusResponse(BaseModel):
    user_id: uuid.UUID
    status: AccountStatus
    verified: bool
    message: str


class VerificationQueueItem(BaseModel):
    id: uuid.UUID
    user: SocialUserRef
    note: str | None
    created_at: datetime


class VerificationQueueResponse(BaseModel):
    items: list[VerificationQueueItem]
    total: int
    page: int
    size: int


class VerificationReviewRequest(_Base):
    action: Literal["approve", "reject"]
    notes: str | None = Field(None, max_length=1_000)


class VerificationReviewResponse(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    status: VerificationRequestStatus
    reviewed_at: datetime | None
    message: str
