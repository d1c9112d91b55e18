from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.accounts.constants import AccountStatus
from app.verification.constants import VerificationRequestStatus


class VerificationSubmitRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    note: str | None = Field(None, max_length=1_000)


class VerificationSubmittedResponse(BaseModel):
    id: uuid.UUID
    status: VerificationRequestStatus
    created_at: datetime
    message: str = "Verification request submitted for review."


class VerificationStatusResponse(BaseModel):
    has_request: bool
    status: VerificationRequestStatus | None
    is_verified: bool


class BanStatusResponse(BaseModel):
    user_id: uuid.UUID
    status: AccountStatus
    is_banned: bool
