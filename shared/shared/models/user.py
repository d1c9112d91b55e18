from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from shared.constants import STAFF_ROLES, Role


class CurrentUser(BaseModel):
    """User context from JWT; used by all services."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID
    email: str
    roles: list[Role] = Field(default_factory=list)

    @property
    def is_staff(self) -> bool:
        """Moderators and admins bypass the banned-account visibility rule."""
        return any(r in STAFF_ROLES for r in self.roles)
