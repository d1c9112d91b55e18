import enum


class VerificationRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Capability names in the status cache key (account_id, capability).
CACHE_VERIFICATION = "verification"
CACHE_BAN = "ban"
