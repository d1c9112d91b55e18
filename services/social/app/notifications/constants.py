import enum


class NotificationType(str, enum.Enum):
    FOLLOW_REQUEST = "follow_request"
    FOLLOW_ACCEPT = "follow_accept"
    NEW_FOLLOWER = "new_follower"
    COMMENT = "comment"
    LIKE = "like"
    MENTION = "mention"
    REPORT_RESOLVED = "report_resolved"


# Types a recipient may switch off through Account.notification_preferences.
# Relationship and moderation notifications are always delivered.
OPTIONAL_TYPES: frozenset[NotificationType] = frozenset(
    {NotificationType.LIKE, NotificationType.COMMENT, NotificationType.MENTION}
)

# Stream event types that are pushed without a persisted record.
STREAM_CONNECTED = "connected"
STREAM_KEEPALIVE = "keepalive"
STREAM_NOTIFICATION = "notification"
STREAM_FOLLOW_DECLINED = "follow_declined"
STREAM_FOLLOW_CANCELLED = "follow_cancelled"
