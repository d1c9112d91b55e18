from shared.events.schemas import (
    CommentCreated,
    DomainEvent,
    FollowAccepted,
    FollowCancelled,
    FollowDeclined,
    FollowRequested,
    LikeCreated,
    MentionDetected,
    NewFollower,
    ReportResolved,
)

__all__ = [
    "CommentCreated",
    "DomainEvent",
    "FollowAccepted",
    "FollowCancelled",
    "FollowDeclined",
    "FollowRequested",
    "LikeCreated",
    "MentionDetected",
    "NewFollower",
    "ReportResolved",
]
