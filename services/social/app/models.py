"""Registers every ORM model with ``Base.metadata``."""
from app.accounts.models import Account
from app.notifications.models import Notification
from app.social_graph.models import Block, Follow, Report
from app.verification.models import VerificationRequest

__all__ = ["Account", "Block", "Follow", "Notification", "Report", "VerificationRequest"]
