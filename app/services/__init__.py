"""Service-layer utilities."""

from .dashboard import ModerationDashboard, OperationResult
from .moderation_client import ModerationApiClient
from .notifications import NOTIFICATIONS, NotificationLog
from .storage import BlobStorage
from .store import DatabaseStore

__all__ = [
    "BlobStorage",
    "DatabaseStore",
    "ModerationApiClient",
    "ModerationDashboard",
    "NOTIFICATIONS",
    "NotificationLog",
    "OperationResult",
]
