"""Application DTOs."""

from .notification_dto import (
    BuildContext,
    ChangeEntry,
    NotificationResult,
    NotifierConfig,
)

__all__ = [
    "BuildContext",
    "ChangeEntry",
    "NotificationResult",
    "NotifierConfig",
]
