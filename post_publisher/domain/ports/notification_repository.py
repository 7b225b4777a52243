"""
Outbound port for user notifications.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    POST_PUBLISHED = "post_published"
    POST_FAILED = "post_failed"
    SYSTEM_ERROR = "system_error"


@dataclass
class Notification:
    """A user-facing outcome record."""

    user_id: str
    team_id: str | None
    message: str
    type: NotificationType
    created_at: datetime


class NotificationRepository(ABC):
    """Write-only store of notifications."""

    @abstractmethod
    async def add(self, notification: Notification) -> None:
        """Persist a single notification."""
        ...
