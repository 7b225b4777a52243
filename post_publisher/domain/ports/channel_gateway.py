"""
Outbound port for provider publishing.

This is the interface the orchestrator uses to publish a post on a
social network. Each network has one gateway implementing it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from .credential_repository import ProviderCredential
from .post_repository import ScheduledPost


class ChannelType(str, Enum):
    """Supported social networks."""

    LINKEDIN = "linkedin"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"


@dataclass
class PublishOutcome:
    """Result of one (post, provider) attempt."""

    provider: str
    success: bool
    external_id: str | None = None
    error: str | None = None
    attempted_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ChannelGateway(ABC):
    """
    Outbound port for publishing a post on one provider.

    Implementations raise a PublishError subclass when the post cannot be
    published; they never report failure through the return value.
    """

    @property
    @abstractmethod
    def channel_type(self) -> ChannelType:
        """Return the provider this gateway handles."""
        ...

    @abstractmethod
    async def publish(self, credential: ProviderCredential, post: ScheduledPost) -> str | None:
        """
        Publish a post on the provider.

        Args:
            credential: Team credential for this provider
            post: Post to publish, read as-is from the store

        Returns:
            The provider's id for the created post, when it reports one
        """
        ...
