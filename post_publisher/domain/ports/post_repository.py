"""
Outbound port for scheduled post persistence.

This port defines the interface for reading due posts and writing
their outcome. Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PostStatus(str, Enum):
    """Lifecycle of a scheduled post."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PROCESSING = "processing"
    PUBLISHED = "published"
    PARTIAL_SUCCESS = "partial_success"
    FAILED = "failed"


class MediaKind(str, Enum):
    """Media kind, applied uniformly to every media item of a post."""

    IMAGE = "image"
    VIDEO = "video"


@dataclass
class ScheduledPost:
    """Domain representation of a scheduled social post."""

    id: int
    user_id: str | None
    team_id: str | None
    providers: list[str]
    content: str | None = None
    media_urls: list[str] = field(default_factory=list)
    media_kind: MediaKind | None = None
    scheduled_at: datetime | None = None
    status: PostStatus = PostStatus.SCHEDULED
    published_at: datetime | None = None
    error_message: str | None = None

    @property
    def text(self) -> str:
        return self.content or ""

    @property
    def has_media(self) -> bool:
        return bool(self.media_urls)

    @property
    def is_carousel(self) -> bool:
        return len(self.media_urls) > 1


class PostRepository(ABC):
    """
    Outbound port for scheduled post persistence.

    The orchestrator only ever reads due posts, claims them and writes
    a final status. Composing and scheduling posts happens upstream.
    """

    @abstractmethod
    async def get_due_posts(self, now: datetime, limit: int) -> list[ScheduledPost]:
        """
        Retrieve posts with status 'scheduled' and scheduled_at <= now.

        Args:
            now: Reference time for the due check
            limit: Maximum number of posts to return

        Returns:
            Due posts ordered by scheduled_at, oldest first
        """
        ...

    @abstractmethod
    async def claim(self, post_id: int) -> bool:
        """
        Atomically move a post from 'scheduled' to 'processing'.

        Args:
            post_id: Post identifier

        Returns:
            True if this caller claimed the post, False if another run did
        """
        ...

    @abstractmethod
    async def finalize(
        self,
        post_id: int,
        status: PostStatus,
        published_at: datetime,
        error_message: str | None = None,
    ) -> None:
        """
        Write the outcome of a publishing pass for a post.

        Args:
            post_id: Post identifier
            status: Final status (published, partial_success, failed)
            published_at: Time the pass finished with the post
            error_message: Joined provider errors, if any
        """
        ...
