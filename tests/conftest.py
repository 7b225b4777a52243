import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from post_publisher.domain.ports import (
    ChannelGateway,
    ChannelType,
    CredentialRepository,
    MediaKind,
    Notification,
    NotificationRepository,
    PostRepository,
    PostStatus,
    ProviderCredential,
    ScheduledPost,
)

NOW = datetime(2024, 5, 20, 8, 30, tzinfo=UTC)


class InMemoryPostRepository(PostRepository):
    def __init__(self, posts=None, fail_query: Exception | None = None):
        self.posts: dict[int, ScheduledPost] = {p.id: p for p in posts or []}
        self.fail_query = fail_query
        self.claimed: list[int] = []
        self.finalized: list[tuple] = []

    async def get_due_posts(self, now, limit):
        if self.fail_query:
            raise self.fail_query
        due = [
            p
            for p in self.posts.values()
            if p.status == PostStatus.SCHEDULED and p.scheduled_at is not None and p.scheduled_at <= now
        ]
        return sorted(due, key=lambda p: p.scheduled_at)[:limit]

    async def claim(self, post_id):
        post = self.posts[post_id]
        if post.status != PostStatus.SCHEDULED:
            return False
        post.status = PostStatus.PROCESSING
        self.claimed.append(post_id)
        return True

    async def finalize(self, post_id, status, published_at, error_message=None):
        post = self.posts[post_id]
        post.status = status
        post.published_at = published_at
        post.error_message = error_message
        self.finalized.append((post_id, status, error_message))


class InMemoryCredentialRepository(CredentialRepository):
    def __init__(self, credentials=None):
        self.credentials = {(c.team_id, c.provider): c for c in credentials or []}
        self.lookups: list[tuple[str, str]] = []

    async def get_for_team(self, team_id, provider):
        self.lookups.append((team_id, provider))
        return self.credentials.get((team_id, provider))


class InMemoryNotificationRepository(NotificationRepository):
    def __init__(self):
        self.notifications: list[Notification] = []

    async def add(self, notification):
        self.notifications.append(notification)


class FakeGateway(ChannelGateway):
    """Gateway returning a fixed id, or raising a configured error."""

    def __init__(self, channel: ChannelType, error: Exception | None = None, delay: float = 0):
        self._channel = channel
        self.error = error
        self.delay = delay
        self.calls: list[tuple[ProviderCredential, ScheduledPost]] = []

    @property
    def channel_type(self):
        return self._channel

    async def publish(self, credential, post):
        self.calls.append((credential, post))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return f"{self._channel.value}-{post.id}"


def make_post(post_id=1, providers=None, team_id="team-1", user_id="user-1", **kwargs) -> ScheduledPost:
    return ScheduledPost(
        id=post_id,
        user_id=user_id,
        team_id=team_id,
        providers=providers if providers is not None else ["linkedin"],
        content=kwargs.pop("content", "Hello"),
        scheduled_at=kwargs.pop("scheduled_at", NOW - timedelta(minutes=5)),
        **kwargs,
    )


def make_credential(provider, team_id="team-1", **kwargs) -> ProviderCredential:
    defaults = {
        "access_token": f"{provider}-token",
        "provider_page_id": "page-1" if provider != "linkedin" else None,
        "provider_user_id": "member-1" if provider == "linkedin" else None,
    }
    defaults.update(kwargs)
    return ProviderCredential(team_id=team_id, provider=provider, **defaults)


@pytest.fixture
def text_post() -> ScheduledPost:
    return make_post()


@pytest.fixture
def carousel_post() -> ScheduledPost:
    return make_post(
        providers=["instagram"],
        content="Three pictures",
        media_urls=[
            "https://cdn.example.com/a.jpg",
            "https://cdn.example.com/b.jpg",
            "https://cdn.example.com/c.jpg",
        ],
        media_kind=MediaKind.IMAGE,
    )
