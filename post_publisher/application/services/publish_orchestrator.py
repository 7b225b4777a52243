"""
Application service for publishing due scheduled posts.

One pass selects the due posts, claims them, publishes each post on every
target provider in turn and writes the aggregated outcome. It depends on
the ports only; adapters are injected by the presentation layer or the
scheduler.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from ...domain.errors import CredentialError
from ...domain.ports import (
    CredentialRepository,
    PostRepository,
    PostStatus,
    ProviderCredential,
    PublishOutcome,
    ScheduledPost,
)
from ...infrastructure.adapters.channel_gateway_registry import ChannelGatewayRegistry
from ...infrastructure.logging import Timer
from .notification_emitter import NotificationEmitter

logger = structlog.get_logger()

NO_TEAM_REASON = "la publicació no té cap equip associat"


@dataclass
class PassResult:
    """Summary of one orchestration pass."""

    processed: int = 0
    outcomes: dict[int, list[PublishOutcome]] = field(default_factory=dict)
    statuses: dict[int, PostStatus] = field(default_factory=dict)


def final_status(success_count: int, total: int) -> PostStatus:
    """All attempts succeeded -> published, none -> failed, else partial."""
    if total > 0 and success_count == total:
        return PostStatus.PUBLISHED
    if success_count == 0:
        return PostStatus.FAILED
    return PostStatus.PARTIAL_SUCCESS


class PublishOrchestrator:
    """
    Runs publishing passes over due scheduled posts.

    Posts are handled one at a time, and so are the providers of a post.
    A failure on one provider never stops the others, and a failure on
    one post never stops the batch. Only the due-post query is fatal.
    """

    def __init__(
        self,
        posts: PostRepository,
        credentials: CredentialRepository,
        notifier: NotificationEmitter,
        registry: ChannelGatewayRegistry,
        batch_size: int = 5,
        provider_timeout: float = 180.0,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._posts = posts
        self._credentials = credentials
        self._notifier = notifier
        self._registry = registry
        self._batch_size = batch_size
        self._provider_timeout = provider_timeout
        self._clock = clock

    async def run(self, now: datetime | None = None) -> PassResult:
        """
        Run one pass.

        Args:
            now: Reference time for the due check (defaults to the clock)

        Returns:
            PassResult with the number of due posts and per-post outcomes

        Raises:
            Exception: Whatever the due-post query raised; nothing has been
                touched at that point
        """
        now = now or self._clock()
        due = await self._posts.get_due_posts(now, self._batch_size)
        result = PassResult(processed=len(due))

        if not due:
            logger.info("No due posts")
            return result

        logger.info("Publishing pass started", due_posts=len(due))

        for post in due:
            log = logger.bind(post_id=post.id)
            try:
                status = await self._process(post, result)
            except Exception as e:
                log.error("Unexpected error while publishing post", error=str(e), exc_info=True)
                status = await self._fail_post(post, f"Unexpected error: {e}")
            if status is not None:
                result.statuses[post.id] = status

        logger.info(
            "Publishing pass completed",
            processed=result.processed,
            statuses={post_id: status.value for post_id, status in result.statuses.items()},
        )
        return result

    async def _process(self, post: ScheduledPost, result: PassResult) -> PostStatus | None:
        log = logger.bind(post_id=post.id)

        if not await self._posts.claim(post.id):
            log.info("Post already claimed by another run, skipping")
            return None

        if not post.team_id:
            log.warning("Post has no team, no provider attempted")
            await self._notifier.emit_system_failure(post, NO_TEAM_REASON)
            await self._posts.finalize(
                post.id,
                PostStatus.FAILED,
                self._clock(),
                error_message="Post has no team_id",
            )
            return PostStatus.FAILED

        log.info("Publishing post", providers=post.providers, media_items=len(post.media_urls))

        outcomes: list[PublishOutcome] = []
        success_count = 0
        for provider in post.providers:
            outcome = await self._attempt(post, provider)
            outcomes.append(outcome)
            await self._notifier.emit(
                post,
                provider,
                outcome.success,
                error=outcome.error,
                at=outcome.attempted_at,
            )
            if outcome.success:
                success_count += 1
        result.outcomes[post.id] = outcomes

        status = final_status(success_count, len(post.providers))
        errors = [f"{o.provider}: {o.error}" for o in outcomes if not o.success]
        if not post.providers:
            errors.append("Post has no target providers")

        await self._posts.finalize(
            post.id,
            status,
            self._clock(),
            error_message="; ".join(errors) or None,
        )
        log.info(
            "Post finalized",
            status=status.value,
            successful=success_count,
            total=len(post.providers),
        )
        return status

    async def _attempt(self, post: ScheduledPost, provider: str) -> PublishOutcome:
        """Publish a post on one provider; never raises."""
        log = logger.bind(post_id=post.id, provider=provider)
        try:
            credential = await self._load_credential(post.team_id, provider)
            gateway = self._registry.get(provider)
            with Timer() as timer:
                external_id = await asyncio.wait_for(
                    gateway.publish(credential, post),
                    timeout=self._provider_timeout,
                )
        except TimeoutError:
            error = f"Provider call timed out after {self._provider_timeout:g}s"
            log.error("Publish attempt timed out", timeout=self._provider_timeout)
            return PublishOutcome(provider=provider, success=False, error=error)
        except Exception as e:
            log.error("Publish attempt failed", error=str(e), error_type=type(e).__name__)
            return PublishOutcome(provider=provider, success=False, error=str(e) or type(e).__name__)

        log.info("Publish attempt succeeded", external_id=external_id, duration_ms=timer.duration_ms)
        return PublishOutcome(provider=provider, success=True, external_id=external_id)

    async def _load_credential(self, team_id: str, provider: str) -> ProviderCredential:
        name = ChannelGatewayRegistry.normalize(provider)
        try:
            credential = await self._credentials.get_for_team(team_id, name)
        except Exception as e:
            raise CredentialError(f"Could not load {name} credentials: {e}") from e
        if credential is None:
            raise CredentialError(f"No {name} credentials found for team {team_id}")
        return credential

    async def _fail_post(self, post: ScheduledPost, message: str) -> PostStatus | None:
        try:
            await self._posts.finalize(post.id, PostStatus.FAILED, self._clock(), error_message=message)
        except Exception as e:
            logger.error("Could not mark post as failed", post_id=post.id, error=str(e))
            return None
        return PostStatus.FAILED
