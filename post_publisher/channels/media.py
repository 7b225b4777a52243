"""
Media upload and readiness helpers shared by provider gateways.

Providers need media turned into their own handles (asset URNs, photo
ids, media containers) before the post body is submitted. Some of them
also process media asynchronously and have to be polled until ready.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum

import httpx
import structlog

from ..domain.errors import MediaProcessingError
from ..domain.ports import MediaKind

logger = structlog.get_logger()

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
DEFAULT_POLL_MAX_ATTEMPTS = 20


class ContainerState(str, Enum):
    """Processing state of a provider-side media container."""

    PENDING = "pending"
    FINISHED = "finished"
    ERROR = "error"
    TIMED_OUT = "timed_out"


async def poll_until_ready(
    check: Callable[[], Awaitable[ContainerState]],
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ContainerState:
    """
    Poll a container until it is finished, errored, or attempts run out.

    Each attempt waits `interval` seconds before checking, since a freshly
    created container is never ready on the first look.

    Args:
        check: Coroutine returning the current state (PENDING, FINISHED or ERROR)
        interval: Seconds to wait before each check
        max_attempts: Number of checks before giving up
        sleep: Awaitable sleep, injectable for tests

    Returns:
        FINISHED, ERROR, or TIMED_OUT
    """
    for attempt in range(1, max_attempts + 1):
        await sleep(interval)
        state = await check()
        logger.debug("Media container checked", attempt=attempt, state=state.value)
        if state in (ContainerState.FINISHED, ContainerState.ERROR):
            return state
    return ContainerState.TIMED_OUT


async def fetch_source_media(client: httpx.AsyncClient, url: str) -> tuple[bytes, str]:
    """
    Download media bytes from storage.

    Returns:
        Tuple of (body, content type)

    Raises:
        MediaProcessingError: if the media cannot be downloaded
    """
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise MediaProcessingError(f"Could not download source media {url}: {e}") from e

    if not response.is_success:
        raise MediaProcessingError(
            f"Could not download source media {url} (HTTP {response.status_code})"
        )

    content_type = response.headers.get("content-type", "application/octet-stream")
    return response.content, content_type


class MediaUploader(ABC):
    """Turns media URLs into provider-native handles."""

    @abstractmethod
    async def upload(self, client: httpx.AsyncClient, url: str, kind: MediaKind) -> str:
        """Upload a single media item and return its provider handle."""
        ...

    async def upload_all(
        self,
        client: httpx.AsyncClient,
        urls: list[str],
        kind: MediaKind,
    ) -> list[str]:
        """
        Upload every media item, keeping input order.

        The first failing item aborts the whole set; a post is never
        published with only part of its media.
        """
        handles: list[str] = []
        for index, url in enumerate(urls):
            handle = await self.upload(client, url, kind)
            logger.debug("Media item uploaded", index=index, handle=handle)
            handles.append(handle)
        return handles
