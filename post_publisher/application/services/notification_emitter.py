"""
Notification emitter for publishing outcomes.

Writes one human-readable notification per (post, provider) attempt for
the user who scheduled the post. Notification problems are logged and
never change the publishing outcome.
"""

from datetime import UTC, datetime

import pytz
import structlog

from ...domain.ports import Notification, NotificationRepository, NotificationType, ScheduledPost

logger = structlog.get_logger()

PROVIDER_DISPLAY_NAMES = {
    "linkedin": "LinkedIn",
    "facebook": "Facebook",
    "instagram": "Instagram",
}

SUCCESS_TEMPLATE = "✅ Publicació a {provider} enviada amb èxit ({date} a les {time})."
FAILURE_TEMPLATE = "❌ Error en publicar a {provider} ({date} a les {time}): {error}"
SYSTEM_TEMPLATE = "❌ No s'ha pogut publicar la publicació #{post_id}: {reason}"
UNKNOWN_ERROR = "error desconegut"


def provider_display_name(provider: str) -> str:
    """Human name for a provider ("linkedin_oidc" -> "LinkedIn")."""
    name = provider.strip().lower().replace("_oidc", "")
    return PROVIDER_DISPLAY_NAMES.get(name, name[:1].upper() + name[1:])


def excerpt(text: str, limit: int) -> str:
    """Bound a provider error to `limit` characters."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


class NotificationEmitter:
    """Composes and stores outcome notifications."""

    def __init__(
        self,
        repository: NotificationRepository,
        timezone: str = "Europe/Madrid",
        excerpt_length: int = 100,
    ) -> None:
        self._repository = repository
        self._tz = pytz.timezone(timezone)
        self._excerpt_length = excerpt_length

    def compose(
        self,
        provider: str,
        success: bool,
        error: str | None = None,
        at: datetime | None = None,
    ) -> str:
        """Build the message text for one attempt."""
        local = (at or datetime.now(UTC)).astimezone(self._tz)
        date = f"{local.day}/{local.month}/{local.year}"
        time = local.strftime("%H:%M")
        name = provider_display_name(provider)

        if success:
            return SUCCESS_TEMPLATE.format(provider=name, date=date, time=time)
        return FAILURE_TEMPLATE.format(
            provider=name,
            date=date,
            time=time,
            error=excerpt(error or UNKNOWN_ERROR, self._excerpt_length),
        )

    async def emit(
        self,
        post: ScheduledPost,
        provider: str,
        success: bool,
        error: str | None = None,
        at: datetime | None = None,
    ) -> Notification | None:
        """
        Record the outcome of one (post, provider) attempt.

        Returns:
            The stored notification, or None if it was skipped or failed
        """
        if not post.user_id:
            logger.warning(
                "Notification skipped, post has no user",
                post_id=post.id,
                provider=provider,
            )
            return None

        notification = Notification(
            user_id=post.user_id,
            team_id=post.team_id,
            message=self.compose(provider, success, error, at),
            type=NotificationType.POST_PUBLISHED if success else NotificationType.POST_FAILED,
            created_at=at or datetime.now(UTC),
        )
        return await self._write(notification, post_id=post.id, provider=provider)

    async def emit_system_failure(self, post: ScheduledPost, reason: str) -> Notification | None:
        """Record that a post could not be attempted on any provider."""
        if not post.user_id:
            logger.warning("System notification skipped, post has no user", post_id=post.id)
            return None

        notification = Notification(
            user_id=post.user_id,
            team_id=post.team_id,
            message=SYSTEM_TEMPLATE.format(post_id=post.id, reason=reason),
            type=NotificationType.SYSTEM_ERROR,
            created_at=datetime.now(UTC),
        )
        return await self._write(notification, post_id=post.id)

    async def _write(self, notification: Notification, **context) -> Notification | None:
        try:
            await self._repository.add(notification)
        except Exception as e:
            logger.error(
                "Failed to store notification",
                type=notification.type.value,
                error=str(e),
                **context,
            )
            return None

        logger.info("Notification stored", type=notification.type.value, **context)
        return notification
