from datetime import UTC, datetime

from sqlalchemy import BigInteger, Boolean, DateTime, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ...domain.ports import MediaKind, PostStatus, ProviderCredential, ScheduledPost


def _aware_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC timezone to naive datetimes read from the database."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    pass


class SocialPostModel(Base):
    """Scheduled social post, written by the composer and finalized here."""

    __tablename__ = "social_posts"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[str | None] = mapped_column(String(255), index=True)
    team_id: Mapped[str | None] = mapped_column(String(255), index=True)
    provider: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, default=list)
    content: Mapped[str | None] = mapped_column(Text)
    media_url: Mapped[list[str] | None] = mapped_column(ARRAY(Text))
    media_type: Mapped[str | None] = mapped_column(String(20))
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=PostStatus.DRAFT.value)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    error_message: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def to_entity(self) -> ScheduledPost:
        """Convert ORM model to domain entity."""
        media_kind = None
        if self.media_type:
            try:
                media_kind = MediaKind(self.media_type.lower())
            except ValueError:
                media_kind = None

        return ScheduledPost(
            id=self.id,
            user_id=self.user_id,
            team_id=self.team_id,
            providers=list(self.provider or []),
            content=self.content,
            media_urls=[url for url in (self.media_url or []) if url],
            media_kind=media_kind,
            scheduled_at=_aware_utc(self.scheduled_at),
            status=PostStatus(self.status),
            published_at=_aware_utc(self.published_at),
            error_message=self.error_message,
        )


class TeamCredentialModel(Base):
    """Provider access token owned by a team."""

    __tablename__ = "team_credentials"
    __table_args__ = (UniqueConstraint("team_id", "provider", name="uq_team_credentials_team_provider"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    team_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    access_token: Mapped[str | None] = mapped_column(Text)
    provider_page_id: Mapped[str | None] = mapped_column(String(255))
    provider_page_name: Mapped[str | None] = mapped_column(String(255))
    provider_user_id: Mapped[str | None] = mapped_column(String(255))
    refresh_token: Mapped[str | None] = mapped_column(Text)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    connected_by_user_id: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def to_entity(self) -> ProviderCredential:
        return ProviderCredential(
            team_id=self.team_id,
            provider=self.provider,
            access_token=self.access_token or "",
            provider_page_id=self.provider_page_id,
            provider_user_id=self.provider_user_id,
        )


class NotificationModel(Base):
    """In-app notification shown to a user."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    team_id: Mapped[str | None] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
