from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..logging import correlation_id
from .models import Base


class Database:
    """
    Engine and session factory for the posts store.

    One session serves a whole publishing pass; connections are tagged
    with the service name so passes show up in pg_stat_activity.
    """

    def __init__(self, url: str, application_name: str = "post-publisher", pool_size: int = 5) -> None:
        self._engine = create_async_engine(
            url,
            echo=False,
            pool_pre_ping=True,
            pool_size=pool_size,
            connect_args={"server_settings": {"application_name": application_name}},
        )
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        event.listen(self._engine.sync_engine, "before_cursor_execute", _tag_statement, retval=True)

    async def create_tables(self) -> None:
        """Create the tables locally; in production the schema is migrated upstream."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        return self._session_factory()

    async def close(self) -> None:
        await self._engine.dispose()


def _tag_statement(conn, cursor, statement, parameters, context, executemany):
    """Prefix SQL with /* correlation_id=<id> */ of the current request or run."""
    cid = correlation_id.get("")
    if cid:
        statement = f"/* correlation_id={cid} */ {statement}"
    return statement, parameters
