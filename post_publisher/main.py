from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from .config import settings
from .infrastructure.logging import configure_logging
from .presentation.dependencies import UnauthorizedError, get_database
from .presentation.middleware import CorrelationIdMiddleware
from .presentation.routes import health, publish

configure_logging(settings.service_name, settings.log_level)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting application", service=settings.service_name)

    db = get_database()
    if settings.db_create_tables:
        try:
            await db.create_tables()
            logger.info("Database tables created")
        except Exception as e:
            logger.error(
                "Failed to create database tables",
                error=str(e),
                error_type=type(e).__name__,
                db_host=settings.db_host,
                db_name=settings.db_name,
                exc_info=True,
            )
            raise

    yield

    await db.close()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Scheduled Post Publisher",
    description="Publishes due scheduled posts to LinkedIn, Facebook and Instagram",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> PlainTextResponse:
    return PlainTextResponse("Unauthorized", status_code=401)


app.include_router(health.router)
app.include_router(publish.router)
