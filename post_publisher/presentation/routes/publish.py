import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...application.services import PublishOrchestrator
from ...infrastructure.logging import publishing_run
from ..dependencies import get_orchestrator, verify_service_role

router = APIRouter(tags=["publish"], dependencies=[Depends(verify_service_role)])
logger = structlog.get_logger()

NO_WORK_MESSAGE = "No hi ha publicacions per a enviar."


@router.post("/publish-scheduled-posts", summary="Publish due scheduled posts")
@router.post("/", include_in_schema=False)
async def publish_scheduled_posts(
    orchestrator: PublishOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """
    Run one publishing pass over every due scheduled post.

    Per-provider failures are reported through notifications and the post
    status; only a failure of the due-post query fails the call.
    """
    with publishing_run("http"):
        try:
            result = await orchestrator.run()
        except Exception as e:
            logger.error("Publishing pass aborted", error=str(e), exc_info=True)
            return JSONResponse(status_code=500, content={"error": str(e)})

    if result.processed == 0:
        return JSONResponse(content={"message": NO_WORK_MESSAGE})

    return JSONResponse(content={"status": "ok", "processed": result.processed})
