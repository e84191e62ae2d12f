import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from papyros.app.api.v1.router import router as v1_router
from papyros.app.core.config import settings
from papyros.app.core.errors import PapyrosError
from papyros.app.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def papyros_error_handler(request: Request, exc: PapyrosError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Infrastructure failures: the unit of work already rolled back
    error_id = uuid.uuid4().hex[:12]
    logger.exception(
        "Unhandled exception [%s] %s %s: %s",
        error_id,
        request.method,
        request.url.path,
        type(exc).__name__,
    )
    content = {"error": "internal_error", "detail": "An unexpected error occurred", "error_id": error_id}
    if settings.DEBUG:
        content["detail"] = str(exc)
        content["type"] = type(exc).__name__
    return JSONResponse(status_code=500, content=content)


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title=settings.APP_NAME, version="0.1.0")
    app.add_exception_handler(PapyrosError, papyros_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(v1_router, prefix="/v1")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "papyros.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
