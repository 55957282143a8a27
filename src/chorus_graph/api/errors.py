"""Render engine errors as JSON responses."""

from logging import getLogger

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from chorus_graph.core.errors import EngineError, ErrorCode, InternalError

logger = getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach handlers mapping ``EngineError`` codes to HTTP statuses."""

    @app.exception_handler(EngineError)
    async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.code.value)
        else:
            logger.info(
                "%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code.value
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"code": ErrorCode.INTERNAL.value, "detail": InternalError.detail},
        )
