"""Map core exceptions to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from techdocs.domain.exceptions import (
    CacheError,
    ChatProviderError,
    DocumentStoreError,
    EmbeddingProviderError,
    JobQueueError,
    VectorIndexError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = "Internal server error"


async def _provider_error(request: Request, exc: ChatProviderError | EmbeddingProviderError) -> JSONResponse:
    logger.error("%s %s failed at model provider: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": f"[{exc.provider}] {exc.message}"},
    )


async def _core_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_DETAIL},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChatProviderError, _provider_error)
    app.add_exception_handler(EmbeddingProviderError, _provider_error)
    for exc_type in (CacheError, VectorIndexError, DocumentStoreError, JobQueueError):
        app.add_exception_handler(exc_type, _core_error)
