"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from techdocs.presentation.api.v1.endpoints.chat import router as chat_router
from techdocs.presentation.api.v1.endpoints.documents import router as documents_router
from techdocs.presentation.api.v1.endpoints.health import router as health_router
from techdocs.presentation.api.v1.endpoints.tutorials import router as tutorials_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(chat_router)
router.include_router(documents_router)
router.include_router(tutorials_router)
