"""FastAPI dependency injection — hands out services from the process container."""

from fastapi import Request

from techdocs.application.services import ChatService, DocumentService, TutorialService
from techdocs.infrastructure.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    """The container opened by the application lifespan."""
    return request.app.state.container


def get_chat_service(request: Request) -> ChatService:
    return get_container(request).chat_service


def get_document_service(request: Request) -> DocumentService:
    return get_container(request).document_service


def get_tutorial_service(request: Request) -> TutorialService:
    return get_container(request).tutorial_service
