from .base import Base
from .session import build_engine, build_session_factory, create_schema, get_async_url
from .models import DocumentModel, VectorRecordModel

__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "create_schema",
    "get_async_url",
    "DocumentModel",
    "VectorRecordModel",
]
