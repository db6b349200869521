from .document_repository import SQLAlchemyDocumentRepository
from .vector_index import PgVectorIndex

__all__ = [
    "SQLAlchemyDocumentRepository",
    "PgVectorIndex",
]
