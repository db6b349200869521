from .document_models import EMBEDDING_DIMENSIONS, DocumentModel, VectorRecordModel

__all__ = [
    "EMBEDDING_DIMENSIONS",
    "DocumentModel",
    "VectorRecordModel",
]
