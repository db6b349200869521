"""Document endpoints — submission, lookup, search and scrape requests."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from techdocs.application.schemas import (
    DocumentCreate,
    DocumentResponse,
    DocumentSearchResponse,
    ScrapeRequest,
    ScrapeResponse,
)
from techdocs.application.services import DocumentService
from techdocs.domain.entities import Document
from techdocs.domain.exceptions import EntityNotFoundError
from techdocs.infrastructure.dependencies import get_document_service

router = APIRouter(tags=["Documents"])


@router.post("/documents", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def add_document(
    data: DocumentCreate,
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """Store a document and index it for similarity search."""
    document = Document(
        id=data.id or "",
        title=data.title,
        content=data.content,
        category=data.category,
        tags=data.tags,
        author=data.author,
        metadata=data.metadata,
    )
    stored = await service.add_document(document)
    return DocumentResponse.model_validate(stored)


@router.get("/documents/search", response_model=DocumentSearchResponse)
async def search_documents(
    q: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=100),
    service: DocumentService = Depends(get_document_service),
) -> DocumentSearchResponse:
    """Text search over stored documents, newest first."""
    documents = await service.search_documents(q, limit)
    return DocumentSearchResponse(
        query=q,
        documents=[DocumentResponse.model_validate(d) for d in documents],
        count=len(documents),
    )


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    try:
        document = await service.get_document(document_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return DocumentResponse.model_validate(document)


@router.post("/scrape", response_model=ScrapeResponse, status_code=status.HTTP_202_ACCEPTED)
async def scrape_document(
    request: ScrapeRequest,
    service: DocumentService = Depends(get_document_service),
) -> ScrapeResponse:
    """Queue a URL for ingestion. The page is fetched by the worker process."""
    job = await service.scrape_document(request.url, request.category, request.tags)
    return ScrapeResponse(job_id=job.job_id, url=job.url)
