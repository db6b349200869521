"""Tutorial generation endpoints."""

from fastapi import APIRouter, Depends

from techdocs.application.schemas import TutorialRequest, TutorialResponse
from techdocs.application.services import TutorialResult, TutorialService
from techdocs.infrastructure.dependencies import get_tutorial_service

router = APIRouter(prefix="/tutorials", tags=["Tutorials"])


def _to_response(result: TutorialResult) -> TutorialResponse:
    return TutorialResponse(
        topic=result.topic,
        tutorial=result.content,
        queued=result.queued,
        job_id=result.job_id,
        source_document_ids=result.source_document_ids,
    )


@router.post("/generate", response_model=TutorialResponse)
async def generate_tutorial(
    request: TutorialRequest,
    service: TutorialService = Depends(get_tutorial_service),
) -> TutorialResponse:
    """Write a complete tutorial from stored documents, queueing a scrape when none match."""
    result = await service.generate_tutorial(request.url, request.topic)
    return _to_response(result)


@router.post("/scrape-and-generate", response_model=TutorialResponse)
async def scrape_and_generate_tutorial(
    request: TutorialRequest,
    service: TutorialService = Depends(get_tutorial_service),
) -> TutorialResponse:
    """Quick variant: fewer source documents and a shorter tutorial."""
    result = await service.generate_tutorial(request.url, request.topic, quick=True)
    return _to_response(result)
