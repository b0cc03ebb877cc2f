"""
Generation API: fan-out a prompt, read/delete batches, batch history.
"""
import logging

from fastapi import APIRouter, Depends, Query

from imagemax.api.deps import get_orchestrator, get_store
from imagemax.api.routes.serializers import batch_out
from imagemax.core.errors import InvalidRequestError
from imagemax.schemas.generations import (
    BatchPage,
    BatchResponse,
    DeleteResponse,
    GenerateImagesRequest,
    GenerateImagesResponse,
    ImageResultOut,
)
from imagemax.services.auth import CurrentUser, get_current_user
from imagemax.services.generations.store import GenerationStore
from imagemax.services.image_generation import GenerationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generations"])


@router.post("/generate-images", response_model=GenerateImagesResponse)
def generate_images(
    body: GenerateImagesRequest,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> GenerateImagesResponse:
    """
    Dispatch the prompt to every active provider and wait for all of them.
    Per-provider failures come back as failed entries in `images`.
    """
    if not body.prompt or not body.chat_id or not body.user_id:
        raise InvalidRequestError("Missing required fields: prompt, chatId, userId")
    if body.user_id != current_user.id:
        raise InvalidRequestError("userId does not match the authenticated user")

    outcome = orchestrator.generate(body.prompt, body.chat_id, current_user.id)
    return GenerateImagesResponse(
        batch_id=outcome.batch_id,
        images=[
            ImageResultOut(
                id=image.id,
                provider=image.provider,
                image_url=image.image_url,
                status=image.status.value,
                error=image.error,
            )
            for image in outcome.images
        ],
    )


@router.get("/batches/{batch_id}", response_model=BatchResponse)
def get_batch(
    batch_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    store: GenerationStore = Depends(get_store),
) -> BatchResponse:
    batch = store.get_batch(batch_id, current_user.id)
    return BatchResponse(batch=batch_out(batch))


@router.delete("/batches/{batch_id}", response_model=DeleteResponse)
def delete_batch(
    batch_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    store: GenerationStore = Depends(get_store),
) -> DeleteResponse:
    store.delete_batch(batch_id, current_user.id)
    store.commit()
    return DeleteResponse()


@router.get("/generation-history", response_model=BatchPage)
def generation_history(
    limit: int = Query(20, ge=1, le=100),
    ending_before: str | None = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    store: GenerationStore = Depends(get_store),
) -> BatchPage:
    page = store.list_batches(current_user.id, limit=limit, ending_before=ending_before)
    return BatchPage(batches=[batch_out(b) for b in page.items], has_more=page.has_more)
