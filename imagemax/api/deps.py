"""
Request-scoped wiring. Process-level handles (blob storage) live on app.state
and are created/closed by the lifespan in main.py.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from imagemax.core.config import settings
from imagemax.db.session import get_db
from imagemax.services.generations.store import GenerationStore
from imagemax.services.image_generation import GenerationOrchestrator, ImageProviderFactory
from imagemax.storage.base import BlobStorage


def get_storage(request: Request) -> BlobStorage:
    return request.app.state.storage


def get_store(db: Session = Depends(get_db)) -> GenerationStore:
    return GenerationStore(db)


def get_provider_factory(storage: BlobStorage = Depends(get_storage)) -> ImageProviderFactory:
    return ImageProviderFactory(settings, storage)


def get_orchestrator(
    store: GenerationStore = Depends(get_store),
    factory: ImageProviderFactory = Depends(get_provider_factory),
) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        store,
        factory.get_providers,
        batch_timeout=settings.generation_batch_timeout_seconds,
    )
