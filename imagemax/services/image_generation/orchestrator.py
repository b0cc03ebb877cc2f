"""
Fan-out orchestrator: one prompt, every provider, one tracked record each.

Providers run concurrently on a thread pool and the request thread waits for
all of them to settle. A provider's failure (returned or raised) is recorded
against its own generation and never affects its siblings. Only the request
thread touches the database session.
"""
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Callable

from imagemax.core.errors import InvalidRequestError
from imagemax.models.image_generation import GenerationStatus
from imagemax.services.generations.store import GenerationStore
from imagemax.services.image_generation.base import ImageProvider, ImageResult
from imagemax.services.image_generation.failure_types import (
    UNEXPECTED_ERROR_MESSAGE,
    FailureType,
    timeout_message,
)
from imagemax.utils.metrics import (
    batch_duration_seconds,
    generation_batches_total,
    image_generations_total,
    provider_request_duration_seconds,
)

logger = logging.getLogger(__name__)


@dataclass
class GeneratedImage:
    id: str
    provider: str
    image_url: str | None
    status: GenerationStatus
    error: str | None = None


@dataclass
class GenerationOutcome:
    batch_id: str
    images: list[GeneratedImage]


@dataclass
class _Dispatch:
    index: int
    generation_id: str
    provider_name: str


def _call_provider(provider: ImageProvider, provider_name: str, prompt: str) -> ImageResult:
    started = time.monotonic()
    try:
        return provider.generate_image(prompt)
    finally:
        provider_request_duration_seconds.labels(provider=provider_name).observe(time.monotonic() - started)


class GenerationOrchestrator:
    def __init__(
        self,
        store: GenerationStore,
        provider_source: Callable[[], list[ImageProvider]],
        batch_timeout: float | None = None,
    ) -> None:
        self.store = store
        self.provider_source = provider_source
        self.batch_timeout = batch_timeout

    def generate(self, prompt: str, chat_id: str, user_id: str) -> GenerationOutcome:
        """
        Run one batch: find-or-create the chat, create the batch and one pending
        generation per provider, dispatch all providers concurrently and record
        each terminal state.

        Raises:
            InvalidRequestError: prompt, chat_id or user_id missing (nothing persisted)
            NotFoundError: chat_id belongs to another user
        """
        if not prompt or not chat_id or not user_id:
            raise InvalidRequestError("Missing required fields: prompt, chatId, userId")

        providers = self.provider_source()
        provider_names = [provider.get_name() for provider in providers]

        chat = self.store.get_or_create_chat(chat_id, user_id, prompt)
        batch = self.store.create_batch(chat, user_id, prompt)
        generations = self.store.create_pending_generations(batch, user_id, provider_names)
        batch_id = batch.id
        dispatches = [
            _Dispatch(index=index, generation_id=generation.id, provider_name=name)
            for index, (generation, name) in enumerate(zip(generations, provider_names))
        ]
        # Pending records become visible before any provider is called
        self.store.commit()

        generation_batches_total.inc()
        logger.info(
            "generation_batch_created",
            extra={
                "batch_id": batch_id,
                "chat_id": chat_id,
                "user_id": user_id,
                "providers": provider_names,
            },
        )

        started = time.monotonic()
        images = self._dispatch_all(prompt, providers, dispatches)
        batch_duration_seconds.observe(time.monotonic() - started)

        logger.info(
            "generation_batch_settled",
            extra={
                "batch_id": batch_id,
                "latency_ms": int((time.monotonic() - started) * 1000),
                "status": {
                    "completed": sum(1 for i in images if i.status == GenerationStatus.COMPLETED),
                    "failed": sum(1 for i in images if i.status == GenerationStatus.FAILED),
                },
            },
        )
        return GenerationOutcome(batch_id=batch_id, images=images)

    def _dispatch_all(
        self,
        prompt: str,
        providers: list[ImageProvider],
        dispatches: list[_Dispatch],
    ) -> list[GeneratedImage]:
        if not providers:
            return []

        settled: list[GeneratedImage | None] = [None] * len(providers)
        executor = ThreadPoolExecutor(max_workers=len(providers), thread_name_prefix="imagegen")
        futures: dict[Future, _Dispatch] = {
            executor.submit(_call_provider, provider, dispatch.provider_name, prompt): dispatch
            for provider, dispatch in zip(providers, dispatches)
        }
        timed_out = False
        try:
            for future in as_completed(futures, timeout=self.batch_timeout):
                dispatch = futures[future]
                settled[dispatch.index] = self._settle(dispatch, future)
        except FuturesTimeoutError:
            timed_out = True
            for dispatch in dispatches:
                if settled[dispatch.index] is None:
                    settled[dispatch.index] = self._record(
                        dispatch,
                        ImageResult.failed(timeout_message(self.batch_timeout)),
                        FailureType.TIMEOUT,
                    )
        finally:
            # Stragglers past the deadline keep running detached; their results are discarded
            executor.shutdown(wait=not timed_out, cancel_futures=True)

        return [image for image in settled if image is not None]

    def _settle(self, dispatch: _Dispatch, future: Future) -> GeneratedImage:
        exc = future.exception()
        if exc is not None:
            logger.error(
                "provider_unexpected_fault",
                exc_info=exc,
                extra={"generation_id": dispatch.generation_id, "provider": dispatch.provider_name},
            )
            return self._record(dispatch, ImageResult.failed(UNEXPECTED_ERROR_MESSAGE), FailureType.UNEXPECTED_FAULT)

        result = future.result()
        if not isinstance(result, ImageResult):
            logger.error(
                "provider_invalid_result",
                extra={"generation_id": dispatch.generation_id, "provider": dispatch.provider_name},
            )
            return self._record(dispatch, ImageResult.failed(UNEXPECTED_ERROR_MESSAGE), FailureType.UNEXPECTED_FAULT)
        if result.success and not result.image_url:
            result = ImageResult.failed("Provider returned no image URL")
        return self._record(dispatch, result, None if result.success else FailureType.PROVIDER_FAILURE)

    def _record(
        self,
        dispatch: _Dispatch,
        result: ImageResult,
        failure_type: FailureType | None,
    ) -> GeneratedImage:
        if result.success:
            self.store.complete_generation(dispatch.generation_id, result.image_url)
            status = GenerationStatus.COMPLETED
            error = None
        else:
            error = result.error or "Image generation failed"
            self.store.fail_generation(dispatch.generation_id, error)
            status = GenerationStatus.FAILED
        self.store.commit()

        image_generations_total.labels(provider=dispatch.provider_name, status=status.value).inc()
        logger.info(
            "image_generation_settled",
            extra={
                "generation_id": dispatch.generation_id,
                "provider": dispatch.provider_name,
                "status": status.value,
                "error": error,
                "failure_type": failure_type.value if failure_type else None,
            },
        )
        return GeneratedImage(
            id=dispatch.generation_id,
            provider=dispatch.provider_name,
            image_url=result.image_url if result.success else None,
            status=status,
            error=error,
        )
