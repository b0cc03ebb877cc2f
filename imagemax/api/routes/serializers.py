from imagemax.models.chat import Chat
from imagemax.models.generation_batch import GenerationBatch
from imagemax.models.image_generation import ImageGeneration
from imagemax.schemas.generations import BatchOut, ChatDetailOut, ChatOut, ImageResultOut


def generation_out(generation: ImageGeneration) -> ImageResultOut:
    return ImageResultOut(
        id=generation.id,
        provider=generation.model,
        image_url=generation.image_url,
        status=generation.status,
        error=generation.error_msg,
    )


def batch_out(batch: GenerationBatch) -> BatchOut:
    return BatchOut(
        id=batch.id,
        chat_id=batch.chat_id,
        prompt=batch.prompt,
        created_at=batch.created_at,
        images=[generation_out(g) for g in batch.generations],
    )


def chat_out(chat: Chat) -> ChatOut:
    return ChatOut(
        id=chat.id,
        title=chat.title,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
    )


def chat_detail_out(chat: Chat) -> ChatDetailOut:
    return ChatDetailOut(
        id=chat.id,
        title=chat.title,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
        batches=[batch_out(b) for b in chat.batches],
    )
