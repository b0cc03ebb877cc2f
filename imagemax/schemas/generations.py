from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class GenerateImagesRequest(CamelModel):
    # Optional at the schema level so missing fields surface as 400, not 422
    prompt: str | None = None
    chat_id: str | None = None
    user_id: str | None = None


class ImageResultOut(CamelModel):
    id: str
    provider: str
    image_url: str | None = None
    status: str
    error: str | None = None


class GenerateImagesResponse(CamelModel):
    success: bool = True
    batch_id: str
    images: list[ImageResultOut]


class BatchOut(CamelModel):
    id: str
    chat_id: str
    prompt: str
    created_at: datetime
    images: list[ImageResultOut]


class BatchResponse(CamelModel):
    success: bool = True
    batch: BatchOut


class BatchPage(CamelModel):
    batches: list[BatchOut]
    has_more: bool


class ChatOut(CamelModel):
    id: str
    title: str
    created_at: datetime
    updated_at: datetime


class ChatDetailOut(ChatOut):
    batches: list[BatchOut]


class ChatResponse(CamelModel):
    chat: ChatDetailOut


class ChatPage(CamelModel):
    chats: list[ChatOut]
    has_more: bool


class DeleteResponse(CamelModel):
    success: bool = True
