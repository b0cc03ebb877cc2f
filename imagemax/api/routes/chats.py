from fastapi import APIRouter, Depends, Query

from imagemax.api.deps import get_store
from imagemax.api.routes.serializers import chat_detail_out, chat_out
from imagemax.schemas.generations import ChatPage, ChatResponse, DeleteResponse
from imagemax.services.auth import CurrentUser, get_current_user
from imagemax.services.generations.store import GenerationStore

router = APIRouter(tags=["chats"])


@router.get("/chats/{chat_id}", response_model=ChatResponse)
def get_chat(
    chat_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    store: GenerationStore = Depends(get_store),
) -> ChatResponse:
    """Chat with its batches (oldest first) and each batch's images."""
    chat = store.get_chat(chat_id, current_user.id)
    return ChatResponse(chat=chat_detail_out(chat))


@router.delete("/chats/{chat_id}", response_model=DeleteResponse)
def delete_chat(
    chat_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    store: GenerationStore = Depends(get_store),
) -> DeleteResponse:
    store.delete_chat(chat_id, current_user.id)
    store.commit()
    return DeleteResponse()


@router.get("/history", response_model=ChatPage)
def chat_history(
    limit: int = Query(20, ge=1, le=100),
    ending_before: str | None = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    store: GenerationStore = Depends(get_store),
) -> ChatPage:
    page = store.list_chats(current_user.id, limit=limit, ending_before=ending_before)
    return ChatPage(chats=[chat_out(c) for c in page.items], has_more=page.has_more)
