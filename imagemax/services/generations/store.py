import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from imagemax.core.errors import InternalError, NotFoundError
from imagemax.models.chat import Chat
from imagemax.models.generation_batch import GenerationBatch
from imagemax.models.image_generation import GenerationStatus, ImageGeneration

logger = logging.getLogger(__name__)

CHAT_TITLE_MAX_LENGTH = 50


def make_chat_title(prompt: str, max_length: int = CHAT_TITLE_MAX_LENGTH) -> str:
    if len(prompt) > max_length:
        return prompt[:max_length] + "..."
    return prompt


@dataclass
class Page:
    items: list[Any] = field(default_factory=list)
    has_more: bool = False


class GenerationStore:
    """Chats, batches and generation records for one unit of work."""

    def __init__(self, db: DBSession):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    # ---------- chats ----------

    def _lookup_chat(self, chat_id: str) -> Chat | None:
        return self.db.get(Chat, chat_id)

    def find_chat(self, chat_id: str, user_id: str) -> Chat | None:
        chat = self._lookup_chat(chat_id)
        if chat is None or chat.user_id != user_id:
            return None
        return chat

    def get_chat(self, chat_id: str, user_id: str) -> Chat:
        chat = self.find_chat(chat_id, user_id)
        if chat is None:
            raise NotFoundError("Chat not found")
        return chat

    def get_or_create_chat(self, chat_id: str, user_id: str, prompt: str) -> Chat:
        """
        Idempotent find-or-create.

        Must run before any other write in the unit of work: losing the
        creation race to a concurrent request rolls the session back.
        """
        chat = self._lookup_chat(chat_id)
        if chat is None:
            chat = Chat(id=chat_id, user_id=user_id, title=make_chat_title(prompt))
            self.db.add(chat)
            try:
                self.db.flush()
            except IntegrityError:
                self.db.rollback()
                chat = self._lookup_chat(chat_id)
                if chat is None:
                    raise
                logger.info("chat_create_race_resolved", extra={"chat_id": chat_id, "user_id": user_id})
            else:
                logger.info("chat_created", extra={"chat_id": chat_id, "user_id": user_id})
                return chat

        if chat.user_id != user_id:
            raise NotFoundError("Chat not found")
        return chat

    def delete_chat(self, chat_id: str, user_id: str) -> None:
        chat = self.get_chat(chat_id, user_id)
        self.db.delete(chat)
        self.db.flush()
        logger.info("chat_deleted", extra={"chat_id": chat_id, "user_id": user_id})

    def list_chats(self, user_id: str, limit: int = 20, ending_before: str | None = None) -> Page:
        query = self.db.query(Chat).filter(Chat.user_id == user_id)
        if ending_before:
            cursor = self.find_chat(ending_before, user_id)
            if cursor is None:
                return Page()
            query = query.filter(_before(Chat, cursor))
        rows = query.order_by(Chat.created_at.desc(), Chat.id.desc()).limit(limit + 1).all()
        return Page(items=rows[:limit], has_more=len(rows) > limit)

    # ---------- batches ----------

    def create_batch(self, chat: Chat, user_id: str, prompt: str) -> GenerationBatch:
        batch = GenerationBatch(chat_id=chat.id, user_id=user_id, prompt=prompt)
        chat.updated_at = datetime.now(timezone.utc)
        self.db.add(batch)
        self.db.flush()
        return batch

    def find_batch(self, batch_id: str, user_id: str) -> GenerationBatch | None:
        return (
            self.db.query(GenerationBatch)
            .filter(GenerationBatch.id == batch_id, GenerationBatch.user_id == user_id)
            .one_or_none()
        )

    def get_batch(self, batch_id: str, user_id: str) -> GenerationBatch:
        batch = self.find_batch(batch_id, user_id)
        if batch is None:
            raise NotFoundError("Generation batch not found")
        return batch

    def delete_batch(self, batch_id: str, user_id: str) -> None:
        batch = self.get_batch(batch_id, user_id)
        self.db.delete(batch)
        self.db.flush()
        logger.info("generation_batch_deleted", extra={"batch_id": batch_id, "user_id": user_id})

    def list_batches(self, user_id: str, limit: int = 20, ending_before: str | None = None) -> Page:
        query = self.db.query(GenerationBatch).filter(GenerationBatch.user_id == user_id)
        if ending_before:
            cursor = self.find_batch(ending_before, user_id)
            if cursor is None:
                return Page()
            query = query.filter(_before(GenerationBatch, cursor))
        rows = (
            query.order_by(GenerationBatch.created_at.desc(), GenerationBatch.id.desc())
            .limit(limit + 1)
            .all()
        )
        return Page(items=rows[:limit], has_more=len(rows) > limit)

    # ---------- generations ----------

    def create_pending_generations(
        self,
        batch: GenerationBatch,
        user_id: str,
        provider_names: list[str],
    ) -> list[ImageGeneration]:
        """One pending record per provider, flushed together."""
        generations = [
            ImageGeneration(
                batch_id=batch.id,
                user_id=user_id,
                model=name,
                position=index,
                status=GenerationStatus.PENDING.value,
            )
            for index, name in enumerate(provider_names)
        ]
        self.db.add_all(generations)
        self.db.flush()
        return generations

    def complete_generation(self, generation_id: str, image_url: str) -> None:
        self._finish(generation_id, GenerationStatus.COMPLETED, image_url=image_url)

    def fail_generation(self, generation_id: str, error: str) -> None:
        self._finish(generation_id, GenerationStatus.FAILED, error_msg=error)

    def _finish(
        self,
        generation_id: str,
        status: GenerationStatus,
        image_url: str | None = None,
        error_msg: str | None = None,
    ) -> None:
        # Conditional update: only a pending record may reach a terminal state
        result = self.db.execute(
            update(ImageGeneration)
            .where(
                ImageGeneration.id == generation_id,
                ImageGeneration.status == GenerationStatus.PENDING.value,
            )
            .values(
                status=status.value,
                image_url=image_url,
                error_msg=error_msg,
                completed_at=datetime.now(timezone.utc),
            )
        )
        if result.rowcount != 1:
            raise InternalError(f"Generation {generation_id} is not pending")


def _before(model, cursor):
    return or_(
        model.created_at < cursor.created_at,
        and_(model.created_at == cursor.created_at, model.id < cursor.id),
    )
