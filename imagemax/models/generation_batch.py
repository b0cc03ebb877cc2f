from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from imagemax.db.base import Base


class GenerationBatch(Base):
    """One prompt fanned out to every provider."""

    __tablename__ = "generation_batches"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    chat_id = Column(String, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    prompt = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )

    chat = relationship("Chat", back_populates="batches")
    generations = relationship(
        "ImageGeneration",
        back_populates="batch",
        cascade="all, delete-orphan",
        order_by="ImageGeneration.position",
    )
