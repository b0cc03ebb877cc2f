from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from imagemax.db.base import Base


class GenerationStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ImageGeneration(Base):
    """Per-provider outcome of a batch. Moves pending -> completed|failed once."""

    __tablename__ = "image_generations"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    batch_id = Column(
        String,
        ForeignKey("generation_batches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String, nullable=False, index=True)
    model = Column(String, nullable=False)  # provider name
    position = Column(Integer, nullable=False, default=0)  # dispatch index
    status = Column(String, nullable=False, default=GenerationStatus.PENDING.value)
    image_url = Column(Text, nullable=True)
    error_msg = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)

    batch = relationship("GenerationBatch", back_populates="generations")
