from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from imagemax.db.base import Base


class Chat(Base):
    __tablename__ = "chats"

    # Caller-supplied; the primary key is what makes find-or-create race safe
    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    batches = relationship(
        "GenerationBatch",
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="GenerationBatch.created_at",
    )
