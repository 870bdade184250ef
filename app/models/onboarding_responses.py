import uuid
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import UUID, String, DateTime, Index
from datetime import datetime
from app.db.base import Base, JSONDocument


class OnboardingResponse(Base):
    __tablename__ = "onboarding_responses"
    __table_args__ = (
        Index("ix_onboarding_responses_user_id_created_at", "user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Opaque: a registered user's id or a generated one for anonymous submissions.
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    username: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    question_set_version: Mapped[str] = mapped_column(String(64), nullable=False)
    answers: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    formatted_answers: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now)
