import uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import UUID, String, Boolean, DateTime
from datetime import datetime
from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    firebase_uid: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    firebase_sign_in_provider: Mapped[str] = mapped_column(
        String(64), nullable=False, default="password")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    has_completed_onboarding: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now)
