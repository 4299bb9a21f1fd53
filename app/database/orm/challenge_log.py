"""Challenge log ORM model."""
from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from snowflake.sqlalchemy import VARIANT
from typing import Any, Optional
from datetime import datetime
import uuid

from app.database.base import Base


class ChallengeLog(Base):
    """Append-only challenge entries. Only the response columns are ever updated."""
    __tablename__ = "challenge_logs"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    workshop_id: Mapped[str] = mapped_column(ForeignKey("workshops.id"))
    use_case_id: Mapped[str] = mapped_column(String(20))
    batch_id: Mapped[str] = mapped_column(String(36))
    challenge_type: Mapped[str] = mapped_column(String(20))
    field_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    severity: Mapped[str] = mapped_column(String(10))
    original_value: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    challenged_value: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    evidence: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Response
    status: Mapped[str] = mapped_column(String(20), default="pending")
    responded_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    workshop: Mapped["Workshop"] = relationship(
        "Workshop",
        back_populates="challenge_logs"
    )

    def __repr__(self):
        return f"<ChallengeLog(id={self.id}, use_case_id={self.use_case_id}, status={self.status})>"
