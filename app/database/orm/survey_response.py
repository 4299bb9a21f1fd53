"""Survey response ORM model."""
from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from snowflake.sqlalchemy import VARIANT
from typing import Any, Optional
from datetime import datetime
import uuid

from app.database.base import Base


class SurveyResponse(Base):
    """Submitted survey answers with the readiness scores they produced."""
    __tablename__ = "survey_responses"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    workshop_id: Mapped[str] = mapped_column(ForeignKey("workshops.id"))
    respondent: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    answers: Mapped[Any] = mapped_column(VARIANT)
    readiness_scores: Mapped[Any] = mapped_column(VARIANT)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    workshop: Mapped["Workshop"] = relationship(
        "Workshop",
        back_populates="survey_responses"
    )
