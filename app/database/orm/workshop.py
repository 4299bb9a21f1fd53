"""Workshop ORM model."""
from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from snowflake.sqlalchemy import VARIANT
from typing import Any, List, Optional
from datetime import datetime
import uuid

from app.database.base import Base


class Workshop(Base):
    """Workshop aggregate. Step outputs are VARIANT documents."""
    __tablename__ = "workshops"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )

    # Fields
    company_name: Mapped[str] = mapped_column(String(255))
    industry: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    facilitator_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="draft")

    # Source imports
    research_app_report_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cognition_two_analysis_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    research_app_data: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    cognition_two_data: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)

    # Step outputs
    survey: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    readiness_scores: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    challenge_results: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    validation_results: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    prioritization_matrix: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    workflow_maps: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    data_lineage: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)
    synthesis: Mapped[Optional[Any]] = mapped_column(VARIANT, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    use_cases: Mapped[List["UseCase"]] = relationship(
        "UseCase",
        back_populates="workshop"
    )
    challenge_logs: Mapped[List["ChallengeLog"]] = relationship(
        "ChallengeLog",
        back_populates="workshop"
    )
    survey_responses: Mapped[List["SurveyResponse"]] = relationship(
        "SurveyResponse",
        back_populates="workshop"
    )

    # Note: Snowflake doesn't support CHECK constraints
    # Status transitions are enforced by the pipeline

    def __repr__(self):
        return f"<Workshop(id={self.id}, company_name={self.company_name}, status={self.status})>"
