"""Reconciled use case ORM model."""
from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from snowflake.sqlalchemy import VARIANT
from typing import Any
from datetime import datetime

from app.database.base import Base


class UseCase(Base):
    """One reconciled use case; the full record is kept in ``data``."""
    __tablename__ = "use_cases"

    # Ids like UC-001 are scoped to a workshop
    workshop_id: Mapped[str] = mapped_column(ForeignKey("workshops.id"), primary_key=True)
    id: Mapped[str] = mapped_column(String(20), primary_key=True)

    position: Mapped[int] = mapped_column(Integer)
    data: Mapped[Any] = mapped_column(VARIANT)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    workshop: Mapped["Workshop"] = relationship(
        "Workshop",
        back_populates="use_cases"
    )

    def __repr__(self):
        return f"<UseCase(workshop_id={self.workshop_id}, id={self.id})>"
