"""Persistence interface for workshops and their child records.

The pipeline talks only to ``WorkshopRepository``. ``SnowflakeWorkshopRepository``
stores step outputs as VARIANT columns through ``SnowflakeService``.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel

from app.models.challenge import ChallengeLogEntry
from app.models.enums import ChallengeStatus, WorkshopStatus
from app.models.survey import ReadinessScores, SurveyResponseCreate
from app.models.use_case import UseCase
from app.models.workshop import Workshop, WorkshopCreate, WorkshopSummary
from app.services.snowflake import SnowflakeService

logger = logging.getLogger(__name__)


def to_storage(value: Any) -> Any:
    """Convert models, enums and lists of models into JSON-ready values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [to_storage(v) for v in value]
    return value


class WorkshopRepository(ABC):
    """Storage for workshops, use cases, challenge logs and survey responses."""

    # ── workshops ─────────────────────────────────────────────────────────────

    @abstractmethod
    def create_workshop(self, data: WorkshopCreate) -> Workshop:
        ...

    @abstractmethod
    def get_workshop(self, workshop_id: UUID) -> Optional[Workshop]:
        ...

    @abstractmethod
    def list_workshops(
        self,
        status: Optional[WorkshopStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[WorkshopSummary]:
        ...

    @abstractmethod
    def count_workshops(self, status: Optional[WorkshopStatus] = None) -> int:
        ...

    @abstractmethod
    def update_workshop(self, workshop_id: UUID, **fields: Any) -> Workshop:
        """Overwrite the given workshop fields and bump ``updated_at``."""

    # ── use cases ─────────────────────────────────────────────────────────────

    @abstractmethod
    def replace_use_cases(self, workshop_id: UUID, use_cases: list[UseCase]) -> None:
        ...

    @abstractmethod
    def list_use_cases(self, workshop_id: UUID) -> list[UseCase]:
        ...

    @abstractmethod
    def save_use_case(self, use_case: UseCase) -> None:
        ...

    # ── challenge log ─────────────────────────────────────────────────────────

    @abstractmethod
    def append_challenges(self, entries: list[ChallengeLogEntry]) -> None:
        """Insert new entries; existing entries are never touched."""

    @abstractmethod
    def list_challenges(
        self,
        workshop_id: UUID,
        status: Optional[ChallengeStatus] = None,
        batch_id: Optional[UUID] = None,
    ) -> list[ChallengeLogEntry]:
        ...

    @abstractmethod
    def get_challenge(self, workshop_id: UUID, challenge_id: UUID) -> Optional[ChallengeLogEntry]:
        ...

    @abstractmethod
    def resolve_challenge(self, resolved: ChallengeLogEntry) -> bool:
        """Apply a response only if the stored entry is still pending.

        Returns False when another response got there first.
        """

    # ── survey ────────────────────────────────────────────────────────────────

    @abstractmethod
    def add_survey_response(
        self,
        workshop_id: UUID,
        response: SurveyResponseCreate,
        scores: ReadinessScores,
    ) -> None:
        ...


class SnowflakeWorkshopRepository(WorkshopRepository):
    """``WorkshopRepository`` backed by Snowflake tables."""

    def __init__(self, service: SnowflakeService):
        self.service = service

    def create_workshop(self, data: WorkshopCreate) -> Workshop:
        workshop_id = uuid4()
        now = datetime.now(timezone.utc)
        self.service.insert_workshop(
            str(workshop_id),
            data.company_name,
            data.industry,
            data.facilitator_name,
            WorkshopStatus.DRAFT.value,
            now,
        )
        return Workshop(
            id=workshop_id,
            **data.model_dump(),
            status=WorkshopStatus.DRAFT,
            created_at=now,
            updated_at=now,
        )

    def get_workshop(self, workshop_id: UUID) -> Optional[Workshop]:
        row = self.service.get_workshop(str(workshop_id))
        if row is None:
            return None
        return Workshop.model_validate(row)

    def list_workshops(
        self,
        status: Optional[WorkshopStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[WorkshopSummary]:
        rows = self.service.get_workshops(
            status=status.value if status else None, limit=limit, offset=offset
        )
        return [WorkshopSummary.model_validate(r) for r in rows]

    def count_workshops(self, status: Optional[WorkshopStatus] = None) -> int:
        return self.service.count_workshops(status.value if status else None)

    def update_workshop(self, workshop_id: UUID, **fields: Any) -> Workshop:
        self.service.update_workshop(
            str(workshop_id), {k: to_storage(v) for k, v in fields.items()}
        )
        workshop = self.get_workshop(workshop_id)
        if workshop is None:
            raise LookupError(f"Workshop {workshop_id} disappeared during update")
        return workshop

    def replace_use_cases(self, workshop_id: UUID, use_cases: list[UseCase]) -> None:
        self.service.replace_use_cases(
            str(workshop_id), [uc.model_dump(mode="json") for uc in use_cases]
        )

    def list_use_cases(self, workshop_id: UUID) -> list[UseCase]:
        return [UseCase.model_validate(d) for d in self.service.get_use_cases(str(workshop_id))]

    def save_use_case(self, use_case: UseCase) -> None:
        self.service.update_use_case(str(use_case.workshop_id), use_case.model_dump(mode="json"))

    def append_challenges(self, entries: list[ChallengeLogEntry]) -> None:
        for entry in entries:
            self.service.insert_challenge(entry.model_dump(mode="json"))
        logger.info(f"Appended {len(entries)} challenge log entries")

    def list_challenges(
        self,
        workshop_id: UUID,
        status: Optional[ChallengeStatus] = None,
        batch_id: Optional[UUID] = None,
    ) -> list[ChallengeLogEntry]:
        rows = self.service.get_challenges(
            str(workshop_id),
            status=status.value if status else None,
            batch_id=str(batch_id) if batch_id else None,
        )
        return [ChallengeLogEntry.model_validate(r) for r in rows]

    def get_challenge(self, workshop_id: UUID, challenge_id: UUID) -> Optional[ChallengeLogEntry]:
        row = self.service.get_challenge(str(workshop_id), str(challenge_id))
        return ChallengeLogEntry.model_validate(row) if row else None

    def resolve_challenge(self, resolved: ChallengeLogEntry) -> bool:
        updated = self.service.resolve_challenge(
            str(resolved.id),
            resolved.status.value,
            resolved.responded_by,
            resolved.responded_at,
        )
        return updated == 1

    def add_survey_response(
        self,
        workshop_id: UUID,
        response: SurveyResponseCreate,
        scores: ReadinessScores,
    ) -> None:
        self.service.insert_survey_response(
            str(uuid4()),
            str(workshop_id),
            response.respondent,
            [a.model_dump(mode="json") for a in response.answers],
            scores.model_dump(mode="json"),
        )
