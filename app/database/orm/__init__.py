"""SQLAlchemy ORM models for the AI Catalyst workshop platform."""
from app.database.base import Base
from app.database.orm.workshop import Workshop
from app.database.orm.use_case import UseCase
from app.database.orm.challenge_log import ChallengeLog
from app.database.orm.survey_response import SurveyResponse

__all__ = [
    "Base",
    "Workshop",
    "UseCase",
    "ChallengeLog",
    "SurveyResponse",
]
