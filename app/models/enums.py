"""Enumeration types for the AI Catalyst workshop platform."""
from enum import Enum


class WorkshopStatus(str, Enum):
    """Lifecycle states for a workshop."""
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class SourceSystem(str, Enum):
    """External analysis systems a use case can be imported from."""
    RESEARCH_APP = "research_app"  # financial analysis
    COGNITION_TWO = "cognition_two"  # cognitive / agentic pattern analysis
    MERGED = "merged"


class ChallengeType(str, Enum):
    """What a challenge disputes."""
    ASSUMPTION = "assumption"
    KPI = "kpi"
    FRICTION = "friction"
    BENEFIT = "benefit"


class Severity(str, Enum):
    """Challenge severity tiers."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ChallengeStatus(str, Enum):
    """Human review status of a challenge log entry."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ReadinessDimension(str, Enum):
    """Survey maturity dimensions."""
    DATA = "data"
    PROCESS = "process"
    ORGANIZATIONAL = "organizational"
    TECHNICAL = "technical"


class BenefitCategory(str, Enum):
    """Financial benefit families carried by a use case."""
    COST_SAVINGS = "cost_savings"
    RISK_REDUCTION = "risk_reduction"
    REVENUE_IMPACT = "revenue_impact"
    CASH_FLOW_IMPROVEMENT = "cash_flow_improvement"


class Quadrant(str, Enum):
    """Value vs readiness matrix buckets."""
    CHAMPION = "Champion"  # high value, high readiness
    QUICK_WIN = "Quick Win"  # high readiness
    STRATEGIC = "Strategic"  # high value
    FOUNDATION = "Foundation"


class Track(str, Enum):
    """Hold-period sequencing tracks."""
    T1 = "T1"  # EBITDA accelerators, 0-12 months
    T2 = "T2"  # growth enablers, 6-24 months
    T3 = "T3"  # exit multipliers, 12-36 months


class GenerationMode(str, Enum):
    """Where a generated result came from."""
    LIVE = "live"  # text-generation collaborator
    DEMO = "demo"  # no API key configured
    FALLBACK = "fallback"  # collaborator failed, deterministic output used


# Weights for the overall readiness maturity (must sum to 1.0)
READINESS_WEIGHTS: dict[ReadinessDimension, float] = {
    ReadinessDimension.DATA: 0.35,
    ReadinessDimension.TECHNICAL: 0.25,
    ReadinessDimension.PROCESS: 0.20,
    ReadinessDimension.ORGANIZATIONAL: 0.20,
}


# Valid workshop status transitions (workshops are never hard-deleted)
VALID_STATUS_TRANSITIONS: dict[WorkshopStatus, list[WorkshopStatus]] = {
    WorkshopStatus.DRAFT: [WorkshopStatus.IN_PROGRESS],
    WorkshopStatus.IN_PROGRESS: [WorkshopStatus.COMPLETED, WorkshopStatus.DRAFT],
    WorkshopStatus.COMPLETED: [WorkshopStatus.IN_PROGRESS],
}


# Challenge entries move out of pending exactly once
VALID_CHALLENGE_TRANSITIONS: dict[ChallengeStatus, list[ChallengeStatus]] = {
    ChallengeStatus.PENDING: [ChallengeStatus.ACCEPTED, ChallengeStatus.REJECTED],
    ChallengeStatus.ACCEPTED: [],
    ChallengeStatus.REJECTED: [],
}
