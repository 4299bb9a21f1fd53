"""Domain exceptions raised by the workshop engines and pipeline.

Each exception carries the HTTP status the API maps it to. The exception
handler registered in ``app.main.create_app`` turns them into an
``ErrorResponse`` body.
"""
from fastapi import status


class WorkshopError(Exception):
    """Base class for workshop domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "workshop_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(WorkshopError):
    """Unknown workshop, use case or challenge log id."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class ValidationInputMissing(WorkshopError):
    """A step was triggered before the data it depends on exists."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_input_missing"


# Reconciling before any source was imported is the common case of a missing input
ImportMissing = ValidationInputMissing


class InvalidTransition(WorkshopError):
    """Workshop status change not allowed from the current status."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "invalid_transition"


class AlreadyResolved(WorkshopError):
    """A challenge log entry already received its human response."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "already_resolved"


class WorkshopBusy(WorkshopError):
    """Another request holds the workshop's write lock."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "workshop_busy"


class UpstreamFetchFailure(WorkshopError):
    """ResearchApp or CognitionTwo could not be reached or returned an error."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "upstream_fetch_failure"


class UpstreamGenerationFailure(WorkshopError):
    """The text-generation collaborator failed or returned unusable content.

    Never surfaced to API callers: the pipeline recovers with fallback output.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "upstream_generation_failure"
