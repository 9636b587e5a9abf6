"""Exceptions raised synchronously by mediator-http.

Transport outcomes (success, transport error, abort) are published on the
mediator and never raised. These cover caller mistakes and opt-in status
checks only.
"""


class MediatorHttpError(Exception):
    """Base exception for all mediator-http errors."""


class MediatorHttpAPIError(MediatorHttpError):
    """A delivered response carried a 4xx/5xx status.

    Raised only by ResponseEnvelope.raise_for_status(); the helper itself
    publishes such responses as httpSuccess.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MediatorHttpConfigError(MediatorHttpError):
    """Malformed MEDIATOR_HTTP_* environment configuration."""


class MediatorHttpValidationError(MediatorHttpError):
    """Request options failed validation before the request was issued."""
