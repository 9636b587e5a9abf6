"""Pydantic models for mediator-http requests, responses and outcomes."""

from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field

from mediator_http.exceptions import MediatorHttpAPIError

# =============================================================================
# Constants
# =============================================================================

TOPIC_UPDATE = "httpUpdate"
TOPIC_SUCCESS = "httpSuccess"
TOPIC_ERROR = "httpError"
TOPIC_ABORT = "httpAbort"


def topic_name(topic: str, key: str | None = None) -> str:
    """Return the bus topic for a lifecycle event, namespaced by key if given."""
    if key:
        return f"{key}-{topic}"
    return topic


# =============================================================================
# Request Models
# =============================================================================


class RequestOptions(BaseModel):
    """Options for a single request.

    All fields are optional; an absent or empty field is not applied.

    Fields:
        query: Pairs serialized into the URI query string.
        headers: HTTP headers set on the request.
        data: Pairs serialized into the request body.
        username: Username for HTTP basic authentication.
        password: Password for HTTP basic authentication.
    """

    query: dict[str, Any] | None = None
    headers: dict[str, str] | None = None
    data: dict[str, Any] | None = None
    username: str | None = None
    password: str | None = Field(default=None, repr=False)

    model_config = ConfigDict(extra="forbid")

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)


# =============================================================================
# Response Models
# =============================================================================


class ResponseEnvelope(BaseModel):
    """Response published on the success topic.

    ``data`` is set only when the body parses as JSON to a non-null value.
    ``raw`` is the underlying httpx.Response.
    """

    status: int
    status_text: str
    data: Any = None
    raw: httpx.Response = Field(repr=False)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def raise_for_status(self) -> None:
        """Raise MediatorHttpAPIError if the status is 4xx or 5xx."""
        if self.status >= 400:
            raise MediatorHttpAPIError(
                f"{self.status} {self.status_text}".strip(),
                status_code=self.status,
            )


# =============================================================================
# Outcome Models
# =============================================================================


class Success(BaseModel):
    """Request completed with a response (any HTTP status)."""

    kind: Literal["success"] = "success"
    response: ResponseEnvelope


class Error(BaseModel):
    """Request failed at the transport level."""

    kind: Literal["error"] = "error"
    error: Exception

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Aborted(BaseModel):
    """Request was aborted before completion."""

    kind: Literal["aborted"] = "aborted"
    reason: BaseException | None = None

    model_config = ConfigDict(arbitrary_types_allowed=True)


Outcome = Success | Error | Aborted
