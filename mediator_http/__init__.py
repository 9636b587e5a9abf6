"""Event-publishing HTTP helper.

Issues HTTP requests and republishes their lifecycle (progress, success,
error, abort) on a publish/subscribe mediator.

Public API:
    HttpHelper - get/post/put/patch/delete, results delivered as events
    Mediator - In-process publish/subscribe bus
    RequestOptions, ResponseEnvelope - Request and response models
"""

from mediator_http._version import __version__
from mediator_http.client import HttpHelper, RequestHandle, get_http_helper
from mediator_http.mediator import Mediator, Publisher
from mediator_http.models import (
    TOPIC_ABORT,
    TOPIC_ERROR,
    TOPIC_SUCCESS,
    TOPIC_UPDATE,
    Aborted,
    Error,
    Outcome,
    RequestOptions,
    ResponseEnvelope,
    Success,
    topic_name,
)

__all__ = [
    "__version__",
    "HttpHelper",
    "RequestHandle",
    "get_http_helper",
    "Mediator",
    "Publisher",
    "RequestOptions",
    "ResponseEnvelope",
    "Success",
    "Error",
    "Aborted",
    "Outcome",
    "topic_name",
    "TOPIC_UPDATE",
    "TOPIC_SUCCESS",
    "TOPIC_ERROR",
    "TOPIC_ABORT",
]
