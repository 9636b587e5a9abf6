"""Event-publishing HTTP helper.

Requests are issued on the running asyncio loop and their lifecycle is
republished through a mediator instead of being returned to the caller:

    mediator = Mediator()
    mediator.subscribe("job1-httpSuccess", on_success)

    async with HttpHelper(mediator) as http:
        handle = http.get("https://example.com/api", {"query": {"q": "x"}}, key="job1")
        outcome = await handle  # optional; events fire either way
"""

import asyncio
import json
import math
import os
from collections.abc import Callable, Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from mediator_http._internal.http import create_http_client
from mediator_http._internal.serialize import serialize_key_value_pairs
from mediator_http.exceptions import MediatorHttpConfigError, MediatorHttpValidationError
from mediator_http.mediator import Publisher
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

DEFAULT_TIMEOUT_MS: int | None = None
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

Options = RequestOptions | Mapping[str, Any] | None


class RequestLifecycle:
    """Publishes the events of one in-flight request.

    Terminal on the first of load, error or abort. Progress may fire any
    number of times before that; nothing is published after it.
    """

    def __init__(
        self,
        mediator: Publisher,
        *,
        key: str | None = None,
        log: Callable[[str], None] | None = None,
    ) -> None:
        self._mediator = mediator
        self._key = key
        self._log = log or (lambda message: None)
        self._finished = False
        self.abort_requested = False

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def finished(self) -> bool:
        return self._finished

    def _publish(self, topic: str, payload: Any) -> None:
        topic = topic_name(topic, self._key)
        try:
            self._mediator.publish(topic, payload)
        except Exception as e:
            # A failing subscriber must not cost the request its terminal event.
            self._log(f"Subscriber for {topic} failed: {e!r}")

    def _finish(self) -> bool:
        if self._finished:
            return False
        self._finished = True
        return True

    def on_progress(self, loaded: int, total: int | None) -> None:
        """Publish percent complete when the total size is known."""
        if self._finished or not total:
            return
        # Half-up rounding, clamped for servers that under-report length.
        percent = min(100, math.floor(loaded / total * 100 + 0.5))
        self._publish(TOPIC_UPDATE, percent)

    def on_load(self, response: httpx.Response, body: bytes) -> Outcome:
        envelope = ResponseEnvelope(
            status=response.status_code,
            status_text=response.reason_phrase,
            data=parse_json_body(body),
            raw=response,
        )
        if self._finish():
            self._log(f"Request finished with status {envelope.status}")
            self._publish(TOPIC_SUCCESS, envelope)
        return Success(response=envelope)

    def on_error(self, error: Exception) -> Outcome:
        if self._finish():
            self._log(f"Request error: {error!r}")
            self._publish(TOPIC_ERROR, error)
        return Error(error=error)

    def on_abort(self, reason: BaseException) -> Outcome:
        if self._finish():
            self._log("Request aborted")
            self._publish(TOPIC_ABORT, reason)
        return Aborted(reason=reason)


def parse_json_body(body: bytes) -> Any:
    """Parse a response body as JSON, returning None if it is empty or invalid."""
    if not body or not body.strip():
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length > 0 else None


class RequestHandle:
    """Handle to a request running on the event loop.

    Await it (or call ``wait()``) for the tagged outcome; call ``abort()`` to
    cancel. The outcome is also published on the mediator, so awaiting is
    optional.
    """

    def __init__(
        self,
        task: "asyncio.Task[Outcome]",
        lifecycle: RequestLifecycle,
        *,
        method: str,
        url: str,
    ) -> None:
        self._task = task
        self._lifecycle = lifecycle
        self.method = method
        self.url = url
        task.add_done_callback(self._on_done)

    @property
    def key(self) -> str | None:
        return self._lifecycle.key

    def _on_done(self, task: "asyncio.Task[Outcome]") -> None:
        # A task cancelled before its first step never reaches its handlers.
        if task.cancelled():
            self._lifecycle.on_abort(asyncio.CancelledError())

    def done(self) -> bool:
        return self._task.done()

    def abort(self) -> bool:
        """Abort the request.

        Returns:
            True if the request was still running, False otherwise.
        """
        if self._task.done():
            return False
        self._lifecycle.abort_requested = True
        return self._task.cancel()

    async def wait(self) -> Outcome:
        await asyncio.wait({self._task})
        if self._task.cancelled():
            return Aborted(reason=None)
        return self._task.result()

    def __await__(self):
        return self.wait().__await__()


class HttpHelper:
    """HTTP helper that republishes request lifecycle events on a mediator.

    Every request gets its own lifecycle, so concurrent requests on one
    helper never share state. Outcomes surface as events (and on the
    returned RequestHandle), never as exceptions from the transport.

    Requests that are sent and never awaited still run to completion:
    leaving `async with HttpHelper(...)` (or calling `aclose()`) waits for
    every in-flight request to publish its terminal event before the
    client is closed.

    Use `HttpHelper.from_env(mediator)` to configure from environment
    variables.
    """

    def __init__(
        self,
        mediator: Publisher,
        *,
        base_url: str | None = None,
        timeout_ms: int | None = DEFAULT_TIMEOUT_MS,
        debug: bool = False,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the helper.

        Args:
            mediator: Bus that receives lifecycle events.
            base_url: Optional base URL for relative request URLs.
            timeout_ms: Request timeout in milliseconds. None disables it.
            debug: Enable debug logging to stderr.
            client: Optional preconfigured client. The helper does not close
                a client it did not create.
        """
        self._mediator = mediator
        self._base_url = base_url
        self._timeout_ms = timeout_ms
        self._debug = debug
        self._owns_client = client is None
        self._tasks: set[asyncio.Task[Outcome]] = set()
        if client is None:
            timeout = timeout_ms / 1000 if timeout_ms is not None else None
            client = create_http_client(timeout=timeout, base_url=base_url)
        self._client = client

    @classmethod
    def from_env(cls, mediator: Publisher) -> "HttpHelper":
        """Create a helper from environment variables.

        Optional environment variables:
            MEDIATOR_HTTP_BASE_URL: Base URL for relative request URLs.
            MEDIATOR_HTTP_TIMEOUT_MS: Request timeout in milliseconds.
            MEDIATOR_HTTP_DEBUG: Set to "1" to enable debug logging.

        Raises:
            MediatorHttpConfigError: If MEDIATOR_HTTP_TIMEOUT_MS is not an integer.
        """
        base_url = os.environ.get("MEDIATOR_HTTP_BASE_URL") or None
        debug = os.environ.get("MEDIATOR_HTTP_DEBUG", "") == "1"

        raw_timeout = os.environ.get("MEDIATOR_HTTP_TIMEOUT_MS")
        timeout_ms = DEFAULT_TIMEOUT_MS
        if raw_timeout:
            try:
                timeout_ms = int(raw_timeout)
            except ValueError as e:
                raise MediatorHttpConfigError(
                    f"MEDIATOR_HTTP_TIMEOUT_MS must be an integer, got {raw_timeout!r}"
                ) from e

        return cls(mediator, base_url=base_url, timeout_ms=timeout_ms, debug=debug)

    async def aclose(self) -> None:
        """Wait for in-flight requests to publish their outcome, then close the client."""
        if self._tasks:
            self._log_debug(f"Waiting for {len(self._tasks)} in-flight request(s)")
            await asyncio.wait(set(self._tasks))
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpHelper":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            import sys

            print(f"[mediator-http] {message}", file=sys.stderr)

    def send(
        self,
        url: str,
        method: str,
        options: Options = None,
        key: str | None = None,
    ) -> RequestHandle:
        """Build and send an HTTP request.

        Returns immediately; the outcome is published on the mediator under
        httpUpdate/httpSuccess/httpError/httpAbort, prefixed with "<key>-"
        when a correlation key is given.

        Args:
            url: URL to send the request to.
            method: HTTP verb; passed through upper-cased, not validated.
            options: RequestOptions or an equivalent mapping.
            key: Optional correlation key namespacing the published topics.

        Returns:
            A RequestHandle for awaiting the outcome or aborting.

        Raises:
            MediatorHttpValidationError: If options are invalid.
            RuntimeError: If called without a running event loop.
        """
        opts = _coerce_options(options)
        loop = asyncio.get_running_loop()

        method = method.upper()
        if opts.query:
            url += "?" + serialize_key_value_pairs(opts.query)

        auth = httpx.BasicAuth(opts.username, opts.password) if opts.has_credentials else None

        lifecycle = RequestLifecycle(self._mediator, key=key, log=self._log_debug)

        headers = dict(opts.headers or {})
        body = b""
        if opts.data:
            body = serialize_key_value_pairs(opts.data).encode("utf-8")
            if not any(name.lower() == "content-type" for name in headers):
                headers["Content-Type"] = FORM_CONTENT_TYPE

        request = self._client.build_request(method, url, headers=headers, content=body)
        self._log_debug(f"Sending {method} {request.url.host}{request.url.path}")

        task = loop.create_task(self._run(request, auth, lifecycle))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return RequestHandle(task, lifecycle, method=method, url=url)

    async def _run(
        self,
        request: httpx.Request,
        auth: httpx.Auth | None,
        lifecycle: RequestLifecycle,
    ) -> Outcome:
        try:
            response = await self._client.send(request, auth=auth, stream=True)
            try:
                total = _content_length(response)
                chunks: list[bytes] = []
                received = 0
                async for chunk in response.aiter_bytes():
                    chunks.append(chunk)
                    received += len(chunk)
                    # Pre-read responses report no downloaded bytes.
                    lifecycle.on_progress(response.num_bytes_downloaded or received, total)
            finally:
                await response.aclose()
        except asyncio.CancelledError as e:
            outcome = lifecycle.on_abort(e)
            if lifecycle.abort_requested:
                return outcome
            raise
        except httpx.RequestError as e:
            return lifecycle.on_error(e)
        except Exception as e:
            self._log_debug(f"Unexpected request failure: {e!r}")
            return lifecycle.on_error(e)
        return lifecycle.on_load(response, b"".join(chunks))

    # =========================================================================
    # Verb Methods
    # =========================================================================

    def delete(self, url: str, options: Options = None, *, key: str | None = None) -> RequestHandle:
        """Perform a DELETE request. See `send` for options and events."""
        return self.send(url, "DELETE", options, key)

    def get(self, url: str, options: Options = None, *, key: str | None = None) -> RequestHandle:
        """Perform a GET request. See `send` for options and events."""
        return self.send(url, "GET", options, key)

    def patch(self, url: str, options: Options = None, *, key: str | None = None) -> RequestHandle:
        """Perform a PATCH request. See `send` for options and events."""
        return self.send(url, "PATCH", options, key)

    def post(self, url: str, options: Options = None, *, key: str | None = None) -> RequestHandle:
        """Perform a POST request. See `send` for options and events."""
        return self.send(url, "POST", options, key)

    def put(self, url: str, options: Options = None, *, key: str | None = None) -> RequestHandle:
        """Perform a PUT request. See `send` for options and events."""
        return self.send(url, "PUT", options, key)


def _coerce_options(options: Options) -> RequestOptions:
    if options is None:
        return RequestOptions()
    if isinstance(options, RequestOptions):
        return options
    try:
        return RequestOptions.model_validate(dict(options))
    except (ValidationError, TypeError, ValueError) as e:
        raise MediatorHttpValidationError(f"Invalid request options: {e}") from e


def get_http_helper(mediator: Publisher) -> HttpHelper:
    """Get an HttpHelper configured from environment variables.

    Returns:
        A configured HttpHelper instance.
    """
    return HttpHelper.from_env(mediator)
