"""Async HTTP client shared by every request an HttpHelper issues."""

import httpx

from mediator_http._version import __version__

# Requests run until a terminal event unless the caller opts into a timeout.
DEFAULT_TIMEOUT = None
USER_AGENT = f"mediator-http/{__version__}"


def create_http_client(
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    base_url: str | None = None,
) -> httpx.AsyncClient:
    """Create the pooled async client an HttpHelper owns.

    Args:
        timeout: Request timeout in seconds. None disables timeouts, so a
            stalled request ends only through abort.
        base_url: Optional base URL that relative request URLs resolve against.

    Returns:
        Configured httpx.AsyncClient. The owning helper closes it in aclose().
    """
    return httpx.AsyncClient(
        timeout=timeout,
        base_url=base_url or "",
        headers={"User-Agent": USER_AGENT},
    )
