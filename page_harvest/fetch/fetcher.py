"""
HTTP page fetching with httpx.

A fetch never raises: transport errors, timeouts, DNS failures and non-2xx
responses are all reported through a failed FetchResult and a log event.
There is no retry logic; one call issues exactly one GET request.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx

from ..logging_utils import log_event

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Diagnostic naming the request URL and the underlying error, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_client(
    timeout: float,
    user_agent: str,
    trust_env: bool = True,
    follow_redirects: bool = True,
) -> httpx.AsyncClient:
    """Create the shared async client used for page fetches."""
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": user_agent},
        follow_redirects=follow_redirects,
        trust_env=trust_env,
    )


async def fetch_url(
    url: str,
    timeout: float,
    user_agent: str,
    trust_env: bool = True,
    follow_redirects: bool = True,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Fetch a URL with a single GET request.

    The response body is treated as text regardless of its declared
    content type.

    Args:
        url: The URL to fetch
        timeout: Request timeout in seconds (used when no client is given)
        user_agent: User-Agent header string (used when no client is given)
        trust_env: Whether to respect system proxy settings from environment
        follow_redirects: Whether to follow HTTP redirects
        client: Optional shared AsyncClient; a short-lived one is created otherwise

    Returns:
        FetchResult with text on success or error message on failure
    """
    log_event(logger, f"Now fetching {url}", level=logging.DEBUG, event="fetch_start", url=url)

    status_code: int | None = None
    try:
        if client is None:
            async with build_client(timeout, user_agent, trust_env, follow_redirects) as own:
                resp = await own.get(url)
        else:
            resp = await client.get(url)
        status_code = resp.status_code
        resp.raise_for_status()
        return FetchResult(url=url, status_code=status_code, text=resp.text, error=None)
    except httpx.HTTPStatusError as exc:
        error = f"GET {url} failed: HTTP {exc.response.status_code} {exc.response.reason_phrase}"
    except Exception as exc:  # noqa: BLE001
        error = f"GET {url} failed: {type(exc).__name__}: {exc}"

    log_event(
        logger,
        f"There was an error with {url}",
        level=logging.WARNING,
        event="fetch_failed",
        url=url,
        status_code=status_code,
        error=error,
    )
    return FetchResult(url=url, status_code=status_code, text=None, error=error)
