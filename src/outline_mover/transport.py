"""HTTP requests with per-attempt timeout, exponential backoff and 429 handling."""

import json
import time
from collections.abc import Callable
from typing import Any

import requests
from loguru import logger

from outline_mover.config import FETCH_TIMEOUT, INITIAL_BACKOFF, MAX_RETRIES
from outline_mover.errors import (
    NetworkError,
    RateLimitedError,
    RequestTimeoutError,
    TransportError,
)

RATE_LIMIT_STATUS = 429


def api_headers(api_token: str) -> dict[str, str]:
    """Build JSON + bearer-token headers for Outline API requests."""
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_token}",
    }


def _retry_after_seconds(response: requests.Response) -> int | None:
    """Return the Retry-After hint in seconds, or None if missing, negative or not an integer."""
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        seconds = int(raw.strip())
    except ValueError:
        # HTTP-date form is not supported; fall back to backoff.
        return None
    return seconds if seconds >= 0 else None


def request_with_policy(
    session: requests.Session,
    url: str,
    *,
    method: str = "POST",
    headers: dict[str, str] | None = None,
    payload: Any = None,
    max_retries: int = MAX_RETRIES,
    initial_backoff: float = INITIAL_BACKOFF,
    timeout: float = FETCH_TIMEOUT,
    sleep: Callable[[float], None] = time.sleep,
    rate_limit_deadline: float | None = None,
) -> requests.Response:
    """Send a request, retrying on timeouts, transport errors and rate limits.

    Timeouts and transport errors consume the retry budget: attempt ``n``
    (0-based) is followed by a ``initial_backoff * 2**n`` second pause, and the
    last error is raised once ``max_retries`` retries have failed.

    A 429 response does not consume the budget. The client waits for the
    server's ``Retry-After`` seconds and tries again. Without a usable header
    the delay is ``initial_backoff * 2**(n + k)``, where ``k`` counts the 429
    responses received since the last failed attempt. Without
    ``rate_limit_deadline`` this repeats for as long as the server keeps
    answering 429.

    Any other response, successful or not, is returned as is.

    Args:
        session: Session used to send the request.
        url: Absolute URL.
        method: HTTP method.
        headers: Request headers.
        payload: JSON-serializable request body.
        max_retries: Retries allowed after the first failed attempt.
        initial_backoff: First backoff delay, in seconds.
        timeout: Per-attempt timeout, in seconds.
        sleep: Called with the delay before every retry.
        rate_limit_deadline: Optional cap, in seconds, on the total time spent
            waiting out 429 responses.

    Raises:
        RequestTimeoutError: The last attempt timed out.
        NetworkError: The last attempt failed at the transport level.
        RateLimitedError: ``rate_limit_deadline`` was exceeded.
    """
    attempt = 0
    rate_limit_streak = 0
    rate_limited_for = 0.0

    while True:
        try:
            response = session.request(method, url, headers=headers, json=payload, timeout=timeout)
        except requests.RequestException as e:
            error: TransportError
            if isinstance(e, requests.Timeout):
                error = RequestTimeoutError(f"Request timed out after {timeout}s: {url}")
            else:
                error = NetworkError(f"Request failed: {url}: {e}")
            logger.debug("Attempt {} failed: {}", attempt + 1, error)
            if attempt >= max_retries:
                raise error from e
            delay = initial_backoff * 2**attempt
            logger.warning(
                "Retrying {} in {:.2f}s (attempt {}/{})", url, delay, attempt + 1, max_retries
            )
            sleep(delay)
            attempt += 1
            rate_limit_streak = 0
            continue

        if response.status_code != RATE_LIMIT_STATUS:
            return response

        hint = _retry_after_seconds(response)
        if hint is not None:
            delay = float(hint)
        else:
            delay = initial_backoff * 2 ** (attempt + rate_limit_streak)
        if rate_limit_deadline is not None and rate_limited_for + delay > rate_limit_deadline:
            msg = f"Still rate limited after waiting {rate_limited_for:.1f}s: {url}"
            raise RateLimitedError(msg, waited=rate_limited_for)
        logger.warning("Rate limit detected, delaying next attempt for {:.2f}s", delay)
        sleep(delay)
        rate_limited_for += delay
        rate_limit_streak += 1


def parse_api_error(response: requests.Response, default_text: str) -> str:
    """Build a readable error message from a failed response.

    JSON bodies are included verbatim; other bodies as plain text, or
    ``default_text`` when the body is empty or unreadable.
    """
    error_msg = f"Error (Status: {response.status_code})"
    try:
        content_type = response.headers.get("content-type") or ""
        if "application/json" in content_type:
            error_data = response.json()
            error_msg += " - " + json.dumps(error_data, separators=(",", ":"))
        else:
            error_msg += f" - {response.text or default_text}"
    except ValueError:
        error_msg += f" - {default_text}"
    return error_msg
