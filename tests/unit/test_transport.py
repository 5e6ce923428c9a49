"""Tests for request_with_policy: timeouts, backoff, rate limits, error text."""

from unittest.mock import MagicMock

import pytest
import requests

from outline_mover.errors import NetworkError, RateLimitedError, RequestTimeoutError
from outline_mover.transport import api_headers, parse_api_error, request_with_policy
from tests.unit.fakes import make_response

URL = "https://wiki.example.com/api/documents.move"


def _session(*outcomes: object) -> MagicMock:
    """Session whose request() yields the given responses / raises the given errors."""
    session = MagicMock()
    session.request.side_effect = list(outcomes)
    return session


def test_returns_first_response_without_sleeping() -> None:
    ok = make_response(200, {"data": {"id": "x"}})
    session = _session(ok)
    sleeps: list[float] = []

    result = request_with_policy(session, URL, sleep=sleeps.append)

    assert result is ok
    assert sleeps == []


def test_sends_payload_headers_and_timeout() -> None:
    session = _session(make_response(200, {"data": None}))

    request_with_policy(
        session, URL, headers=api_headers("tok"), payload={"id": "A"}, timeout=2.5
    )

    args, kwargs = session.request.call_args
    assert args == ("POST", URL)
    assert kwargs["json"] == {"id": "A"}
    assert kwargs["timeout"] == 2.5
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["headers"]["Content-Type"] == "application/json"


def test_two_timeouts_then_success_backs_off_exponentially() -> None:
    ok = make_response(200, {"data": {}})
    session = _session(requests.Timeout(), requests.Timeout(), ok)
    sleeps: list[float] = []

    result = request_with_policy(
        session, URL, max_retries=3, initial_backoff=0.5, sleep=sleeps.append
    )

    assert result is ok
    assert sleeps == [0.5, 1.0]
    assert session.request.call_count == 3


def test_network_errors_exhaust_retries_and_raise_last_error() -> None:
    cause = requests.ConnectionError("connection refused")
    session = _session(requests.ConnectionError("reset"), requests.ConnectionError("reset"), cause)
    sleeps: list[float] = []

    with pytest.raises(NetworkError, match="connection refused") as exc_info:
        request_with_policy(session, URL, max_retries=2, initial_backoff=0.1, sleep=sleeps.append)

    assert exc_info.value.__cause__ is cause
    assert session.request.call_count == 3
    assert sleeps == pytest.approx([0.1, 0.2])


def test_timeout_on_last_attempt_raises_timeout_error() -> None:
    session = _session(requests.Timeout(), requests.Timeout())

    with pytest.raises(RequestTimeoutError, match="timed out"):
        request_with_policy(session, URL, max_retries=1, sleep=lambda _: None)


def test_zero_retries_means_a_single_attempt() -> None:
    session = _session(requests.ConnectionError("down"))
    sleeps: list[float] = []

    with pytest.raises(NetworkError):
        request_with_policy(session, URL, max_retries=0, sleep=sleeps.append)

    assert session.request.call_count == 1
    assert sleeps == []


def test_rate_limit_honours_retry_after_header() -> None:
    ok = make_response(200, {"data": {}})
    session = _session(make_response(429, headers={"Retry-After": "2"}), ok)
    sleeps: list[float] = []

    result = request_with_policy(session, URL, sleep=sleeps.append)

    assert result is ok
    assert sleeps == [2.0]


def test_rate_limit_does_not_consume_retry_budget() -> None:
    """With no retries left for failures, 429s are still retried."""
    limited = [make_response(429, headers={"Retry-After": "1"}) for _ in range(5)]
    ok = make_response(200, {"data": {}})
    session = _session(*limited, ok)
    sleeps: list[float] = []

    result = request_with_policy(session, URL, max_retries=0, sleep=sleeps.append)

    assert result is ok
    assert sleeps == [1.0] * 5


def test_rate_limit_then_failures_still_get_full_budget() -> None:
    ok = make_response(200, {"data": {}})
    session = _session(
        make_response(429, headers={"Retry-After": "1"}),
        requests.Timeout(),
        ok,
    )

    result = request_with_policy(session, URL, max_retries=1, sleep=lambda _: None)

    assert result is ok


def test_rate_limit_without_header_uses_current_backoff() -> None:
    """After one failed attempt, a bare 429 waits initial_backoff * 2**1."""
    ok = make_response(200, {"data": {}})
    session = _session(requests.ConnectionError("reset"), make_response(429), ok)
    sleeps: list[float] = []

    request_with_policy(session, URL, initial_backoff=0.5, sleep=sleeps.append)

    assert sleeps == [0.5, 1.0]


def test_rate_limit_with_http_date_header_falls_back_to_backoff() -> None:
    limited = make_response(429, headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"})
    session = _session(limited, make_response(200, {"data": {}}))
    sleeps: list[float] = []

    request_with_policy(session, URL, initial_backoff=0.25, sleep=sleeps.append)

    assert sleeps == [0.25]


def test_rate_limit_with_negative_retry_after_falls_back_to_backoff() -> None:
    limited = make_response(429, headers={"Retry-After": "-1"})
    ok = make_response(200, {"data": {}})
    session = _session(limited, ok)
    sleeps: list[float] = []

    result = request_with_policy(session, URL, initial_backoff=0.25, sleep=sleeps.append)

    assert result is ok
    assert sleeps == [0.25]


def test_rate_limit_with_zero_retry_after_retries_at_once() -> None:
    session = _session(make_response(429, headers={"Retry-After": "0"}), make_response(200))
    sleeps: list[float] = []

    request_with_policy(session, URL, sleep=sleeps.append)

    assert sleeps == [0.0]


def test_repeated_bare_rate_limits_grow_the_delay() -> None:
    limited = [make_response(429) for _ in range(3)]
    session = _session(*limited, make_response(200, {"data": {}}))
    sleeps: list[float] = []

    request_with_policy(session, URL, max_retries=0, initial_backoff=0.5, sleep=sleeps.append)

    assert sleeps == [0.5, 1.0, 2.0]


def test_failed_attempt_resets_rate_limit_growth() -> None:
    session = _session(
        make_response(429),
        make_response(429),
        requests.ConnectionError("reset"),
        make_response(429),
        make_response(200, {"data": {}}),
    )
    sleeps: list[float] = []

    request_with_policy(session, URL, initial_backoff=0.5, sleep=sleeps.append)

    assert sleeps == [0.5, 1.0, 0.5, 1.0]


def test_rate_limit_deadline_stops_waiting() -> None:
    session = _session(*[make_response(429, headers={"Retry-After": "3"}) for _ in range(4)])
    sleeps: list[float] = []

    with pytest.raises(RateLimitedError) as exc_info:
        request_with_policy(session, URL, sleep=sleeps.append, rate_limit_deadline=7.0)

    assert sleeps == [3.0, 3.0]
    assert exc_info.value.waited == 6.0


def test_error_responses_are_returned_not_retried() -> None:
    failed = make_response(500, {"ok": False})
    session = _session(failed)

    result = request_with_policy(session, URL, sleep=lambda _: None)

    assert result is failed
    assert session.request.call_count == 1


def test_parse_api_error_serializes_json_body() -> None:
    response = make_response(400, {"ok": False, "error": "validation_error"})

    msg = parse_api_error(response, "Moving document failed")

    assert msg == 'Error (Status: 400) - {"ok":false,"error":"validation_error"}'


def test_parse_api_error_uses_plain_text_body() -> None:
    response = make_response(502, text="Bad Gateway")

    assert parse_api_error(response, "default") == "Error (Status: 502) - Bad Gateway"


def test_parse_api_error_falls_back_to_default_for_empty_body() -> None:
    response = make_response(404, text="")

    assert parse_api_error(response, "Not there") == "Error (Status: 404) - Not there"


def test_parse_api_error_falls_back_to_default_for_broken_json() -> None:
    response = make_response(500, text="{not json")
    response.headers["Content-Type"] = "application/json"

    assert parse_api_error(response, "Server broke") == "Error (Status: 500) - Server broke"
