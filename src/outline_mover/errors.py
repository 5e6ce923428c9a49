"""Error types raised by the Outline client and transport."""


class OutlineError(RuntimeError):
    """Base class for all outline-mover errors."""


class TransportError(OutlineError):
    """A request could not be completed, even after retries."""


class RequestTimeoutError(TransportError):
    """A single attempt exceeded its deadline."""


class NetworkError(TransportError):
    """Connection refused, DNS failure, reset, and similar."""


class RateLimitedError(TransportError):
    """The server kept answering 429 past the configured deadline."""

    def __init__(self, message: str, waited: float) -> None:
        super().__init__(message)
        self.waited = waited


class OutlineApiError(OutlineError):
    """Non-2xx response from the Outline API."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status
