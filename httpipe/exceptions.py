"""Public exceptions for httpipe."""


class HttpipeError(Exception):
    """Base exception for all httpipe errors.

    When raised from inside a pipeline, ``recipe_index`` holds the position
    of the recipe that failed.
    """

    recipe_index: int | None = None


class TransportError(HttpipeError):
    """Request could not be completed (connection, timeout, body read)."""

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class HTTPStatusError(HttpipeError):
    """Response status outside the 2xx range."""

    def __init__(self, message: str, status_code: int, reason_phrase: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason_phrase = reason_phrase


class DecodeError(HttpipeError):
    """Response body is not JSON or does not fit the receptacle."""


class ContractError(HttpipeError):
    """Invalid arguments supplied by the caller (method, url, receptacle, params)."""
