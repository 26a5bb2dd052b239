"""Error taxonomy for decoding and HTTP failures."""

from dataclasses import dataclass

GENERIC_ERROR_MESSAGE = "Server error"


@dataclass(frozen=True)
class DecodeError:
    """A persisted blob or server payload could not be decoded."""

    detail: str


@dataclass(frozen=True)
class BadStatus:
    """Server answered with a non-success status code."""

    status_code: int
    errors: tuple[str, ...]


@dataclass(frozen=True)
class BadBody:
    """Server answered successfully but the body did not decode."""

    detail: str


@dataclass(frozen=True)
class NetworkError:
    """The request never reached the server or the connection dropped."""

    detail: str


@dataclass(frozen=True)
class Timeout:
    """The request did not complete in time."""


HttpError = BadStatus | BadBody | NetworkError | Timeout


def error_messages(error: HttpError) -> list[str]:
    """Return user-facing messages for a request failure."""
    if isinstance(error, BadStatus):
        return list(error.errors) or [GENERIC_ERROR_MESSAGE]
    if isinstance(error, Timeout):
        return ["The request timed out. Please try again."]
    if isinstance(error, NetworkError):
        return ["Unable to reach the server. Check your connection."]
    return [GENERIC_ERROR_MESSAGE]
