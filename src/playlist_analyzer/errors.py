from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    MISSING_CONFIG = "missing_config"
    HTTP = "http"
    MALFORMED_RESPONSE = "malformed_response"
    NETWORK = "network"


class ApiError(Exception):
    """Failure raised anywhere between the token endpoint and the merged result.

    The ``kind`` tag says what went wrong; ``status`` is only set for HTTP
    failures and carries the upstream status code.
    """

    def __init__(self, kind: ErrorKind, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status

    @classmethod
    def http(cls, status: int, message: str) -> ApiError:
        return cls(ErrorKind.HTTP, message, status=status)

    @classmethod
    def missing_config(cls, message: str) -> ApiError:
        return cls(ErrorKind.MISSING_CONFIG, message)

    @classmethod
    def malformed(cls, message: str) -> ApiError:
        return cls(ErrorKind.MALFORMED_RESPONSE, message)

    @classmethod
    def network(cls, message: str) -> ApiError:
        return cls(ErrorKind.NETWORK, message)

    def __repr__(self) -> str:
        return f"ApiError(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"


_HTTP_MESSAGES = {
    401: "Spotify authorization failed. Check your client credentials.",
    403: "Spotify authorization failed. Check your client credentials.",
    404: "Playlist not found or not public.",
    429: "Rate limited by Spotify. Try again shortly.",
}

UNKNOWN_ERROR_MESSAGE = "Unknown error"


def user_message_from_error(err: object) -> str:
    """Map any failure to the message shown to the person who asked for the analysis."""
    if isinstance(err, ApiError) and err.kind is ErrorKind.HTTP:
        return _HTTP_MESSAGES.get(err.status, f"Spotify error: {err.status}")

    if isinstance(err, BaseException):
        return str(err) or UNKNOWN_ERROR_MESSAGE

    return UNKNOWN_ERROR_MESSAGE
