"""Exception types raised across Voice of Kalki components."""

from kalki_news.data import FetchErrorKind


class KalkiError(Exception):
    """Base class for all package errors."""


class QuotaExhaustedError(KalkiError):
    """The generative service kept rate-limiting after every retry.

    This is the only fetch failure that reaches the caller; all others
    degrade to an empty feed.
    """

    kind = FetchErrorKind.QUOTA

    def __init__(self, message: str = "QUOTA_EXHAUSTED") -> None:
        super().__init__(message)


class RemoteStoreError(KalkiError):
    """A request to the hosted database failed.

    Args:
        message: Error text returned by the store (or the transport error).
        status_code: HTTP status, or None when no response was received.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PublishError(KalkiError):
    """A social platform rejected a publish request."""
