"""
Exceptions raised inside the data-access layer.

Stores and ``RecordTable`` raise these; service methods catch them at their
boundary and turn them into a failed ``ServiceResult``.
"""
from enum import Enum


class ErrorKind(str, Enum):
    CLIENT_UNAVAILABLE = "client_unavailable"
    REMOTE_REJECTION = "remote_rejection"
    TRANSPORT = "transport"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"


class CommunityApiError(Exception):
    """Base class for errors raised by the data-access layer."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, messages: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.messages = messages if messages is not None else [message]


class RecordClientUnavailable(CommunityApiError):
    """The record client was never initialised."""

    kind = ErrorKind.CLIENT_UNAVAILABLE

    def __init__(self, message: str = "Record client not initialized") -> None:
        super().__init__(message)


class RemoteRejection(CommunityApiError):
    """
    The call completed but the platform reported ``success=false``, either
    for the whole response or for one or more records in a batch.
    """

    kind = ErrorKind.REMOTE_REJECTION


class RecordNotFound(CommunityApiError):
    kind = ErrorKind.NOT_FOUND


class ValidationError(CommunityApiError):
    kind = ErrorKind.VALIDATION
