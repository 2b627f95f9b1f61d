from fastapi import HTTPException, Request

from community_api.exceptions import ErrorKind
from community_api.notifications import Notifier
from community_api.record_client import RecordClient
from community_api.schemas import ServiceResult
from community_api.services.comment_service import CommentService
from community_api.services.community_service import CommunityService
from community_api.services.user_service import UserService

# Failed ServiceResult -> HTTP status for the REST facade.
ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 422,
    ErrorKind.CLIENT_UNAVAILABLE: 503,
    ErrorKind.REMOTE_REJECTION: 502,
    ErrorKind.TRANSPORT: 502,
}


def get_record_client(request: Request) -> RecordClient | None:
    """
    The record client installed by ``create_app``.

    ``None`` is a legitimate value: every service then reports
    ``client_unavailable`` instead of raising.
    """
    return request.app.state.record_client


def get_comment_service(request: Request) -> CommentService:
    # The store lives on app.state so the in-memory backend keeps its
    # comments across requests.
    return CommentService(request.app.state.comment_store)


def get_community_service(request: Request) -> CommunityService:
    return CommunityService(get_record_client(request))


def get_user_service(request: Request) -> UserService:
    return UserService(get_record_client(request))


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def unwrap(result: ServiceResult):
    """Return ``result.value`` or raise the matching ``HTTPException``."""
    if result.ok:
        return result.value
    raise HTTPException(
        status_code=ERROR_STATUS.get(result.error, 502),
        detail="; ".join(result.messages) or result.error.value,
    )
