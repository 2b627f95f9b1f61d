"""Base class for the record-platform services."""
import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError as PydanticValidationError

from community_api.exceptions import CommunityApiError, ErrorKind
from community_api.schemas import ServiceResult

logger = logging.getLogger(__name__)


class BaseService:
    """
    Runs service operations and turns every failure into a
    ``ServiceResult`` carrying the operation's sentinel.

    Nothing raised by a store, the record client, or input validation
    escapes a public service method.
    """

    async def _run(
        self,
        operation: str,
        call: Callable[[], Awaitable[Any]],
        sentinel: Any,
        success_message: str | None = None,
        failure_message: str | None = None,
    ) -> ServiceResult:
        """
        Await *call* and wrap its outcome.

        *failure_message* replaces the raw detail for client-unavailable and
        transport failures, whose detail is only useful in the logs.
        Platform rejections keep the platform's own messages.
        """
        try:
            value = await call()
        except CommunityApiError as exc:
            logger.error("%s failed (%s): %s", operation, exc.kind.value, "; ".join(exc.messages))
            messages = exc.messages
            if exc.kind is ErrorKind.CLIENT_UNAVAILABLE and failure_message:
                messages = [failure_message]
            return ServiceResult.failed(sentinel, exc.kind, messages)
        except PydanticValidationError as exc:
            logger.error("%s rejected invalid input: %s", operation, exc)
            messages = [err["msg"] for err in exc.errors()]
            return ServiceResult.failed(sentinel, ErrorKind.VALIDATION, messages)
        except Exception as exc:
            logger.exception("%s raised", operation)
            messages = [failure_message or str(exc) or type(exc).__name__]
            return ServiceResult.failed(sentinel, ErrorKind.TRANSPORT, messages)
        return ServiceResult.succeeded(value, success_message)


def coerce_input(model, data):
    """Accept either an instance of *model* or a plain mapping to validate."""
    if isinstance(data, model):
        return data
    return model.model_validate(data)
