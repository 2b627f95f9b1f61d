"""
User-facing notifications (the "toast" channel).

Services never notify on their own; they return a ``ServiceResult`` and
the caller passes it to ``notify`` when the outcome should be shown to the
user.  Notification is best effort: a notifier that raises is logged and
ignored.
"""
import logging
from typing import Protocol

from community_api.schemas import ServiceResult

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LogNotifier:
    """Writes notifications to the ``community_api.notifications`` logger."""

    def success(self, message: str) -> None:
        logger.info("notify success: %s", message)

    def error(self, message: str) -> None:
        logger.warning("notify error: %s", message)


class CollectingNotifier:
    """Keeps ``(level, message)`` pairs until a UI layer drains them."""

    def __init__(self) -> None:
        self.items: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.items.append(("success", message))

    def error(self, message: str) -> None:
        self.items.append(("error", message))

    def drain(self) -> list[tuple[str, str]]:
        items, self.items = self.items, []
        return items


def notify(notifier: Notifier, result: ServiceResult, fallback: str = "Something went wrong") -> None:
    """
    Surface *result* through *notifier*.

    Success is announced only when the result carries a success message;
    a failure produces one error per message (one per failed record for
    batch rejections).
    """
    try:
        if result.ok:
            if result.success_message:
                notifier.success(result.success_message)
            return
        for message in result.messages or [fallback]:
            notifier.error(message)
    except Exception:
        logger.exception("Notifier %r failed", notifier)
