"""
Comment storage backends.

``CommentStore`` is the capability interface ``CommentService`` depends on.
Two interchangeable implementations exist:

- ``RemoteCommentStore`` - the ``comment_c`` table on the record platform.
- ``InMemoryCommentStore`` - an ordered in-process list with a fixed
  artificial latency, used for local mode and demos.

Neither backend offers atomic read-modify-write: ``vote`` reads the
comment, increments one counter and writes it back, so two concurrent
votes on the same comment can lose an update.  The in-memory list is
mutated without any locking.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from community_api.config import settings
from community_api.exceptions import RecordNotFound, RemoteRejection, ValidationError
from community_api.record_client import (
    RecordClient,
    RecordTable,
    equal_to,
    field_list,
    order_by,
)
from community_api.schemas import Comment, CommentCreate, CommentUpdate

logger = logging.getLogger(__name__)

COMMENT_TABLE = "comment_c"

COMMENT_FIELDS = field_list(
    "Id",
    "content_c",
    "post_c",
    "author_c",
    "authorName_c",
    "upvotes_c",
    "downvotes_c",
    "CreatedOn",
)

# Domain attribute -> platform column for sparse updates.
_UPDATE_COLUMNS: dict[str, str] = {
    "content": "content_c",
    "upvotes": "upvotes_c",
    "downvotes": "downvotes_c",
}

UPVOTE = "upvote"
DOWNVOTE = "downvote"


def vote_updates(comment: Comment, vote_type: str) -> CommentUpdate:
    """
    Return the update for one vote: exactly one counter incremented by 1.

    Unknown vote types yield an empty update.
    """
    if vote_type == UPVOTE:
        return CommentUpdate(upvotes=comment.upvotes + 1)
    if vote_type == DOWNVOTE:
        return CommentUpdate(downvotes=comment.downvotes + 1)
    return CommentUpdate()


class CommentStore(ABC):
    """Backend-neutral comment operations."""

    @abstractmethod
    async def list_by_post(self, post_id: int) -> list[Comment]:
        """Comments on *post_id*, newest first."""

    @abstractmethod
    async def get_by_id(self, comment_id: int) -> Comment | None:
        """The comment, or None when it does not exist."""

    @abstractmethod
    async def create(self, data: CommentCreate) -> Comment:
        ...

    @abstractmethod
    async def update(self, comment_id: int, updates: CommentUpdate) -> Comment:
        ...

    @abstractmethod
    async def delete(self, comment_id: int) -> bool:
        ...

    @abstractmethod
    async def vote(self, comment_id: int, vote_type: str) -> Comment:
        ...


# ---------------------------------------------------------------------------
# Remote backend
# ---------------------------------------------------------------------------

class RemoteCommentStore(CommentStore):
    def __init__(self, client: RecordClient | None) -> None:
        self._table = RecordTable(client, COMMENT_TABLE)

    async def list_by_post(self, post_id: int) -> list[Comment]:
        records = await self._table.fetch(
            {
                "fields": COMMENT_FIELDS,
                "where": equal_to("post_c", post_id),
                "orderBy": order_by("CreatedOn"),
            }
        )
        return [Comment.from_record(r) for r in records]

    async def get_by_id(self, comment_id: int) -> Comment | None:
        record = await self._table.get(comment_id, {"fields": COMMENT_FIELDS})
        return Comment.from_record(record) if record else None

    async def create(self, data: CommentCreate) -> Comment:
        missing = [
            name
            for name in ("content", "post_id", "author_id", "author_name")
            if getattr(data, name) in (None, "")
        ]
        if missing:
            raise ValidationError(f"Missing comment fields: {', '.join(missing)}")

        created = await self._table.create(
            [
                {
                    "content_c": data.content,
                    "post_c": data.post_id,
                    "author_c": data.author_id,
                    "authorName_c": data.author_name,
                    "upvotes_c": 0,
                    "downvotes_c": 0,
                }
            ]
        )
        return Comment.from_record(created[0])

    async def update(self, comment_id: int, updates: CommentUpdate) -> Comment:
        record: dict[str, Any] = {"Id": comment_id}
        for name, value in updates.model_dump(exclude_unset=True).items():
            record[_UPDATE_COLUMNS[name]] = value
        updated = await self._table.update([record])
        return Comment.from_record(updated[0])

    async def delete(self, comment_id: int) -> bool:
        return await self._table.delete([comment_id])

    async def vote(self, comment_id: int, vote_type: str) -> Comment:
        try:
            comment = await self.get_by_id(comment_id)
        except RemoteRejection as exc:
            logger.warning("Could not read comment %s before voting: %s", comment_id, exc)
            comment = None
        if comment is None:
            raise RecordNotFound("Comment not found")
        return await self.update(comment_id, vote_updates(comment, vote_type))


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------

class InMemoryCommentStore(CommentStore):
    """
    Comments held in an ordered list.

    Every call first sleeps for *latency* seconds to mimic a round trip.
    Reads hand out copies so callers can never mutate the stored comments.
    """

    def __init__(
        self,
        comments: Iterable[Comment | Mapping[str, Any]] = (),
        latency: float | None = None,
    ) -> None:
        self._comments: list[Comment] = [
            c if isinstance(c, Comment) else Comment.model_validate(c) for c in comments
        ]
        self._latency = settings.MEMORY_LATENCY_SECONDS if latency is None else latency

    async def _delay(self) -> None:
        await asyncio.sleep(self._latency)

    def _find(self, comment_id: int) -> Comment:
        for comment in self._comments:
            if comment.record_id == comment_id:
                return comment
        raise RecordNotFound("Comment not found")

    async def list_all(self) -> list[Comment]:
        await self._delay()
        return [c.model_copy() for c in self._comments]

    async def list_by_post(self, post_id: int) -> list[Comment]:
        await self._delay()
        matches = [c for c in self._comments if c.post_id == post_id]
        # Same order as the remote backend; ties keep insertion order.
        matches.sort(key=lambda c: c.created_on or "", reverse=True)
        return [c.model_copy() for c in matches]

    async def get_by_id(self, comment_id: int) -> Comment | None:
        await self._delay()
        try:
            return self._find(comment_id).model_copy()
        except RecordNotFound:
            return None

    async def create(self, data: CommentCreate) -> Comment:
        await self._delay()
        if not data.content or not data.content.strip():
            raise ValidationError("Comment content is required")

        comment = Comment(
            record_id=max((c.record_id for c in self._comments), default=0) + 1,
            post_id=data.post_id,
            parent_id=data.parent_id,
            author_id=data.author_id,
            author_name=data.author_name or "Anonymous",
            content=data.content.strip(),
            created_on=datetime.now(timezone.utc).isoformat(),
            score=0,
        )
        self._comments.append(comment)
        return comment.model_copy()

    async def update(self, comment_id: int, updates: CommentUpdate) -> Comment:
        await self._delay()
        comment = self._find(comment_id)
        for name, value in updates.model_dump(exclude_unset=True).items():
            # content and the vote counters are non-nullable.
            if value is not None:
                setattr(comment, name, value)
        return comment.model_copy()

    async def delete(self, comment_id: int) -> bool:
        await self._delay()
        self._comments.remove(self._find(comment_id))
        # Direct replies go with their parent; one pass only.
        self._comments = [c for c in self._comments if c.parent_id != comment_id]
        return True

    async def update_score(self, comment_id: int, new_score: int) -> Comment:
        await self._delay()
        comment = self._find(comment_id)
        comment.score = new_score
        return comment.model_copy()

    async def vote(self, comment_id: int, vote_type: str) -> Comment:
        await self._delay()
        comment = self._find(comment_id)
        for name, value in vote_updates(comment, vote_type).model_dump(exclude_unset=True).items():
            setattr(comment, name, value)
        if vote_type == UPVOTE:
            comment.score += 1
        elif vote_type == DOWNVOTE:
            comment.score -= 1
        return comment.model_copy()


# ---------------------------------------------------------------------------
# Backend selection
# ---------------------------------------------------------------------------

COMMENT_BACKENDS = ("remote", "memory")


def build_comment_store(client: RecordClient | None, backend: str | None = None) -> CommentStore:
    """
    Return the comment backend named by *backend* (defaults to
    ``settings.COMMENT_BACKEND``).

    Raises:
        ValueError: unknown backend name
    """
    backend = backend or settings.COMMENT_BACKEND
    if backend == "remote":
        return RemoteCommentStore(client)
    if backend == "memory":
        return InMemoryCommentStore()
    raise ValueError(f"Unsupported comment backend: {backend!r} (expected one of {COMMENT_BACKENDS})")
