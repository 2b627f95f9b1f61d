"""
Comment service - CRUD and voting for comments attached to posts.

The service is backend-neutral: it delegates to a ``CommentStore``
(record platform or in-memory, see ``comment_store``) and only owns input
coercion and the conversion of failures into ``ServiceResult`` sentinels.
"""
from typing import Any, Mapping

from community_api.exceptions import RecordNotFound
from community_api.record_client import parse_record_id
from community_api.schemas import Comment, CommentCreate, CommentUpdate, ServiceResult
from community_api.services.base import BaseService, coerce_input
from community_api.services.comment_store import CommentStore


class CommentService(BaseService):
    def __init__(self, store: CommentStore) -> None:
        self.store = store

    async def get_comments_by_post(self, post_id: int | str) -> ServiceResult[list[Comment]]:
        """Comments on *post_id*, newest first; ``[]`` on any failure."""
        return await self._run(
            f"get_comments_by_post({post_id})",
            lambda: self.store.list_by_post(parse_record_id(post_id)),
            [],
        )

    async def get_comment_by_id(self, comment_id: int | str) -> ServiceResult[Comment | None]:
        async def _get():
            comment = await self.store.get_by_id(parse_record_id(comment_id))
            if comment is None:
                raise RecordNotFound(f"Comment {comment_id} not found")
            return comment

        return await self._run(f"get_comment_by_id({comment_id})", _get, None)

    async def create_comment(
        self, data: CommentCreate | Mapping[str, Any]
    ) -> ServiceResult[Comment | None]:
        """
        Create a comment with both vote counters at zero.

        Every per-record failure message reported by the platform ends up in
        ``result.messages``.
        """
        return await self._run(
            "create_comment",
            lambda: self.store.create(coerce_input(CommentCreate, data)),
            None,
            success_message="Comment added successfully",
            failure_message="Failed to create comment",
        )

    async def update_comment(
        self, comment_id: int | str, updates: CommentUpdate | Mapping[str, Any]
    ) -> ServiceResult[Comment | None]:
        return await self._run(
            f"update_comment({comment_id})",
            lambda: self.store.update(parse_record_id(comment_id), coerce_input(CommentUpdate, updates)),
            None,
            failure_message="Failed to update comment",
        )

    async def delete_comment(self, comment_id: int | str) -> ServiceResult[bool]:
        return await self._run(
            f"delete_comment({comment_id})",
            lambda: self.store.delete(parse_record_id(comment_id)),
            False,
            success_message="Comment deleted successfully",
            failure_message="Failed to delete comment",
        )

    async def vote_comment(self, comment_id: int | str, vote_type: str) -> ServiceResult[Comment | None]:
        """
        Add one ``"upvote"`` or ``"downvote"`` to the comment.

        Any other *vote_type* still issues an update, with no counter
        changed.  Read-then-write, not atomic.
        """
        return await self._run(
            f"vote_comment({comment_id}, {vote_type!r})",
            lambda: self.store.vote(parse_record_id(comment_id), vote_type),
            None,
            failure_message="Failed to vote on comment",
        )
