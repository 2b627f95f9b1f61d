from fastapi import APIRouter, Depends

from community_api.dependencies import get_comment_service, get_notifier, unwrap
from community_api.notifications import Notifier, notify
from community_api.schemas import Comment, CommentCreate, CommentUpdate, VoteRequest
from community_api.services.comment_service import CommentService

router = APIRouter(prefix="/api/v1", tags=["comments"])


@router.get("/posts/{post_id}/comments", response_model=list[Comment])
async def list_post_comments(post_id: int, service: CommentService = Depends(get_comment_service)):
    return unwrap(await service.get_comments_by_post(post_id))


@router.get("/comments/{comment_id}", response_model=Comment)
async def get_comment(comment_id: int, service: CommentService = Depends(get_comment_service)):
    return unwrap(await service.get_comment_by_id(comment_id))


@router.post("/comments", status_code=201, response_model=Comment)
async def create_comment(
    data: CommentCreate,
    service: CommentService = Depends(get_comment_service),
    notifier: Notifier = Depends(get_notifier),
):
    result = await service.create_comment(data)
    notify(notifier, result)
    return unwrap(result)


@router.patch("/comments/{comment_id}", response_model=Comment)
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    service: CommentService = Depends(get_comment_service),
    notifier: Notifier = Depends(get_notifier),
):
    result = await service.update_comment(comment_id, data)
    notify(notifier, result)
    return unwrap(result)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: int,
    service: CommentService = Depends(get_comment_service),
    notifier: Notifier = Depends(get_notifier),
):
    result = await service.delete_comment(comment_id)
    notify(notifier, result)
    unwrap(result)


@router.post("/comments/{comment_id}/vote", response_model=Comment)
async def vote_comment(
    comment_id: int,
    data: VoteRequest,
    service: CommentService = Depends(get_comment_service),
    notifier: Notifier = Depends(get_notifier),
):
    result = await service.vote_comment(comment_id, data.vote_type)
    notify(notifier, result)
    return unwrap(result)
