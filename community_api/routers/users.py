from fastapi import APIRouter, Depends, Query

from community_api.dependencies import get_notifier, get_user_service, unwrap
from community_api.notifications import Notifier, notify
from community_api.schemas import User, UserCreate, UserUpdate
from community_api.services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("", response_model=list[User])
async def list_users(service: UserService = Depends(get_user_service)):
    return unwrap(await service.get_all())


@router.get("/search", response_model=list[User])
async def search_users(q: str = Query(..., min_length=1), service: UserService = Depends(get_user_service)):
    return unwrap(await service.search(q))


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    return unwrap(await service.get_by_id(user_id))


@router.post("", status_code=201, response_model=User)
async def create_user(
    data: UserCreate,
    service: UserService = Depends(get_user_service),
    notifier: Notifier = Depends(get_notifier),
):
    result = await service.create(data)
    notify(notifier, result)
    return unwrap(result)


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: int,
    data: UserUpdate,
    service: UserService = Depends(get_user_service),
    notifier: Notifier = Depends(get_notifier),
):
    result = await service.update(user_id, data)
    notify(notifier, result)
    return unwrap(result)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
    notifier: Notifier = Depends(get_notifier),
):
    result = await service.delete(user_id)
    notify(notifier, result)
    unwrap(result)
