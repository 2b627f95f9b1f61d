from fastapi import APIRouter, Depends, Query

from community_api.dependencies import get_community_service, unwrap
from community_api.schemas import Community, CommunityCreate, CommunitySearchResult, CommunityUpdate
from community_api.services.community_service import CommunityService

# Community endpoints never push user notifications; callers read the
# response status instead.
router = APIRouter(prefix="/api/v1/communities", tags=["communities"])


@router.get("", response_model=list[Community])
async def list_communities(service: CommunityService = Depends(get_community_service)):
    return unwrap(await service.get_all())


@router.get("/search", response_model=list[CommunitySearchResult])
async def search_communities(
    q: str = Query("", description="Free-text query over name, description and category."),
    service: CommunityService = Depends(get_community_service),
):
    return unwrap(await service.search(q))


@router.get("/by-name/{name}", response_model=Community)
async def get_community_by_name(name: str, service: CommunityService = Depends(get_community_service)):
    return unwrap(await service.get_by_name(name))


@router.get("/{community_id}", response_model=Community)
async def get_community(community_id: int, service: CommunityService = Depends(get_community_service)):
    return unwrap(await service.get_by_id(community_id))


@router.post("", status_code=201, response_model=Community)
async def create_community(data: CommunityCreate, service: CommunityService = Depends(get_community_service)):
    return unwrap(await service.create(data))


@router.patch("/{community_id}", response_model=Community)
async def update_community(
    community_id: int,
    data: CommunityUpdate,
    service: CommunityService = Depends(get_community_service),
):
    return unwrap(await service.update(community_id, data))


@router.delete("/{community_id}", status_code=204)
async def delete_community(community_id: int, service: CommunityService = Depends(get_community_service)):
    unwrap(await service.delete(community_id))
