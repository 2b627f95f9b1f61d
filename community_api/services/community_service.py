"""
Community service - CRUD and free-text search over the ``community_c`` table.

Search matching happens on the platform (OR-combined ``Contains`` over
name, description and category).  The snippet shown next to each hit is
computed locally and independently of which field the platform matched.
"""
from typing import Any, Mapping

from community_api.config import settings
from community_api.exceptions import RecordNotFound
from community_api.record_client import (
    RecordClient,
    RecordTable,
    contains_any,
    equal_to,
    field_list,
    paging,
    parse_record_id,
)
from community_api.schemas import (
    Community,
    CommunityCreate,
    CommunitySearchResult,
    CommunityUpdate,
    ServiceResult,
)
from community_api.services.base import BaseService, coerce_input


COMMUNITY_TABLE = "community_c"

COMMUNITY_FIELDS = field_list(
    "Name",
    "name_c",
    "description_c",
    "member_count_c",
    "color_c",
    "category_c",
    "post_count_c",
)

SEARCH_COLUMNS = ("name_c", "description_c", "category_c")

# Domain attribute -> platform column(s) for sparse updates.
_UPDATE_COLUMNS: dict[str, tuple[str, ...]] = {
    "name": ("Name", "name_c"),
    "description": ("description_c",),
    "member_count": ("member_count_c",),
    "color": ("color_c",),
    "category": ("category_c",),
    "post_count": ("post_count_c",),
}


def build_snippet(
    community: Community,
    term: str,
    context: int = settings.SNIPPET_CONTEXT_CHARS,
) -> str:
    """
    Return the match context for *term* (already lower-cased).

    Prefers up to *context* characters either side of the first occurrence
    of *term* in the description, clipped at the string boundaries.  Falls
    back to ``"Category: <category>"`` when only the category matches, and
    to an empty string otherwise.
    """
    description = community.description or ""
    index = description.lower().find(term)
    if index != -1:
        start = max(0, index - context)
        end = min(len(description), index + len(term) + context)
        return description[start:end].strip()
    if community.category and term in community.category.lower():
        return f"Category: {community.category}".strip()
    return ""


class CommunityService(BaseService):
    def __init__(self, client: RecordClient | None) -> None:
        self._table = RecordTable(client, COMMUNITY_TABLE)

    async def search(self, query: str | None) -> ServiceResult[list[CommunitySearchResult]]:
        """
        Communities whose name, description or category contains *query*.

        A blank query returns ``[]`` without touching the platform.
        """
        term = str(query or "").lower().strip()
        if not term:
            return ServiceResult.succeeded([])

        async def _search():
            records = await self._table.fetch(
                {"fields": COMMUNITY_FIELDS, "whereGroups": contains_any(SEARCH_COLUMNS, term)}
            )
            results = []
            for record in records:
                community = Community.from_record(record)
                results.append(
                    CommunitySearchResult(community=community, snippet=build_snippet(community, term))
                )
            return results

        return await self._run(f"search_communities({query!r})", _search, [])

    async def get_all(self) -> ServiceResult[list[Community]]:
        async def _get_all():
            records = await self._table.fetch({"fields": COMMUNITY_FIELDS})
            return [Community.from_record(r) for r in records]

        return await self._run("get_all_communities", _get_all, [])

    async def get_by_id(self, community_id: int | str) -> ServiceResult[Community | None]:
        async def _get():
            record = await self._table.get(parse_record_id(community_id), {"fields": COMMUNITY_FIELDS})
            if not record:
                raise RecordNotFound(f"Community {community_id} not found")
            return Community.from_record(record)

        return await self._run(f"get_community({community_id})", _get, None)

    async def get_by_name(self, name: str) -> ServiceResult[Community | None]:
        """Exact-name lookup; at most one record is requested."""

        async def _get():
            records = await self._table.fetch(
                {
                    "fields": COMMUNITY_FIELDS,
                    "where": equal_to("name_c", name),
                    "pagingInfo": paging(limit=1, offset=0),
                }
            )
            if not records:
                raise RecordNotFound(f"Community {name!r} not found")
            return Community.from_record(records[0])

        return await self._run(f"get_community_by_name({name!r})", _get, None)

    async def create(self, data: CommunityCreate | Mapping[str, Any]) -> ServiceResult[Community | None]:
        async def _create():
            payload = coerce_input(CommunityCreate, data)
            created = await self._table.create(
                [
                    {
                        "Name": payload.name,
                        "name_c": payload.name,
                        "description_c": payload.description,
                        "member_count_c": payload.member_count or 1,
                        "color_c": payload.color or settings.DEFAULT_COMMUNITY_COLOR,
                        "category_c": payload.category or "general",
                        "post_count_c": 0,
                    }
                ]
            )
            return Community.from_record(created[0])

        return await self._run(
            "create_community",
            _create,
            None,
            success_message="Community created successfully",
            failure_message="Failed to create community",
        )

    async def update(
        self, community_id: int | str, data: CommunityUpdate | Mapping[str, Any]
    ) -> ServiceResult[Community | None]:
        """
        Send only the fields explicitly present in *data*; everything else
        is left untouched on the platform.
        """

        async def _update():
            record: dict[str, Any] = {"Id": parse_record_id(community_id)}
            for name, value in coerce_input(CommunityUpdate, data).model_dump(exclude_unset=True).items():
                for column in _UPDATE_COLUMNS[name]:
                    record[column] = value
            updated = await self._table.update([record])
            return Community.from_record(updated[0])

        return await self._run(
            f"update_community({community_id})",
            _update,
            None,
            success_message="Community updated successfully",
            failure_message="Failed to update community",
        )

    async def delete(self, community_id: int | str) -> ServiceResult[bool]:
        return await self._run(
            f"delete_community({community_id})",
            lambda: self._table.delete([parse_record_id(community_id)]),
            False,
            success_message="Community deleted successfully",
            failure_message="Failed to delete community",
        )
