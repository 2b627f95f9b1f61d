"""
User service - CRUD and search over the ``user_c`` table.

Writes accept either the platform column names (``email_c``) or the bare
domain names (``email``) and always send platform names.
"""
from typing import Any, Mapping

from community_api.config import settings
from community_api.exceptions import RecordNotFound
from community_api.record_client import (
    RecordClient,
    RecordTable,
    contains_any,
    field_list,
    order_by,
    paging,
    parse_record_id,
)
from community_api.schemas import ServiceResult, User, UserCreate, UserUpdate
from community_api.services.base import BaseService, coerce_input

USER_TABLE = "user_c"

USER_FIELDS = field_list(
    "Id",
    "Name",
    "email_c",
    "bio_c",
    "avatar_c",
    "karma_c",
    "created_at_c",
)

# Domain attribute -> platform column for the writable fields.
_WRITE_COLUMNS: dict[str, str] = {
    "name": "Name",
    "email": "email_c",
    "bio": "bio_c",
    "avatar": "avatar_c",
}


class UserService(BaseService):
    def __init__(self, client: RecordClient | None) -> None:
        self._table = RecordTable(client, USER_TABLE)

    async def get_all(self) -> ServiceResult[list[User]]:
        """Newest users first, one page of ``USER_LIST_LIMIT``."""

        async def _get_all():
            records = await self._table.fetch(
                {
                    "fields": USER_FIELDS,
                    "orderBy": order_by("created_at_c"),
                    "pagingInfo": paging(settings.USER_LIST_LIMIT),
                }
            )
            return [User.from_record(r) for r in records]

        return await self._run("get_all_users", _get_all, [])

    async def get_by_id(self, user_id: int | str) -> ServiceResult[User | None]:
        async def _get():
            record = await self._table.get(parse_record_id(user_id), {"fields": USER_FIELDS})
            if not record:
                raise RecordNotFound(f"User {user_id} not found")
            return User.from_record(record)

        return await self._run(f"get_user({user_id})", _get, None)

    async def create(self, data: UserCreate | Mapping[str, Any]) -> ServiceResult[User | None]:
        async def _create():
            payload = coerce_input(UserCreate, data)
            created = await self._table.create(
                [
                    {
                        "Name": payload.name,
                        "email_c": payload.email,
                        "bio_c": payload.bio or "",
                        "avatar_c": payload.avatar or "",
                    }
                ]
            )
            return User.from_record(created[0])

        return await self._run(
            "create_user",
            _create,
            None,
            success_message="User created successfully",
            failure_message="Failed to create user",
        )

    async def update(
        self, user_id: int | str, data: UserUpdate | Mapping[str, Any]
    ) -> ServiceResult[User | None]:
        async def _update():
            record: dict[str, Any] = {"Id": parse_record_id(user_id)}
            for name, value in coerce_input(UserUpdate, data).model_dump(exclude_unset=True).items():
                record[_WRITE_COLUMNS[name]] = value
            updated = await self._table.update([record])
            return User.from_record(updated[0])

        return await self._run(
            f"update_user({user_id})",
            _update,
            None,
            success_message="User updated successfully",
            failure_message="Failed to update user",
        )

    async def delete(self, user_id: int | str) -> ServiceResult[bool]:
        return await self._run(
            f"delete_user({user_id})",
            lambda: self._table.delete([parse_record_id(user_id)]),
            False,
            success_message="User deleted successfully",
            failure_message="Failed to delete user",
        )

    async def search(self, query: str) -> ServiceResult[list[User]]:
        """Users whose name or email contains *query*, highest karma first."""

        async def _search():
            records = await self._table.fetch(
                {
                    "fields": USER_FIELDS,
                    "whereGroups": contains_any(("Name", "email_c"), query, sub_operator="OR"),
                    "orderBy": order_by("karma_c"),
                    "pagingInfo": paging(settings.USER_SEARCH_LIMIT),
                }
            )
            return [User.from_record(r) for r in records]

        return await self._run(f"search_users({query!r})", _search, [])
