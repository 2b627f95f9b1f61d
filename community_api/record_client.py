"""
Record client contract and table-level wrapper.

The record client belongs to the external storage platform and is handed
to each service by the embedding application.  This module only describes
the calls the services rely on, builds the query parameters the platform
understands, and validates the ``success`` flags on every response.

Response shape
--------------
Every response is a mapping with a ``success`` flag and an optional
``message``.  Reads carry the record(s) under ``data``; batch mutations
carry a ``results`` list whose entries each have their own ``success``,
``message`` and ``data``.
"""
import logging
from typing import Any, Iterable, Mapping, Protocol

from community_api.exceptions import RecordClientUnavailable, RemoteRejection, ValidationError
from community_api.middleware import increment_record_calls

logger = logging.getLogger(__name__)

Record = dict[str, Any]
Response = Mapping[str, Any]


class RecordClient(Protocol):
    """Async handle onto the platform's named record tables."""

    async def fetch_records(self, table: str, params: dict) -> Response: ...

    async def get_record_by_id(self, table: str, record_id: int, params: dict) -> Response: ...

    async def create_record(self, table: str, params: dict) -> Response: ...

    async def update_record(self, table: str, params: dict) -> Response: ...

    async def delete_record(self, table: str, params: dict) -> Response: ...


# ---------------------------------------------------------------------------
# Parameter builders
# ---------------------------------------------------------------------------

def parse_record_id(value: Any) -> int:
    """Return *value* as a platform record id, accepting numeric strings."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid record id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"Invalid record id: {value!r}")


def field_list(*names: str) -> list[dict]:
    return [{"field": {"Name": name}} for name in names]


def equal_to(field: str, value: Any) -> list[dict]:
    return [{"FieldName": field, "Operator": "EqualTo", "Values": [value]}]


def contains_any(fields: Iterable[str], term: str, sub_operator: str = "") -> list[dict]:
    """OR-combine one ``Contains`` condition per field into a single where group."""
    return [
        {
            "operator": "OR",
            "subGroups": [
                {
                    "conditions": [
                        {"fieldName": field, "operator": "Contains", "values": [term]}
                    ],
                    "operator": sub_operator,
                }
                for field in fields
            ],
        }
    ]


def order_by(field: str, descending: bool = True) -> list[dict]:
    return [{"fieldName": field, "sorttype": "DESC" if descending else "ASC"}]


def paging(limit: int, offset: int = 0) -> dict:
    return {"limit": limit, "offset": offset}


# ---------------------------------------------------------------------------
# Table wrapper
# ---------------------------------------------------------------------------

class RecordTable:
    """
    Thin wrapper around one platform table.

    Every method raises instead of returning a sentinel:

    - ``RecordClientUnavailable`` when no client was supplied.
    - ``RemoteRejection`` when the response reports ``success=false``, or
      when any record of a batch mutation failed.  A partially failed batch
      is treated as a total failure even though the successful records are
      already committed on the platform; every per-record message is kept
      on the exception.

    Exceptions raised by the client itself (network, serialisation) are
    propagated untouched.
    """

    def __init__(self, client: RecordClient | None, name: str) -> None:
        self.client = client
        self.name = name

    def _require_client(self) -> RecordClient:
        if self.client is None:
            raise RecordClientUnavailable()
        return self.client

    def _check(self, response: Response | None, action: str) -> Response:
        if not response or not response.get("success"):
            message = (response or {}).get("message") or f"Failed to {action} {self.name} records"
            raise RemoteRejection(message)
        return response

    def _successful_data(self, response: Response, action: str) -> list[Record]:
        results = response.get("results") or []
        failed = [r for r in results if not r.get("success")]
        if failed:
            messages = [r["message"] for r in failed if r.get("message")]
            logger.error(
                "%d of %d %s record(s) failed to %s: %s",
                len(failed), len(results), self.name, action, failed,
            )
            raise RemoteRejection(
                f"Failed to {action} {self.name} records",
                messages or [f"Failed to {action} {self.name} records"],
            )
        successful = [r.get("data") for r in results if r.get("success")]
        if not successful:
            raise RemoteRejection(f"No {self.name} records returned from {action}")
        return successful

    async def fetch(self, params: dict) -> list[Record]:
        client = self._require_client()
        increment_record_calls()
        response = self._check(await client.fetch_records(self.name, params), "fetch")
        return list(response.get("data") or [])

    async def get(self, record_id: int, params: dict) -> Record | None:
        client = self._require_client()
        increment_record_calls()
        response = self._check(
            await client.get_record_by_id(self.name, record_id, params), "fetch"
        )
        return response.get("data") or None

    async def create(self, records: list[Record]) -> list[Record]:
        client = self._require_client()
        increment_record_calls()
        response = self._check(
            await client.create_record(self.name, {"records": records}), "create"
        )
        return self._successful_data(response, "create")

    async def update(self, records: list[Record]) -> list[Record]:
        client = self._require_client()
        increment_record_calls()
        response = self._check(
            await client.update_record(self.name, {"records": records}), "update"
        )
        return self._successful_data(response, "update")

    async def delete(self, record_ids: list[int]) -> bool:
        client = self._require_client()
        increment_record_calls()
        response = self._check(
            await client.delete_record(self.name, {"RecordIds": record_ids}), "delete"
        )
        self._successful_data(response, "delete")
        return True
