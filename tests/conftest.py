"""
Test infrastructure for the community data-access services.

Strategy
--------
- ``FakeRecordClient`` stands in for the storage platform.  It keeps each
  table as a list of dicts and understands just enough of the query
  parameters (``where`` EqualTo, ``whereGroups`` Contains, ``orderBy``,
  ``pagingInfo``) for the services under test.  Every call is recorded in
  ``calls`` so tests can assert on the exact parameters sent.
- Canned responses (``responses[method]``) and a forced exception
  (``error``) let tests drive the rejection and transport-failure paths.
- The HTTP facade is exercised through ``httpx.AsyncClient`` over
  ``ASGITransport`` with a fresh app per test, wired to the same fake
  client and a ``CollectingNotifier``.
"""
import itertools
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from community_api.main import create_app
from community_api.notifications import CollectingNotifier
from community_api.services.comment_service import CommentService
from community_api.services.comment_store import InMemoryCommentStore, RemoteCommentStore
from community_api.services.community_service import CommunityService
from community_api.services.user_service import UserService

# ---------------------------------------------------------------------------
# Fake record client
# ---------------------------------------------------------------------------

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _sort_key(field):
    def key(row):
        value = row.get(field)
        return (value is not None, value if value is not None else 0)

    return key


def _matches_group(row: dict, sub_group: dict) -> bool:
    return all(
        any(str(v).lower() in str(row.get(cond["fieldName"]) or "").lower() for v in cond["values"])
        for cond in sub_group["conditions"]
    )


class FakeRecordClient:
    def __init__(self, tables: dict[str, list[dict]] | None = None) -> None:
        self.tables: dict[str, list[dict]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.calls: list[tuple[str, str, dict]] = []
        self.responses: dict[str, dict] = {}
        self.error: Exception | None = None
        self._clock = itertools.count(1)
        self._reset_ids()

    def _reset_ids(self) -> None:
        existing = [row["Id"] for rows in self.tables.values() for row in rows]
        self._ids = itertools.count(max(existing, default=0) + 1)

    def seed(self, table: str, rows: list[dict]) -> None:
        """Insert *rows* as-is; newly created records get ids above them."""
        self._rows(table).extend(dict(row) for row in rows)
        self._reset_ids()

    def calls_to(self, method: str) -> list[tuple[str, str, dict]]:
        return [call for call in self.calls if call[0] == method]

    def _enter(self, method: str, table: str, params: dict):
        self.calls.append((method, table, params))
        if self.error is not None:
            raise self.error
        return self.responses.get(method)

    def _rows(self, table: str) -> list[dict]:
        return self.tables.setdefault(table, [])

    def _find(self, table: str, record_id: int) -> dict | None:
        return next((row for row in self._rows(table) if row["Id"] == record_id), None)

    async def fetch_records(self, table: str, params: dict) -> dict:
        canned = self._enter("fetch_records", table, params)
        if canned is not None:
            return canned

        rows = [dict(row) for row in self._rows(table)]
        for cond in params.get("where", []):
            rows = [row for row in rows if row.get(cond["FieldName"]) in cond["Values"]]
        for group in params.get("whereGroups", []):
            rows = [row for row in rows if any(_matches_group(row, sub) for sub in group["subGroups"])]
        for order in reversed(params.get("orderBy", [])):
            rows.sort(key=_sort_key(order["fieldName"]), reverse=order["sorttype"] == "DESC")
        page = params.get("pagingInfo")
        if page:
            rows = rows[page["offset"]:page["offset"] + page["limit"]]
        return {"success": True, "data": rows}

    async def get_record_by_id(self, table: str, record_id: int, params: dict) -> dict:
        canned = self._enter("get_record_by_id", table, {"id": record_id, **params})
        if canned is not None:
            return canned
        row = self._find(table, record_id)
        return {"success": True, "data": dict(row) if row else None}

    async def create_record(self, table: str, params: dict) -> dict:
        canned = self._enter("create_record", table, params)
        if canned is not None:
            return canned
        results = []
        for record in params["records"]:
            row = {
                "Id": next(self._ids),
                "CreatedOn": (_EPOCH + timedelta(minutes=next(self._clock))).isoformat(),
                **record,
            }
            self._rows(table).append(row)
            results.append({"success": True, "data": dict(row)})
        return {"success": True, "results": results}

    async def update_record(self, table: str, params: dict) -> dict:
        canned = self._enter("update_record", table, params)
        if canned is not None:
            return canned
        results = []
        for record in params["records"]:
            row = self._find(table, record["Id"])
            if row is None:
                results.append({"success": False, "message": f"Record {record['Id']} not found"})
                continue
            row.update(record)
            results.append({"success": True, "data": dict(row)})
        return {"success": True, "results": results}

    async def delete_record(self, table: str, params: dict) -> dict:
        canned = self._enter("delete_record", table, params)
        if canned is not None:
            return canned
        results = []
        for record_id in params["RecordIds"]:
            row = self._find(table, record_id)
            if row is None:
                results.append({"success": False, "message": f"Record {record_id} not found"})
                continue
            self._rows(table).remove(row)
            results.append({"success": True})
        return {"success": True, "results": results}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def record_client() -> FakeRecordClient:
    return FakeRecordClient()


@pytest.fixture
def comment_service(record_client: FakeRecordClient) -> CommentService:
    return CommentService(RemoteCommentStore(record_client))


@pytest.fixture
def memory_store() -> InMemoryCommentStore:
    """In-memory comment store with the artificial latency switched off."""
    return InMemoryCommentStore(latency=0)


@pytest.fixture
def community_service(record_client: FakeRecordClient) -> CommunityService:
    return CommunityService(record_client)


@pytest.fixture
def user_service(record_client: FakeRecordClient) -> UserService:
    return UserService(record_client)


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest_asyncio.fixture
async def async_client(record_client: FakeRecordClient, notifier: CollectingNotifier) -> AsyncClient:
    """
    Yield an httpx.AsyncClient wired to a fresh app that talks to the
    fake record client and collects notifications.
    """
    app = create_app(
        record_client=record_client,
        comment_store=RemoteCommentStore(record_client),
        notifier=notifier,
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
