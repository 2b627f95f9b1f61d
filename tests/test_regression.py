"""
Regression tests for app-level behaviour.

1. The app must start and answer without a record client (503, not 500)
2. X-Record-Call-Count must report the actual number of platform calls
3. CORS must not set allow_credentials=true with allow_origins=*
4. The in-memory comment backend must keep its data across requests
"""
import logging

import pytest
from httpx import ASGITransport, AsyncClient

from community_api.logging_config import configure_logging
from community_api.main import create_app
from community_api.services.comment_store import InMemoryCommentStore


def _client_for(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


# ---------------------------------------------------------------------------
# 1. Missing record client -> 503
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_missing_client_returns_503():
    app = create_app(record_client=None)
    async with _client_for(app) as client:
        resp = await client.get("/api/v1/users")
        health = await client.get("/health")
    assert resp.status_code == 503
    assert health.status_code == 200
    assert health.json()["record_client"] is False


# ---------------------------------------------------------------------------
# 2. Record call counter
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_record_call_count_resets_per_request(async_client: AsyncClient):
    first = await async_client.get("/api/v1/communities")
    second = await async_client.get("/api/v1/communities")
    assert first.headers["x-record-call-count"] == "1"
    assert second.headers["x-record-call-count"] == "1"


# ---------------------------------------------------------------------------
# 3. CORS
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cors_does_not_allow_credentials_with_wildcard(async_client: AsyncClient):
    resp = await async_client.get("/health", headers={"Origin": "http://example.com"})
    assert resp.headers.get("access-control-allow-origin") == "*"
    assert "access-control-allow-credentials" not in resp.headers


# ---------------------------------------------------------------------------
# 4. In-memory comment backend
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_memory_backend_persists_between_requests():
    app = create_app(comment_store=InMemoryCommentStore(latency=0))
    async with _client_for(app) as client:
        created = await client.post("/api/v1/comments", json={"content": "local", "postId": 1})
        listed = await client.get("/api/v1/posts/1/comments")
        health = await client.get("/health")
    assert created.status_code == 201
    assert created.json()["authorName"] == "Anonymous"
    assert [c["content"] for c in listed.json()] == ["local"]
    assert listed.headers["x-record-call-count"] == "0"
    assert health.json()["comment_backend"] == "InMemoryCommentStore"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def test_configure_logging_is_idempotent():
    logger = configure_logging("debug")
    configure_logging("DEBUG")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_configure_logging_unknown_level_falls_back_to_info():
    assert configure_logging("chatty").level == logging.INFO
