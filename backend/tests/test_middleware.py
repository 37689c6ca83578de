"""
SnipNet Backend - Middleware Tests
===================================

What we test:
    ✅ Request ids are generated, or echoed when the client sends one
    ✅ The error envelope carries the same request id as the header
    ✅ Sliding-window rate limiting per client IP, with Retry-After
    ✅ Access log level follows the response status
"""

import logging
import uuid

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from snipnet.middleware.logging import level_for_status
from snipnet.middleware.rate_limit import RateLimitMiddleware
from snipnet.middleware.request_id import RequestIDMiddleware


def limited_app(max_requests: int) -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60)
    app.add_middleware(RequestIDMiddleware)
    return app


class TestRequestID:

    @pytest.mark.asyncio
    async def test_generates_request_id(self, test_client):
        response = await test_client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_echoes_client_request_id(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_error_body_matches_header(self, test_client):
        response = await test_client.get("/api/friendships/friends", headers={"X-Request-ID": "abc12345"})

        assert response.status_code == 401
        assert response.json()["request_id"] == "abc12345"


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_rejects_after_limit(self):
        transport = ASGITransport(app=limited_app(max_requests=2))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            assert (await client.get("/ping")).status_code == 200
            assert (await client.get("/ping")).status_code == 200

            rejected = await client.get("/ping", headers={"X-Request-ID": "rl-1"})

        assert rejected.status_code == 429
        assert int(rejected.headers["Retry-After"]) >= 1
        body = rejected.json()
        assert body["error"] == "rate_limit_exceeded"
        assert body["details"]["retry_after"] == int(rejected.headers["Retry-After"])
        assert body["request_id"] == "rl-1"

    @pytest.mark.asyncio
    async def test_rotating_identity_header_shares_ip_budget(self):
        transport = ASGITransport(app=limited_app(max_requests=3))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            statuses = [
                (await client.get("/ping", headers={"X-User-Id": str(uuid.uuid4())})).status_code
                for _ in range(20)
            ]

        assert statuses[:3] == [200, 200, 200]
        assert set(statuses[3:]) == {429}

    @pytest.mark.parametrize(
        "headers",
        [[], [(b"x-user-id", b"alice")], [(b"x-user-id", str(uuid.uuid4()).encode())]],
    )
    def test_client_key_is_the_ip(self, headers):
        request = Request({
            "type": "http",
            "method": "GET",
            "path": "/ping",
            "query_string": b"",
            "headers": headers,
            "client": ("10.0.0.7", 51000),
        })
        assert RateLimitMiddleware.client_key(request) == "10.0.0.7"

    @pytest.mark.asyncio
    async def test_health_is_never_limited(self):
        transport = ASGITransport(app=limited_app(max_requests=1))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            for _ in range(3):
                assert (await client.get("/health")).status_code == 200


class TestAccessLogLevel:

    @pytest.mark.parametrize(
        "status, level",
        [(200, logging.INFO), (204, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
    )
    def test_level_for_status(self, status, level):
        assert level_for_status(status) == level
