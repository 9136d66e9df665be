"""Tests for the rate limiting middleware."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.middleware.rate_limit import (
    InMemoryRateLimitStorage,
    RateLimitConfig,
    RateLimitMiddleware,
    normalize_path,
    referral_email_key,
)

LEAD_ID = "3f2a1b0c-9d8e-4f7a-b6c5-d4e3f2a1b0c9"


def build_app(rate_limits: dict) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, rate_limits=rate_limits)

    @app.post("/api/v1/leads")
    async def create_lead() -> dict:
        return {"success": True}

    @app.post("/api/v1/leads/{lead_id}/contact-attempts")
    async def contact(lead_id: str) -> dict:
        return {"lead_id": lead_id}

    @app.post("/api/v1/referrals/approval-email")
    async def approval() -> dict:
        return {"success": True}

    @app.post("/api/v1/referrals/decline-email")
    async def decline() -> dict:
        return {"success": True}

    @app.get("/api/v1/health")
    async def health() -> dict:
        return {"status": "healthy"}

    return app


def client_for(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestNormalizePath:
    """Tests for path normalization."""

    def test_replaces_uuids(self) -> None:
        assert (
            normalize_path(f"/api/v1/leads/{LEAD_ID}/contact-attempts")
            == "/api/v1/leads/{id}/contact-attempts"
        )

    def test_strips_trailing_slash(self) -> None:
        assert normalize_path("/api/v1/leads/") == "/api/v1/leads"
        assert normalize_path("/") == "/"


class TestStorage:
    """Tests for fixed-window counters."""

    def test_counts_down_then_blocks(self) -> None:
        storage = InMemoryRateLimitStorage()

        assert storage.check_and_increment("k", 2, 60)[:2] == (True, 1)
        assert storage.check_and_increment("k", 2, 60)[:2] == (True, 0)

        allowed, remaining, reset = storage.check_and_increment("k", 2, 60)
        assert allowed is False
        assert remaining == 0
        assert 1 <= reset <= 60

    def test_window_expiry_resets(self) -> None:
        storage = InMemoryRateLimitStorage()

        storage.check_and_increment("k", 1, 60)
        assert storage.check_and_increment("k", 1, 60)[0] is False

        storage._storage["k"].window_start -= 61
        assert storage.check_and_increment("k", 1, 60)[0] is True

    def test_keys_independent(self) -> None:
        storage = InMemoryRateLimitStorage()

        storage.check_and_increment("a", 1, 60)

        assert storage.check_and_increment("b", 1, 60)[0] is True


class TestRateLimitMiddleware:
    """Tests for middleware responses."""

    @pytest.mark.asyncio
    async def test_blocks_after_limit(self) -> None:
        app = build_app({("POST", "/api/v1/leads"): RateLimitConfig(requests=2, window_seconds=60)})

        async with client_for(app) as client:
            first = await client.post("/api/v1/leads")
            await client.post("/api/v1/leads")
            blocked = await client.post("/api/v1/leads")

        assert first.status_code == 200
        assert first.headers["X-RateLimit-Limit"] == "2"
        assert first.headers["X-RateLimit-Remaining"] == "1"

        assert blocked.status_code == 429
        assert blocked.json()["error"] == "Too many requests. Please try again later."
        assert int(blocked.headers["Retry-After"]) >= 1
        assert blocked.headers["X-RateLimit-Remaining"] == "0"

    @pytest.mark.asyncio
    async def test_clients_limited_separately(self) -> None:
        app = build_app({("POST", "/api/v1/leads"): RateLimitConfig(requests=1, window_seconds=60)})

        async with client_for(app) as client:
            await client.post("/api/v1/leads", headers={"X-Forwarded-For": "203.0.113.1"})
            other = await client.post("/api/v1/leads", headers={"X-Forwarded-For": "203.0.113.2"})

        assert other.status_code == 200

    @pytest.mark.asyncio
    async def test_path_parameters_share_limit(self) -> None:
        app = build_app({
            ("POST", "/api/v1/leads/{id}/contact-attempts"): RateLimitConfig(
                requests=1, window_seconds=60
            ),
        })

        async with client_for(app) as client:
            await client.post(f"/api/v1/leads/{LEAD_ID}/contact-attempts")
            blocked = await client.post(
                "/api/v1/leads/aaaaaaaa-bbbb-4ccc-8ddd-eeeeeeeeeeee/contact-attempts"
            )

        assert blocked.status_code == 429

    @pytest.mark.asyncio
    async def test_custom_key_shares_limit(self) -> None:
        config = RateLimitConfig(requests=1, window_seconds=60, key_func=referral_email_key)
        app = build_app({
            ("POST", "/api/v1/referrals/approval-email"): config,
            ("POST", "/api/v1/referrals/decline-email"): config,
        })

        async with client_for(app) as client:
            await client.post("/api/v1/referrals/approval-email")
            blocked = await client.post("/api/v1/referrals/decline-email")

        assert blocked.status_code == 429

    @pytest.mark.asyncio
    async def test_unlisted_endpoints_not_limited(self) -> None:
        app = build_app({("POST", "/api/v1/leads"): RateLimitConfig(requests=1, window_seconds=60)})

        async with client_for(app) as client:
            responses = [await client.get("/api/v1/health") for _ in range(3)]

        assert all(r.status_code == 200 for r in responses)
        assert "X-RateLimit-Limit" not in responses[0].headers

    @pytest.mark.asyncio
    async def test_disabled(self) -> None:
        app = FastAPI()
        app.add_middleware(
            RateLimitMiddleware,
            rate_limits={("POST", "/limited"): RateLimitConfig(requests=1, window_seconds=60)},
            enabled=False,
        )

        @app.post("/limited")
        async def limited() -> dict:
            return {}

        async with client_for(app) as client:
            responses = [await client.post("/limited") for _ in range(3)]

        assert all(r.status_code == 200 for r in responses)
