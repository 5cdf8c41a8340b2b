"""End-to-end tests of the HTTP API through httpx's ASGI transport."""

from datetime import timedelta

import pytest

from urlsh.db.models import ShortURL, utcnow
from urlsh.gen import shortener

BASE_URL = "http://localhost:8090"


async def shorten(client, **body):
    return await client.post("/v1/shorten", json=body)


class TestHealth:

    @pytest.mark.asyncio
    async def test_root_and_health(self, client):
        root = await client.get("/")
        assert root.status_code == 200
        assert root.json()["message"] == "URL Shortener Service"

        health = await client.get("/health")
        assert health.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_cors_preflight(self, client):
        response = await client.options(
            "/v1/shorten",
            headers={
                "Origin": "http://frontend.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PUT" in response.headers["access-control-allow-methods"]


class TestShorten:

    @pytest.mark.asyncio
    async def test_random_default(self, client):
        response = await shorten(client, url="https://example.com")

        assert response.status_code == 201
        data = response.json()
        assert data["method"] == "RANDOM"
        assert len(data["short_code"]) == 8
        assert data["short_url"] == f"{BASE_URL}/{data['short_code']}"
        assert data["original_url"] == "https://example.com"
        assert data["expiration"] is not None
        assert "x-process-time" in response.headers

    @pytest.mark.asyncio
    async def test_custom(self, client):
        response = await shorten(client, url="https://example.com", method="CUSTOM", custom_alias="launch")
        assert response.status_code == 201
        assert response.json()["short_url"] == f"{BASE_URL}/launch"

    @pytest.mark.asyncio
    async def test_custom_requires_alias(self, client):
        response = await shorten(client, url="https://example.com", method="CUSTOM", custom_alias="")
        assert response.status_code == 400
        assert response.json()["detail"] == "custom alias cannot be empty"

    @pytest.mark.asyncio
    async def test_custom_alias_pattern(self, client):
        response = await shorten(client, url="https://example.com", method="CUSTOM", custom_alias="a/b")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_custom_reserved_alias(self, client):
        response = await shorten(client, url="https://example.com", method="CUSTOM", custom_alias="docs")
        assert response.status_code == 400
        assert response.json()["detail"] == "custom alias 'docs' is reserved"

    @pytest.mark.asyncio
    async def test_custom_conflict(self, client):
        await shorten(client, url="https://a.com", method="CUSTOM", custom_alias="dup")
        response = await shorten(client, url="https://b.com", method="CUSTOM", custom_alias="dup")
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_hash_repeat_returns_same_code(self, client):
        first = await shorten(client, url="https://a.com", method="HASH")
        second = await shorten(client, url="https://a.com", method="HASH")
        assert first.status_code == second.status_code == 201
        assert first.json()["short_code"] == second.json()["short_code"]

    @pytest.mark.asyncio
    async def test_secure(self, client):
        first = await shorten(client, url="https://example.com", method="SECURE")
        second = await shorten(client, url="https://example.com", method="SECURE")
        assert len(first.json()["short_code"]) == 12
        assert first.json()["short_code"] != second.json()["short_code"]

    @pytest.mark.asyncio
    async def test_unknown_method(self, client):
        response = await shorten(client, url="https://example.com", method="UUID")
        assert response.status_code == 400
        assert response.json()["detail"] == "invalid shortening method"

    @pytest.mark.asyncio
    async def test_invalid_url(self, client):
        response = await shorten(client, url="javascript:alert(1)")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_generation_failure(self, client, monkeypatch):
        def broken_choice(seq):
            raise OSError("entropy source unavailable")

        monkeypatch.setattr(shortener.secrets, "choice", broken_choice)
        response = await shorten(client, url="https://example.com")
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate short code"


class TestRedirect:

    @pytest.mark.asyncio
    async def test_redirect_records_visit(self, client):
        await shorten(client, url="https://example.com/target", method="CUSTOM", custom_alias="go")

        response = await client.get(
            "/go",
            headers={"User-Agent": "pytest-agent", "X-Forwarded-For": "203.0.113.5, 10.0.0.1"},
        )
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/target"

        stats = (await client.get("/v1/shorten/go")).json()
        assert stats["redirect_count"] == 1

        last = await client.get("/v1/shorten/go/last")
        assert last.status_code == 200
        assert last.json()["ip_address"] == "203.0.113.5"
        assert last.json()["user_agent"] == "pytest-agent"

    @pytest.mark.asyncio
    async def test_unknown_code(self, client):
        response = await client.get("/nothing-here")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_code(self, client):
        response = await client.get("/bad;code")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_expired(self, client, session):
        session.add(ShortURL(
            original_url="https://old.example.com",
            short_code="stale",
            short_url=f"{BASE_URL}/stale",
            method="CUSTOM",
            expiration=utcnow() - timedelta(hours=1),
        ))
        await session.commit()

        response = await client.get("/stale")
        assert response.status_code == 410


class TestStats:

    @pytest.mark.asyncio
    async def test_stats(self, client):
        created = (await shorten(
            client, url="https://example.com", method="CUSTOM", custom_alias="info", utm_source="mail"
        )).json()

        response = await client.get("/v1/shorten/info")
        assert response.status_code == 200
        data = response.json()
        assert data["short_url"] == created["short_url"]
        assert data["method"] == "CUSTOM"
        assert data["redirect_count"] == 0
        assert data["utm_source"] == "mail"

    @pytest.mark.asyncio
    async def test_stats_missing(self, client):
        assert (await client.get("/v1/shorten/missing")).status_code == 404

    @pytest.mark.asyncio
    async def test_put_increments(self, client):
        await shorten(client, url="https://example.com", method="CUSTOM", custom_alias="count")

        for expected in (1, 2):
            response = await client.put("/v1/shorten/count", headers={"User-Agent": "agent-a"})
            assert response.status_code == 200
            assert response.json()["redirect_count"] == expected

        await client.put("/v1/shorten/count", headers={"User-Agent": "agent-b", "X-Real-Ip": "198.51.100.1"})

        agents = (await client.get("/v1/shorten/count/top-agents")).json()
        assert agents == {"short_code": "count", "user_agents": ["agent-a", "agent-b"]}

        ips = (await client.get("/v1/shorten/count/ips")).json()
        assert "198.51.100.1" in ips["ip_addresses"]
        assert len(ips["ip_addresses"]) == 2

    @pytest.mark.asyncio
    async def test_put_with_oversized_forwarded_header(self, client):
        await shorten(client, url="https://example.com", method="CUSTOM", custom_alias="proxy")

        response = await client.put("/v1/shorten/proxy", headers={"X-Forwarded-For": "x" * 200})
        assert response.status_code == 200

        ips = (await client.get("/v1/shorten/proxy/ips")).json()["ip_addresses"]
        assert ips == ["127.0.0.1"]

    @pytest.mark.asyncio
    async def test_put_missing(self, client):
        assert (await client.put("/v1/shorten/missing")).status_code == 404

    @pytest.mark.asyncio
    async def test_last_without_visits(self, client):
        await shorten(client, url="https://example.com", method="CUSTOM", custom_alias="quiet")
        assert (await client.get("/v1/shorten/quiet/last")).status_code == 404
        assert (await client.get("/v1/shorten/missing/ips")).status_code == 404

    @pytest.mark.asyncio
    async def test_find(self, client):
        created = (await shorten(client, url="https://example.com/findme")).json()

        for query in (created["short_url"], created["short_code"], "https://example.com/findme"):
            response = await client.get("/v1/shorten/find", params={"url": query})
            assert response.status_code == 200
            assert response.json()["short_code"] == created["short_code"]

        missing = await client.get("/v1/shorten/find", params={"url": "https://nope.example"})
        assert missing.status_code == 404
