"""Unit tests for the HTTP remote store using httpx.MockTransport."""

import json

import httpx
import pytest

from learner_progress.kernel.errors import RemoteUnavailable
from learner_progress.schemas.snapshots import Domain
from learner_progress.storage import HttpRemoteStore, NullRemoteStore


def make_store(handler) -> HttpRemoteStore:
    client = httpx.AsyncClient(base_url="https://api.example.test", transport=httpx.MockTransport(handler))
    return HttpRemoteStore("https://api.example.test", client=client)


class TestHttpRemoteStore:
    """REST mapping and error wrapping."""

    @pytest.mark.asyncio
    async def test_fetch_returns_document(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == "/users/u1/grammar"
            return httpx.Response(200, json={"lesson_progress": []})

        store = make_store(handler)
        assert await store.fetch(Domain.GRAMMAR, "u1") == {"lesson_progress": []}
        await store.client.aclose()

    @pytest.mark.asyncio
    async def test_fetch_missing_is_none(self):
        store = make_store(lambda request: httpx.Response(404))
        assert await store.fetch(Domain.USER, "u1") is None
        await store.client.aclose()

    @pytest.mark.asyncio
    async def test_update_puts_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(204)

        store = make_store(handler)
        await store.update(Domain.USER, "u1", {"progress": {"xp": 10}})
        assert seen == {"method": "PUT", "path": "/users/u1/user", "body": {"progress": {"xp": 10}}}
        await store.client.aclose()

    @pytest.mark.asyncio
    async def test_unlock_achievement_path(self):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append((request.method, request.url.path))
            return httpx.Response(200, json={})

        store = make_store(handler)
        await store.unlock_achievement("u1", "streak_7")
        assert paths == [("PUT", "/users/u1/achievements/streak_7")]
        await store.client.aclose()

    @pytest.mark.asyncio
    async def test_server_error_wrapped_after_single_attempt(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(503)

        store = make_store(handler)
        with pytest.raises(RemoteUnavailable) as exc_info:
            await store.update(Domain.GRAMMAR, "u1", {})
        assert exc_info.value.operation == "update"
        assert exc_info.value.domain == "grammar"
        assert len(calls) == 1
        await store.client.aclose()

    @pytest.mark.asyncio
    async def test_connection_error_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.method)
            raise httpx.ConnectError("offline", request=request)

        store = make_store(handler)
        with pytest.raises(RemoteUnavailable):
            await store.update(Domain.USER, "u1", {})
        assert calls == ["PUT"]
        await store.client.aclose()

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        store = make_store(handler)
        with pytest.raises(RemoteUnavailable):
            await store.fetch(Domain.USER, "u1")
        await store.client.aclose()

    @pytest.mark.asyncio
    async def test_non_object_document_rejected(self):
        store = make_store(lambda request: httpx.Response(200, json=[1, 2]))
        with pytest.raises(RemoteUnavailable):
            await store.fetch(Domain.USER, "u1")
        await store.client.aclose()


class TestNullRemoteStore:
    @pytest.mark.asyncio
    async def test_demo_mode_is_silent(self):
        store = NullRemoteStore()
        assert await store.fetch(Domain.USER, "u1") is None
        await store.update(Domain.USER, "u1", {"progress": {}})
        await store.unlock_achievement("u1", "first_card")
