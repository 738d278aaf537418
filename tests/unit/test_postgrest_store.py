"""
Unit tests for the PostgREST row-store.

Requests are answered by an ``httpx.MockTransport`` so no network is used.
"""

import json

import httpx
import pytest

from app.domains.project.postgrest import PostgrestRowStore
from app.domains.project.service import ProjectService
from app.exceptions.project import StoreError
from app.schemas.project import LoadState
from app.shared.result import Outcome

BASE_URL = "https://demo.supabase.co/rest/v1"


def make_store(handler):
    client = httpx.AsyncClient(
        base_url=BASE_URL,
        headers={"apikey": "anon", "Authorization": "Bearer anon"},
        transport=httpx.MockTransport(handler),
    )
    return PostgrestRowStore(BASE_URL, "anon", client=client)


class TestPostgrestRowStore:
    """Test cases for PostgrestRowStore."""

    @pytest.mark.asyncio
    async def test_select_all(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=[{"id": "1", "name": "Atlas"}])

        store = make_store(handler)

        rows = await store.select_all()

        assert rows == [{"id": "1", "name": "Atlas"}]
        assert requests[0].method == "GET"
        assert requests[0].url.path == "/rest/v1/projects"
        assert requests[0].url.params["order"] == "created_at.desc"
        assert requests[0].headers["apikey"] == "anon"

    @pytest.mark.asyncio
    async def test_insert_returns_representation(self):
        requests = []

        def handler(request):
            requests.append(request)
            body = json.loads(request.content)
            return httpx.Response(201, json=[{**body[0], "id": "new-id"}])

        store = make_store(handler)

        row = await store.insert({"name": "Atlas"})

        assert row == {"name": "Atlas", "id": "new-id"}
        assert requests[0].method == "POST"
        assert requests[0].headers["Prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_update_filters_by_id(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=[{"id": "p1", "budget": 10}])

        store = make_store(handler)

        row = await store.update_by_id("p1", {"budget": 10})

        assert row == {"id": "p1", "budget": 10}
        assert requests[0].method == "PATCH"
        assert requests[0].url.params["id"] == "eq.p1"
        assert json.loads(requests[0].content) == {"budget": 10}

    @pytest.mark.asyncio
    async def test_update_of_unknown_row(self):
        store = make_store(lambda request: httpx.Response(200, json=[]))

        with pytest.raises(StoreError, match="does not exist"):
            await store.update_by_id("p1", {"budget": 10})

    @pytest.mark.asyncio
    async def test_delete(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(204)

        store = make_store(handler)

        await store.delete_by_id("p1")

        assert requests[0].method == "DELETE"
        assert requests[0].url.params["id"] == "eq.p1"

    @pytest.mark.asyncio
    async def test_error_response_message(self):
        def handler(request):
            return httpx.Response(
                409, json={"message": "duplicate key value violates unique constraint"}
            )

        store = make_store(handler)

        with pytest.raises(StoreError, match="duplicate key value"):
            await store.insert({"name": "Atlas"})

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = make_store(handler)

        with pytest.raises(StoreError, match="connection refused"):
            await store.select_all()

    @pytest.mark.asyncio
    async def test_close(self):
        store = make_store(lambda request: httpx.Response(200, json=[]))

        await store.close()

        assert store._client.is_closed

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        store = make_store(lambda request: httpx.Response(200, text="<html>gateway</html>"))

        with pytest.raises(StoreError, match="invalid response body"):
            await store.select_all()

    @pytest.mark.asyncio
    async def test_unexpected_body_shape(self):
        store = make_store(lambda request: httpx.Response(200, json={"id": "p1"}))

        with pytest.raises(StoreError, match="unexpected response shape"):
            await store.select_all()

    @pytest.mark.asyncio
    async def test_non_json_insert_response(self):
        store = make_store(lambda request: httpx.Response(201, text="created"))

        with pytest.raises(StoreError, match="invalid response body"):
            await store.insert({"name": "Atlas"})


class TestProjectServiceOnPostgrest:
    """Collection results when the PostgREST store answers badly."""

    @pytest.mark.asyncio
    async def test_load_with_non_json_body_fails(self):
        store = make_store(lambda request: httpx.Response(200, text="<html>gateway</html>"))
        service = ProjectService(store)

        result = await service.load()

        assert result.outcome == Outcome.store_failed
        assert service.load_state == LoadState.failed
        assert "invalid response body" in service.load_error
        assert service.projects == ()
