# tests/test_backend_client.py
import httpx
import pytest

from conftest import TOKEN, FakeBackend


@pytest.mark.asyncio
async def test_fetch_me_only_on_200():
    backend = FakeBackend({("GET", "/auth/me"): (200, {"id": 1, "role": "ADMIN"})})
    client = backend.client()
    assert await client.fetch_me(TOKEN) == {"id": 1, "role": "ADMIN"}
    assert await client.fetch_me(None) is None

    backend.routes[("GET", "/auth/me")] = (401, {"detail": "expired"})
    assert await client.fetch_me(TOKEN) is None

    backend.routes[("GET", "/auth/me")] = httpx.ConnectError("down")
    assert await client.fetch_me(TOKEN) is None


@pytest.mark.asyncio
async def test_network_errors_propagate_from_list_calls():
    backend = FakeBackend({("GET", "/api/orders"): httpx.ConnectTimeout("slow")})
    with pytest.raises(httpx.RequestError):
        await backend.client().list_orders(TOKEN)


@pytest.mark.asyncio
async def test_status_and_body_are_returned():
    backend = FakeBackend({("GET", "/api/customers"): (403, {"detail": "forbidden"})})
    assert await backend.client().list_customers(TOKEN) == (403, {"detail": "forbidden"})
