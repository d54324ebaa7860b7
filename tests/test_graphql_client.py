"""Tests for core.infra.graphql.GraphQLClient and core.infra.http.HttpClient."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import web
from aiohttp import test_utils

from core.errors import APIError, ConfigError, TransportError
from core.infra.graphql import GraphQLClient
from core.infra.http import HttpClient
from core.settings import Settings


def _client(response, shop="demo.myshopify.com", token="shpat_x"):
    http = MagicMock()
    http.post_json = AsyncMock(return_value=response)
    http.close = AsyncMock()
    return GraphQLClient(shop, token, http=http), http


def test_execute_returns_data_and_sends_token():
    client, http = _client({"data": {"products": {"edges": []}}})

    data = asyncio.run(client.execute("query { shop { id } }", {"cursor": None}))

    assert data == {"products": {"edges": []}}
    url, payload = http.post_json.await_args.args
    assert url == "https://demo.myshopify.com/admin/api/2024-07/graphql.json"
    assert payload == {"query": "query { shop { id } }", "variables": {"cursor": None}}
    assert http.post_json.await_args.kwargs["headers"]["X-Shopify-Access-Token"] == "shpat_x"


def test_errors_envelope_raises_api_error():
    errors = [{"message": "Field 'nope' doesn't exist"}]
    client, _ = _client({"errors": errors, "data": None})

    with pytest.raises(APIError) as exc_info:
        asyncio.run(client.execute("query { nope }", {}))

    assert "doesn't exist" in str(exc_info.value)
    assert exc_info.value.errors == errors


@pytest.mark.parametrize("shop,token", [("", "shpat_x"), ("demo.myshopify.com", "")])
def test_missing_credentials_fail_before_request(shop, token):
    client, http = _client({"data": {}}, shop=shop, token=token)

    with pytest.raises(ConfigError):
        asyncio.run(client.execute("query { shop { id } }", {}))

    http.post_json.assert_not_called()


def test_from_settings_uses_api_version():
    settings = Settings(shop="s.myshopify.com", admin_token="t", api_version="2025-01")
    client = GraphQLClient.from_settings(settings, http=MagicMock())
    assert client.endpoint == "https://s.myshopify.com/admin/api/2025-01/graphql.json"


async def _post_against(handler, timeout=30.0):
    app = web.Application()
    app.router.add_post("/graphql.json", handler)
    async with test_utils.TestServer(app) as server:
        async with HttpClient(timeout=timeout) as http:
            return await http.post_json(str(server.make_url("/graphql.json")), {"query": "{}"})


def test_http_client_non_2xx_raises_transport_error():
    async def handler(_request):
        return web.Response(status=401, text="[API] Invalid API key or access token")

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(_post_against(handler))

    assert exc_info.value.status == 401
    assert "401" in str(exc_info.value)
    assert "Invalid API key" in str(exc_info.value)


def test_http_client_returns_json():
    async def handler(request):
        body = await request.json()
        return web.json_response({"data": {"echo": body["query"]}})

    assert asyncio.run(_post_against(handler)) == {"data": {"echo": "{}"}}



def test_http_client_non_json_body_raises_transport_error():
    async def handler(_request):
        return web.Response(text="<html>Service maintenance</html>", content_type="text/html")

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(_post_against(handler))

    assert exc_info.value.status == 200
    assert "Invalid JSON" in str(exc_info.value)


def test_http_client_timeout_raises_transport_error():
    async def handler(_request):
        await asyncio.sleep(0.5)
        return web.json_response({"data": {}})

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(_post_against(handler, timeout=0.05))

    assert exc_info.value.status is None


def test_http_client_connection_refused_raises_transport_error():
    async def go():
        async with HttpClient(timeout=5) as http:
            await http.post_json("http://127.0.0.1:9/graphql.json", {"query": "{}"})

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(go())

    assert exc_info.value.status is None
    assert "127.0.0.1:9" in str(exc_info.value)


def test_http_client_closes_the_session_it_opened():
    async def go():
        async with HttpClient(timeout=5) as http:
            session = await http._ensure_session()
            assert await http._ensure_session() is session
            assert not session.closed
        return session

    assert asyncio.run(go()).closed
