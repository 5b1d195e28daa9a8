"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from ingredient_resolver.adapters.fdc_client import HttpxFdcClient


def test_fdc_client_search() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"foods": []})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=async_client,
    )

    search = asyncio.run(client.search_foods("rice", page_size=5, data_types=["Branded"]))

    assert search == {"foods": []}
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/foods/search"
    assert request.url.params["api_key"] == "key"
    assert json.loads(request.content.decode()) == {
        "query": "rice",
        "pageSize": 5,
        "dataType": ["Branded"],
    }


def test_fdc_client_omits_data_types_when_unset() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content.decode()))
        return httpx.Response(200, json={"foods": []})

    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    asyncio.run(client.search_foods("oats"))

    assert bodies == [{"query": "oats", "pageSize": 10}]


def test_fdc_client_raises_on_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": "rate limited"})

    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.search_foods("rice"))


def test_fdc_client_create_strips_trailing_slash() -> None:
    client = HttpxFdcClient.create(api_key="key", base_url="https://api.test/fdc/v1/")

    assert client.base_url == "https://api.test/fdc/v1"
    asyncio.run(client.close())
