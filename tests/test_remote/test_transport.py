"""Tests for HttpxTransport — requests are served by httpx.MockTransport."""

import json
from collections.abc import Callable

import httpx
import pytest

from phishscore.remote.transport import HttpxTransport, InferenceResponse, InferenceTransport

URL = "https://inference.test/models/primary"


def make_transport(handler: Callable[[httpx.Request], httpx.Response]) -> HttpxTransport:
    return HttpxTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestInferenceResponse:
    @pytest.mark.parametrize(("status", "ok"), [(200, True), (204, True), (410, False), (503, False)])
    def test_ok(self, status: int, ok: bool) -> None:
        assert InferenceResponse(status_code=status).ok is ok

    def test_gone_only_for_410(self) -> None:
        assert InferenceResponse(status_code=410).gone
        assert not InferenceResponse(status_code=404).gone


class TestHttpxTransport:
    async def test_posts_json_with_bearer_token(self) -> None:
        seen: dict[str, object] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[{"label": "spam", "score": 0.9}])

        payload = {"inputs": "hi", "options": {"wait_for_model": True, "use_cache": False}}
        async with make_transport(handler) as transport:
            response = await transport.post(URL, payload, "hf_secret")

        assert seen == {
            "method": "POST",
            "url": URL,
            "auth": "Bearer hf_secret",
            "body": payload,
        }
        assert response.ok
        assert response.body == [{"label": "spam", "score": 0.9}]

    async def test_gone_status_has_no_body(self) -> None:
        async with make_transport(lambda _: httpx.Response(410, text="deprecated")) as transport:
            response = await transport.post(URL, {}, "tok")

        assert response.gone
        assert response.body is None

    async def test_error_status_is_not_decoded(self) -> None:
        async with make_transport(lambda _: httpx.Response(503, text="<html>")) as transport:
            response = await transport.post(URL, {}, "tok")

        assert response.status_code == 503
        assert not response.ok

    async def test_invalid_json_raises_value_error(self) -> None:
        async with make_transport(lambda _: httpx.Response(200, content=b"not json")) as transport:
            with pytest.raises(ValueError):
                await transport.post(URL, {}, "tok")

    async def test_undecoded_success_skips_body(self) -> None:
        async with make_transport(lambda _: httpx.Response(200, content=b"not json")) as transport:
            response = await transport.post(URL, {}, "tok", decode=False)

        assert response.ok
        assert response.body is None

    async def test_network_error_propagates(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with make_transport(handler) as transport:
            with pytest.raises(httpx.ConnectError):
                await transport.post(URL, {}, "tok")

    async def test_satisfies_protocol(self) -> None:
        async with make_transport(lambda _: httpx.Response(200, json=[])) as transport:
            assert isinstance(transport, InferenceTransport)
