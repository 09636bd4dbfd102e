"""Tests for single-attempt request execution and classification."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from tfetch.client.executor import aexecute_request, execute_request
from tfetch.exceptions import DecodeFailure, HttpStatusFailure, TransportFailure


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _run(handler, method: str = "GET", url: str = "https://api.example.com/test", **kwargs):
    with _client(handler) as client:
        return execute_request(client, method, url, **kwargs)


class TestSuccess:
    def test_returns_decoded_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": 1, "title": "Test Post"})

        assert _run(handler) == {"id": 1, "title": "Test Post"}

    def test_any_2xx_is_success(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"id": 42})

        assert _run(handler, "POST") == {"id": 42}

    def test_sends_method_headers_params_and_content(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        _run(
            handler,
            "PUT",
            headers={"X-Custom": "value"},
            params={"page": "2"},
            content=b"payload",
        )
        request = seen[0]
        assert request.method == "PUT"
        assert request.headers["x-custom"] == "value"
        assert request.url.params["page"] == "2"
        assert request.content == b"payload"

    def test_empty_object_is_a_payload(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={})

        assert _run(handler, "DELETE") == {}


class TestHttpStatusFailure:
    def test_non_2xx_carries_body_text(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="Post not found")

        with pytest.raises(HttpStatusFailure, match="Post not found") as exc_info:
            _run(handler)
        assert exc_info.value.status_code == 404
        assert exc_info.value.body == "Post not found"

    def test_empty_error_body_falls_back_to_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(HttpStatusFailure, match="HTTP 503"):
            _run(handler)

    def test_status_failure_is_not_a_transport_failure(self) -> None:
        assert not issubclass(HttpStatusFailure, TransportFailure)


class TestTransportFailure:
    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("Connection refused"),
            httpx.ReadTimeout("Read timed out"),
            httpx.RemoteProtocolError("Server disconnected"),
        ],
    )
    def test_transport_errors_are_wrapped(self, error: Exception) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        with pytest.raises(TransportFailure) as exc_info:
            _run(handler)
        assert exc_info.value.__cause__ is error
        assert str(error) in str(exc_info.value)


class TestDecodeFailure:
    def test_malformed_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(DecodeFailure, match="Invalid JSON"):
            _run(handler)

    def test_empty_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        with pytest.raises(DecodeFailure, match="empty response body"):
            _run(handler, "DELETE")

    def test_json_null(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"null")

        with pytest.raises(DecodeFailure, match="null"):
            _run(handler)

    def test_decode_failure_is_retryable_class(self) -> None:
        assert issubclass(DecodeFailure, TransportFailure)


class TestAsync:
    def test_async_success(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[1, 2, 3])

        async def main():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await aexecute_request(client, "GET", "https://api.example.com/list")

        assert asyncio.run(main()) == [1, 2, 3]

    def test_async_classifies_failures(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused")

        async def main():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await aexecute_request(client, "GET", "https://api.example.com/test")

        with pytest.raises(TransportFailure, match="Connection refused"):
            asyncio.run(main())
