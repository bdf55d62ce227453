"""
Tests for RequestExecutor: timeouts, cancellation, interceptors and error normalization.
"""
import asyncio

import httpx
import pytest
import respx

from api_client.cancellation import CancellationToken
from api_client.config import ClientConfig
from api_client.core.executor import RequestExecutor
from api_client.exceptions import (
    ApiCancelledError,
    ApiHttpError,
    ApiNetworkError,
    ApiTimeoutError,
    ApiUnknownError,
    ResponseDecodeError,
)
from api_client.interceptors import Interceptor, bearer_auth
from api_client.types import RequestOptions

from conftest import delayed_transport


class InterceptorBoom(Exception):
    pass


@pytest.mark.asyncio
async def test_executor_lifecycle():
    config = ClientConfig(base_url="https://example.com")
    async with RequestExecutor(config) as client:
        assert client._client is not None
        assert not client._client.is_closed

    assert client._client is None


@pytest.mark.asyncio
async def test_executor_does_not_close_injected_client():
    injected = httpx.AsyncClient()
    config = ClientConfig(base_url="https://example.com", httpx_client=injected)
    async with RequestExecutor(config):
        pass
    assert not injected.is_closed
    await injected.aclose()


@pytest.mark.asyncio
async def test_executor_connects_lazily():
    client = RequestExecutor(ClientConfig(base_url="https://example.com"))
    with respx.mock(base_url="https://example.com") as mock:
        mock.get("/test").respond(200, json={"foo": "bar"})
        assert await client.execute("GET", "/test") == {"foo": "bar"}
    await client.close()


@pytest.mark.asyncio
async def test_timeout_rejects_with_408_and_cancels_request(state):
    transport = delayed_transport(5.0, state)
    config = ClientConfig(
        base_url="https://example.com",
        timeout=0.1,
        httpx_client=httpx.AsyncClient(transport=transport),
    )
    async with RequestExecutor(config) as client:
        loop = asyncio.get_running_loop()
        start = loop.time()
        with pytest.raises(ApiTimeoutError) as exc:
            await client.execute("GET", "/slow")
        elapsed = loop.time() - start

    assert exc.value.status == 408
    assert elapsed < 1.0
    assert state["calls"] == 1
    assert state["cancelled"] is True


@pytest.mark.asyncio
async def test_per_call_timeout_overrides_client_default(state):
    config = ClientConfig(
        base_url="https://example.com",
        timeout=0.5,
        httpx_client=httpx.AsyncClient(transport=delayed_transport(0.3, state)),
    )
    async with RequestExecutor(config) as client:
        with pytest.raises(ApiTimeoutError):
            await client.execute("GET", "/slow", timeout=0.2)

        # Same client, no override: 0.3s delay fits in the 0.5s default
        assert await client.execute("GET", "/slow") == {"ok": True}


@pytest.mark.asyncio
async def test_timer_released_on_success(monkeypatch):
    loop = asyncio.get_running_loop()
    handles = []
    original_call_later = loop.call_later

    def spy_call_later(*args, **kwargs):
        handle = original_call_later(*args, **kwargs)
        handles.append(handle)
        return handle

    monkeypatch.setattr(loop, "call_later", spy_call_later)

    async with RequestExecutor(ClientConfig(base_url="https://example.com")) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/fast").respond(200, json={})
            await client.execute("GET", "/fast")

    assert handles
    assert all(handle.cancelled() for handle in handles)


@pytest.mark.asyncio
async def test_no_pending_tasks_after_timeout(state):
    config = ClientConfig(
        base_url="https://example.com",
        timeout=0.05,
        httpx_client=httpx.AsyncClient(transport=delayed_transport(5.0, state)),
    )
    async with RequestExecutor(config) as client:
        with pytest.raises(ApiTimeoutError):
            await client.execute("GET", "/slow")

    await asyncio.sleep(0)
    await asyncio.sleep(0)
    pending = [t for t in asyncio.all_tasks() if t is not asyncio.current_task() and not t.done()]
    assert pending == []


@pytest.mark.asyncio
async def test_external_signal_cancels_request(state):
    config = ClientConfig(
        base_url="https://example.com",
        timeout=10.0,
        httpx_client=httpx.AsyncClient(transport=delayed_transport(5.0, state)),
    )
    signal = CancellationToken()
    async with RequestExecutor(config) as client:
        asyncio.get_running_loop().call_later(0.05, signal.cancel)
        with pytest.raises(ApiCancelledError) as exc:
            await client.execute("GET", "/slow", signal=signal)

    assert exc.value.status == 499
    assert state["cancelled"] is True


@pytest.mark.asyncio
async def test_already_cancelled_signal_sends_nothing():
    signal = CancellationToken()
    signal.cancel()
    async with RequestExecutor(ClientConfig(base_url="https://example.com")) as client:
        with respx.mock(base_url="https://example.com", assert_all_called=False) as mock:
            route = mock.get("/test").respond(200)
            with pytest.raises(ApiCancelledError):
                await client.execute("GET", "/test", signal=signal)
            assert not route.called


@pytest.mark.asyncio
async def test_http_error_uses_json_message():
    async with RequestExecutor(ClientConfig(base_url="https://example.com")) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/missing").respond(404, json={"message": "Post not found"})

            with pytest.raises(ApiHttpError) as exc:
                await client.execute("GET", "/missing")

    assert exc.value.status == 404
    assert exc.value.message == "Post not found"


@pytest.mark.asyncio
async def test_http_error_generic_fallback():
    async with RequestExecutor(ClientConfig(base_url="https://example.com")) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/broken").respond(500)

            with pytest.raises(ApiHttpError) as exc:
                await client.execute("GET", "/broken")

    assert exc.value.status == 500
    assert exc.value.message == "Request failed"


@pytest.mark.asyncio
async def test_network_error_is_503():
    async with RequestExecutor(ClientConfig(base_url="https://example.com")) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/down").mock(side_effect=httpx.ConnectError("connection refused"))

            with pytest.raises(ApiNetworkError) as exc:
                await client.execute("GET", "/down")

    assert exc.value.status == 503
    assert isinstance(exc.value.original_error, httpx.ConnectError)


@pytest.mark.asyncio
async def test_transport_timeout_is_408():
    async with RequestExecutor(ClientConfig(base_url="https://example.com")) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/slow").mock(side_effect=httpx.ReadTimeout("read timed out"))

            with pytest.raises(ApiTimeoutError):
                await client.execute("GET", "/slow")


@pytest.mark.asyncio
async def test_unexpected_transport_failure_is_500():
    async with RequestExecutor(ClientConfig(base_url="https://example.com")) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/weird").mock(side_effect=RuntimeError("kaboom"))

            with pytest.raises(ApiUnknownError) as exc:
                await client.execute("GET", "/weird")

    assert exc.value.status == 500
    assert "kaboom" in exc.value.message


@pytest.mark.asyncio
async def test_malformed_json_body():
    async with RequestExecutor(ClientConfig(base_url="https://example.com")) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/bad-json").respond(
                200, content=b"{not json", headers={"Content-Type": "application/json"}
            )

            with pytest.raises(ResponseDecodeError) as exc:
                await client.execute("GET", "/bad-json")

    assert exc.value.status == 500


@pytest.mark.asyncio
async def test_request_interceptor_adds_authorization_once():
    config = ClientConfig(
        base_url="https://example.com",
        interceptor=Interceptor(request=bearer_auth("from-interceptor")),
    )
    async with RequestExecutor(config) as client:
        with respx.mock(base_url="https://example.com") as mock:
            route = mock.route().respond(200, json={})

            await client.execute("GET", "/a")
            await client.execute("POST", "/b", body={"x": 1}, token="per-call")
            await client.execute("DELETE", "/c")

    assert route.call_count == 3
    for call in route.calls:
        assert call.request.headers.get_list("authorization") == ["Bearer from-interceptor"]


@pytest.mark.asyncio
async def test_request_interceptor_may_be_async():
    async def add_trace(options: RequestOptions) -> RequestOptions:
        return options.with_header("X-Trace-Id", "abc")

    config = ClientConfig(base_url="https://example.com", interceptor=Interceptor(request=add_trace))
    async with RequestExecutor(config) as client:
        with respx.mock(base_url="https://example.com") as mock:
            route = mock.get("/a").respond(200, json={})
            await client.execute("GET", "/a")

    assert route.calls.last.request.headers["X-Trace-Id"] == "abc"


@pytest.mark.asyncio
async def test_request_interceptor_error_propagates_unwrapped():
    error = InterceptorBoom("no credentials")

    def failing(options: RequestOptions) -> RequestOptions:
        raise error

    config = ClientConfig(base_url="https://example.com", interceptor=Interceptor(request=failing))
    async with RequestExecutor(config) as client:
        with respx.mock(base_url="https://example.com", assert_all_called=False) as mock:
            route = mock.get("/a").respond(200)
            with pytest.raises(InterceptorBoom) as exc:
                await client.execute("GET", "/a")
            assert not route.called

    assert exc.value is error


@pytest.mark.asyncio
async def test_request_interceptor_must_return_options():
    config = ClientConfig(
        base_url="https://example.com",
        interceptor=Interceptor(request=lambda options: {"headers": {}}),
    )
    async with RequestExecutor(config) as client:
        with pytest.raises(TypeError):
            await client.execute("GET", "/a")


@pytest.mark.asyncio
async def test_response_interceptor_reshapes_payload():
    async def unwrap(response: httpx.Response):
        return response.json()["data"]

    config = ClientConfig(base_url="https://example.com", interceptor=Interceptor(response=unwrap))
    async with RequestExecutor(config) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/wrapped").respond(200, json={"data": [1, 2, 3]})
            assert await client.execute("GET", "/wrapped") == [1, 2, 3]


@pytest.mark.asyncio
async def test_response_interceptor_error_propagates_unwrapped():
    error = InterceptorBoom("bad shape")

    def failing(response: httpx.Response):
        raise error

    config = ClientConfig(base_url="https://example.com", interceptor=Interceptor(response=failing))
    async with RequestExecutor(config) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/a").respond(200, json={})
            with pytest.raises(InterceptorBoom) as exc:
                await client.execute("GET", "/a")

    assert exc.value is error


@pytest.mark.asyncio
async def test_response_interceptor_skipped_for_http_errors():
    calls = []
    config = ClientConfig(
        base_url="https://example.com",
        interceptor=Interceptor(response=lambda response: calls.append(response)),
    )
    async with RequestExecutor(config) as client:
        with respx.mock(base_url="https://example.com") as mock:
            mock.get("/missing").respond(404, text="gone")
            with pytest.raises(ApiHttpError) as exc:
                await client.execute("GET", "/missing")

    assert exc.value.message == "gone"
    assert calls == []


@pytest.mark.asyncio
async def test_concurrent_calls_are_independent(state):
    config = ClientConfig(
        base_url="https://example.com",
        timeout=1.0,
        httpx_client=httpx.AsyncClient(transport=delayed_transport(0.05, state)),
    )
    async with RequestExecutor(config) as client:
        results = await asyncio.gather(
            *(client.execute("GET", f"/item/{i}") for i in range(5))
        )

    assert results == [{"ok": True}] * 5
    assert state["calls"] == 5
