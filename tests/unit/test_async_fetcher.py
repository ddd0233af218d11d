"""Unit tests for the asynchronous group document fetcher.

HTTP is simulated with `httpx.MockTransport`; nothing leaves the process.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from netinstall.core.errors import ConfigurationError, InternalError, TransportError
from netinstall.libs.fetcher import FAKE_USER_AGENT, AsyncFetcher, FetchHandle, RequestOptions

GROUPS_URL = "https://example.org/netinstall/groups.yaml"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def make_fetcher(handler: Any, options: RequestOptions | None = None) -> tuple[AsyncFetcher, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AsyncFetcher(client=client, options=options), client


def ok_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"- name: A\n")


# -----------------------------------------------------------------------------
# Options
# -----------------------------------------------------------------------------


@pytest.mark.unit
class TestRequestOptions:
    """The fixed request options."""

    def test_defaults(self) -> None:
        options = RequestOptions()
        assert options.fake_user_agent is True
        assert options.follow_redirects is True
        assert options.timeout == 30.0

    def test_headers_include_fake_user_agent(self) -> None:
        assert RequestOptions().request_headers() == {"User-Agent": FAKE_USER_AGENT}

    def test_static_headers_are_kept(self) -> None:
        headers = RequestOptions(headers={"X-Token": "abc"}).request_headers()
        assert headers == {"X-Token": "abc", "User-Agent": FAKE_USER_AGENT}

    def test_user_agent_can_be_disabled(self) -> None:
        assert RequestOptions(fake_user_agent=False).request_headers() == {}


# -----------------------------------------------------------------------------
# Starting requests
# -----------------------------------------------------------------------------


@pytest.mark.unit
class TestFetchStart:
    """`fetch` either starts exactly one request or fails immediately."""

    @pytest.mark.parametrize(
        "url",
        ["", "   ", "not a url", "http://", "ftp://example.org/groups.yaml", "/relative/groups.yaml"],
    )
    def test_invalid_urls_fail_immediately(self, url: str) -> None:
        calls: list[httpx.Request] = []

        async def _run() -> AsyncFetcher:
            fetcher, client = make_fetcher(lambda request: calls.append(request) or ok_handler(request))
            async with client:
                with pytest.raises(ConfigurationError):
                    fetcher.fetch(url, lambda handle: None)
                await asyncio.sleep(0)
            return fetcher

        fetcher = asyncio.run(_run())

        assert fetcher.pending is None
        assert calls == []

    def test_no_running_loop_fails_immediately(self) -> None:
        """Without an event loop the transport cannot be started."""
        fetcher = AsyncFetcher()

        with pytest.raises(ConfigurationError, match="no running event loop"):
            fetcher.fetch(GROUPS_URL, lambda handle: None)
        assert fetcher.pending is None

    def test_fetch_keeps_one_pending_handle(self) -> None:
        async def _run() -> tuple[FetchHandle, FetchHandle | None, bool]:
            fetcher, client = make_fetcher(ok_handler)
            async with client:
                handle = fetcher.fetch(GROUPS_URL, lambda h: None)
                pending = fetcher.pending
                finished_before = handle.finished
                await fetcher.join()
            return handle, pending, finished_before

        handle, pending, finished_before = asyncio.run(_run())

        assert pending is handle
        assert finished_before is False

    def test_completion_is_not_delivered_synchronously(self) -> None:
        delivered: list[FetchHandle] = []

        async def _run() -> int:
            fetcher, client = make_fetcher(ok_handler)
            async with client:
                fetcher.fetch(GROUPS_URL, delivered.append)
                during_call = len(delivered)
                await fetcher.join()
            return during_call

        assert asyncio.run(_run()) == 0
        assert len(delivered) == 1


# -----------------------------------------------------------------------------
# Completion
# -----------------------------------------------------------------------------


@pytest.mark.unit
class TestFetchCompletion:
    """What the handle reports once the request is done."""

    def test_success_payload_and_request_options(self) -> None:
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["user_agent"] = request.headers.get("User-Agent")
            seen["token"] = request.headers.get("X-Token")
            seen["timeout"] = request.extensions.get("timeout")
            return httpx.Response(200, content=b"- name: A\n")

        delivered: list[FetchHandle] = []

        async def _run() -> None:
            fetcher, client = make_fetcher(handler, RequestOptions(headers={"X-Token": "abc"}))
            async with client:
                fetcher.fetch(GROUPS_URL, delivered.append)
                await fetcher.join()

        asyncio.run(_run())

        assert len(delivered) == 1
        handle = delivered[0]
        assert handle.finished
        assert handle.error is None
        assert handle.status_code == 200
        assert handle.read_all() == b"- name: A\n"
        assert handle.size == len(b"- name: A\n")
        assert seen["user_agent"] == FAKE_USER_AGENT
        assert seen["token"] == "abc"
        assert seen["timeout"]["read"] == 30.0

    def test_redirects_are_followed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old.yaml":
                return httpx.Response(302, headers={"Location": "https://example.org/new.yaml"})
            return httpx.Response(200, content=b"[]")

        delivered: list[FetchHandle] = []

        async def _run() -> None:
            fetcher, client = make_fetcher(handler)
            async with client:
                fetcher.fetch("https://example.org/old.yaml", delivered.append)
                await fetcher.join()

        asyncio.run(_run())

        assert delivered[0].error is None
        assert delivered[0].read_all() == b"[]"

    @pytest.mark.parametrize(
        "exception",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
        ],
    )
    def test_transport_errors(self, exception: Exception) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise exception

        delivered: list[FetchHandle] = []

        async def _run() -> None:
            fetcher, client = make_fetcher(handler)
            async with client:
                fetcher.fetch(GROUPS_URL, delivered.append)
                await fetcher.join()

        asyncio.run(_run())

        handle = delivered[0]
        assert handle.finished
        assert handle.error == str(exception)
        with pytest.raises(TransportError):
            handle.raise_for_error()

    def test_http_error_status(self) -> None:
        delivered: list[FetchHandle] = []

        async def _run() -> None:
            fetcher, client = make_fetcher(lambda request: httpx.Response(404))
            async with client:
                fetcher.fetch(GROUPS_URL, delivered.append)
                await fetcher.join()

        asyncio.run(_run())

        assert delivered[0].error == "HTTP 404 Not Found"
        assert delivered[0].status_code == 404

    def test_unexpected_exception_is_reported_as_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise RuntimeError("handler exploded")

        delivered: list[FetchHandle] = []

        async def _run() -> None:
            fetcher, client = make_fetcher(handler)
            async with client:
                fetcher.fetch(GROUPS_URL, delivered.append)
                await fetcher.join()

        asyncio.run(_run())

        assert delivered[0].error == "RuntimeError: handler exploded"


# -----------------------------------------------------------------------------
# Ownership, replacement and teardown
# -----------------------------------------------------------------------------


@pytest.mark.unit
class TestFetchOwnership:
    """One outstanding request; released handles never deliver."""

    def test_second_fetch_replaces_first(self) -> None:
        delivered: list[FetchHandle] = []

        async def _run() -> tuple[FetchHandle, FetchHandle]:
            fetcher, client = make_fetcher(ok_handler)
            async with client:
                first = fetcher.fetch("https://example.org/first.yaml", delivered.append)
                second = fetcher.fetch("https://example.org/second.yaml", delivered.append)
                assert fetcher.pending is second
                await fetcher.join()
                await asyncio.sleep(0)
            return first, second

        first, second = asyncio.run(_run())

        assert first.released
        assert first.task is not None and first.task.cancelled()
        assert delivered == [second]

    def test_invalid_second_fetch_keeps_first(self) -> None:
        async def _run() -> tuple[FetchHandle, FetchHandle | None]:
            fetcher, client = make_fetcher(ok_handler)
            async with client:
                first = fetcher.fetch(GROUPS_URL, lambda h: None)
                with pytest.raises(ConfigurationError):
                    fetcher.fetch("", lambda h: None)
                pending = fetcher.pending
                await fetcher.join()
            return first, pending

        first, pending = asyncio.run(_run())

        assert pending is first

    def test_cancel_in_flight_request(self) -> None:
        delivered: list[FetchHandle] = []

        async def _run() -> FetchHandle:
            request_started = asyncio.Event()
            never = asyncio.Event()

            async def handler(request: httpx.Request) -> httpx.Response:
                request_started.set()
                await never.wait()
                return httpx.Response(200)

            fetcher, client = make_fetcher(handler)
            async with client:
                handle = fetcher.fetch(GROUPS_URL, delivered.append)
                await request_started.wait()
                fetcher.cancel()
                for _ in range(3):
                    await asyncio.sleep(0)
                assert fetcher.pending is None
            return handle

        handle = asyncio.run(_run())

        assert handle.released
        assert handle.task is not None and handle.task.cancelled()
        assert delivered == []

    def test_take_finished(self) -> None:
        async def _run() -> None:
            fetcher, client = make_fetcher(ok_handler)
            async with client:
                handle = fetcher.fetch(GROUPS_URL, lambda h: None)
                await asyncio.wait({handle.task})
                assert fetcher.take_finished(handle) is handle
                assert fetcher.pending is None
                assert not handle.released
                handle.release()

        asyncio.run(_run())

    def test_take_unfinished_raises_and_releases(self) -> None:
        async def _run() -> FetchHandle:
            fetcher, client = make_fetcher(ok_handler)
            async with client:
                handle = fetcher.fetch(GROUPS_URL, lambda h: None)
                with pytest.raises(InternalError):
                    fetcher.take_finished(handle)
                assert fetcher.pending is None
            return handle

        assert asyncio.run(_run()).released

    def test_take_stray_handle_cancels_pending(self) -> None:
        """A handle that is not the pending one invalidates the pending request too."""
        delivered: list[FetchHandle] = []

        async def _run() -> tuple[FetchHandle, FetchHandle, FetchHandle | None]:
            fetcher, client = make_fetcher(ok_handler)
            async with client:
                pending = fetcher.fetch(GROUPS_URL, delivered.append)
                stray = FetchHandle(httpx.URL(GROUPS_URL))
                with pytest.raises(InternalError):
                    fetcher.take_finished(stray)
                for _ in range(3):
                    await asyncio.sleep(0)
            return pending, stray, fetcher.pending

        pending, stray, left_pending = asyncio.run(_run())

        assert stray.released
        assert pending.released
        assert left_pending is None
        assert delivered == []

    def test_take_without_pending_raises(self) -> None:
        fetcher = AsyncFetcher()

        with pytest.raises(InternalError):
            fetcher.take_finished(None)

        stray = FetchHandle(httpx.URL(GROUPS_URL))
        with pytest.raises(InternalError):
            fetcher.take_finished(stray)
        assert stray.released

    def test_handle_context_manager_releases(self) -> None:
        handle = FetchHandle(httpx.URL(GROUPS_URL))
        handle._complete(b"payload", 200)

        with handle as reply:
            assert reply.read_all() == b"payload"

        assert handle.released
        assert handle.read_all() == b""

    def test_join_without_pending(self) -> None:
        asyncio.run(AsyncFetcher().join())

    def test_aclose_closes_owned_client(self) -> None:
        async def _run() -> AsyncFetcher:
            fetcher = AsyncFetcher()
            client = fetcher._get_client()
            await fetcher.aclose()
            assert client.is_closed
            return fetcher

        assert asyncio.run(_run())._client is None

    def test_aclose_leaves_injected_client_open(self) -> None:
        async def _run() -> bool:
            fetcher, client = make_fetcher(ok_handler)
            async with client:
                await fetcher.aclose()
                return client.is_closed

        assert asyncio.run(_run()) is False
