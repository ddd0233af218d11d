"""Asynchronous HTTP fetching of group documents.

`AsyncFetcher` keeps at most one request in flight. The request runs as an
asyncio task; when it finishes, the event loop invokes the completion
callback with the `FetchHandle` for that request, outside of the call stack
that started it.

Starting a new request while one is outstanding cancels and releases the
outstanding one first. A released handle never reaches its callback.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import httpx

from netinstall.core.errors import ConfigurationError, InternalError, TransportError
from netinstall.observability.logger import get_logger

logger = get_logger(__name__)

FAKE_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"
DEFAULT_TIMEOUT = 30.0
SUPPORTED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class RequestOptions:
    """Fixed options applied to every request."""

    fake_user_agent: bool = True
    follow_redirects: bool = True
    timeout: float = DEFAULT_TIMEOUT
    headers: Mapping[str, str] = field(default_factory=dict)

    def request_headers(self) -> dict[str, str]:
        headers = dict(self.headers)
        if self.fake_user_agent:
            headers.setdefault("User-Agent", FAKE_USER_AGENT)
        return headers


FinishedCallback = Callable[["FetchHandle"], None]


class FetchHandle:
    """The loader's reference to one in-flight request.

    Usable as a context manager; leaving the block releases the handle,
    which cancels the request if it is still running and drops the payload.
    """

    def __init__(self, url: httpx.URL) -> None:
        self.url = url
        self._task: asyncio.Task[None] | None = None
        self._callback: Callable[[asyncio.Task[None]], None] | None = None
        self._payload = b""
        self._error: str | None = None
        self._status_code: int | None = None
        self._released = False

    def __enter__(self) -> "FetchHandle":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"FetchHandle(url={str(self.url)!r}, finished={self.finished}, released={self._released})"

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    @property
    def finished(self) -> bool:
        return self._task is not None and self._task.done() and not self._task.cancelled()

    @property
    def released(self) -> bool:
        return self._released

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def size(self) -> int:
        return len(self._payload)

    @property
    def error(self) -> str | None:
        """Transport error text, or None when the transfer succeeded."""

        if self._error is not None:
            return self._error
        if self.finished:
            assert self._task is not None
            exception = self._task.exception()
            if exception is not None:
                return f"{type(exception).__name__}: {exception}"
        return None

    def read_all(self) -> bytes:
        return self._payload

    def raise_for_error(self) -> None:
        error = self.error
        if error is not None:
            raise TransportError(
                f"Request for url {self.url} failed with: {error}",
                {"url": str(self.url), "status_code": self._status_code},
            )

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._payload = b""

        task = self._task
        if task is None:
            return
        if self._callback is not None:
            task.remove_done_callback(self._callback)
        if not task.done():
            task.cancel()
        elif not task.cancelled():
            # Mark a crashed task's exception as retrieved.
            task.exception()

    def _attach(self, task: asyncio.Task[None], callback: Callable[[asyncio.Task[None]], None]) -> None:
        self._task = task
        self._callback = callback
        task.add_done_callback(callback)

    def _complete(self, payload: bytes, status_code: int) -> None:
        self._payload = payload
        self._status_code = status_code

    def _fail(self, error: str, status_code: int | None = None) -> None:
        self._error = error
        self._status_code = status_code


class AsyncFetcher:
    """Issues one outstanding GET at a time and reports its completion once."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        options: RequestOptions | None = None,
    ) -> None:
        self.options = options or RequestOptions()
        self._client = client
        self._owns_client = client is None
        self._pending: FetchHandle | None = None

    @property
    def pending(self) -> FetchHandle | None:
        return self._pending

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    @staticmethod
    def _validate(url: str) -> httpx.URL:
        if not url or not url.strip():
            raise ConfigurationError("Empty URL for group data")
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"Invalid URL {url!r}: {e}") from e
        if parsed.scheme not in SUPPORTED_SCHEMES or not parsed.host:
            raise ConfigurationError(f"Unsupported URL {url!r}: expected an http(s) URL with a host")
        return parsed

    def fetch(self, url: str, on_finished: FinishedCallback) -> FetchHandle:
        """Start a GET for `url`; `on_finished` receives the handle when it completes.

        Raises `ConfigurationError` without starting anything when the URL is
        unusable or there is no running event loop to start the request on.
        """

        parsed = self._validate(url)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise ConfigurationError(f"Cannot start request for {url!r}: no running event loop") from e

        if self._pending is not None:
            logger.debug("Replacing outstanding request for %s", self._pending.url)
            self.cancel()

        handle = FetchHandle(parsed)
        task = loop.create_task(self._perform(handle))
        handle._attach(task, lambda _task: self._deliver(handle, on_finished))
        self._pending = handle
        return handle

    async def _perform(self, handle: FetchHandle) -> None:
        client = self._get_client()
        try:
            response = await client.get(
                handle.url,
                headers=self.options.request_headers(),
                follow_redirects=self.options.follow_redirects,
                timeout=self.options.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            handle._fail(
                f"HTTP {e.response.status_code} {e.response.reason_phrase}",
                status_code=e.response.status_code,
            )
            return
        except httpx.HTTPError as e:
            handle._fail(str(e) or type(e).__name__)
            return

        handle._complete(response.content, response.status_code)

    def _deliver(self, handle: FetchHandle, on_finished: FinishedCallback) -> None:
        if handle.released:
            return
        task = handle.task
        if task is not None and task.cancelled():
            # Cancelled from outside, e.g. by event loop shutdown.
            logger.debug("Request for %s was cancelled", handle.url)
            if self._pending is handle:
                self._pending = None
            handle.release()
            return
        on_finished(handle)

    def take_finished(self, handle: FetchHandle | None) -> FetchHandle:
        """Hand over ownership of the finished pending request.

        Raises `InternalError` when `handle` is not the pending request or has
        not finished. The delivered handle and the pending request are both
        released in that case, so nothing from the failed attempt is delivered.
        """

        pending = self._pending
        if handle is None or pending is None or handle is not pending or not handle.finished:
            if handle is not None:
                handle.release()
            self.cancel()
            raise InternalError(
                "Group data delivered without a finished pending request",
                {"handle": repr(handle), "pending": repr(pending)},
            )
        self._pending = None
        return handle

    def cancel(self) -> None:
        """Abort and release the outstanding request, if any."""

        handle, self._pending = self._pending, None
        if handle is not None:
            handle.release()

    async def join(self) -> None:
        """Wait until the outstanding request, if any, has been delivered."""

        handle = self._pending
        if handle is None or handle.task is None:
            return
        await asyncio.wait({handle.task})
        # Let the completion callback run before returning.
        await asyncio.sleep(0)

    async def aclose(self) -> None:
        self.cancel()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
