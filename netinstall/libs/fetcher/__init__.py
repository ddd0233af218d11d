"""Asynchronous group document fetcher."""

from netinstall.libs.fetcher.async_fetcher import (
    FAKE_USER_AGENT,
    AsyncFetcher,
    FetchHandle,
    RequestOptions,
)

__all__ = ["AsyncFetcher", "FetchHandle", "RequestOptions", "FAKE_USER_AGENT"]
