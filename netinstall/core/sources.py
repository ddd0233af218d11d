"""Resolution of `groupsUrl` entries into concrete sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from netinstall.core.types import GroupRecord

LOCAL_SENTINEL = "local"


@dataclass(frozen=True)
class Source:
    """Where group data comes from: embedded records or a remote URL."""

    url: str | None = None
    data: list[GroupRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.url is not None and self.data:
            raise ValueError("a remote source cannot carry embedded group data")

    @property
    def is_local(self) -> bool:
        return self.url is None


def resolve_source(configuration_map: Mapping[str, Any], groups_url: str) -> Source:
    """Turn one `groupsUrl` entry into a `Source`.

    The URL itself is not validated here; that happens when it is fetched.
    """

    if groups_url == LOCAL_SENTINEL:
        groups = configuration_map.get("groups")
        return Source(url=None, data=list(groups) if isinstance(groups, list) else [])
    return Source(url=groups_url)
