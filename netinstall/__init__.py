"""Remote package-group loader for network installation."""

from netinstall.core.collaborators import (
    ConfigObserver,
    GlobalStorage,
    GroupModel,
    InMemoryGlobalStorage,
    InMemoryGroupModel,
    RecordingObserver,
)
from netinstall.core.config import NetInstallConfig
from netinstall.core.errors import (
    ConfigurationError,
    DataError,
    InternalError,
    NetInstallError,
    TransportError,
)
from netinstall.core.settings import NetInstallSettings, SettingsError, load_configuration_map, parse_settings
from netinstall.core.sources import Source, resolve_source
from netinstall.core.status import Status, status_message
from netinstall.libs.fetcher import AsyncFetcher, FetchHandle, RequestOptions
from netinstall.libs.parser import parse_group_document

__version__ = "0.1.0"

__all__ = [
    "AsyncFetcher",
    "ConfigObserver",
    "ConfigurationError",
    "DataError",
    "FetchHandle",
    "GlobalStorage",
    "GroupModel",
    "InMemoryGlobalStorage",
    "InMemoryGroupModel",
    "InternalError",
    "NetInstallConfig",
    "NetInstallError",
    "NetInstallSettings",
    "RecordingObserver",
    "RequestOptions",
    "SettingsError",
    "Source",
    "Status",
    "TransportError",
    "load_configuration_map",
    "parse_group_document",
    "parse_settings",
    "resolve_source",
    "status_message",
]
