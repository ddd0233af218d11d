"""NetInstall configuration and group-data loading.

`NetInstallConfig` takes the module configuration map, works out where the
package groups come from, and loads them: embedded groups are published
immediately, a remote document is fetched asynchronously and parsed when it
arrives.

Two signals reach the host:
- `status_changed(message)` on every status transition; the message is
  empty when the status is OK and explains the failure otherwise.
- `status_ready()` once per attempt that produced usable (possibly empty)
  group data. When it does not fire, the status says why.
"""

from __future__ import annotations

from typing import Any, Mapping

from netinstall.core.collaborators import (
    ConfigObserver,
    GlobalStorage,
    GroupModel,
    InMemoryGlobalStorage,
    InMemoryGroupModel,
)
from netinstall.core.errors import ConfigurationError, DataError, InternalError, TransportError
from netinstall.core.settings import NetInstallSettings, SettingsError, parse_settings
from netinstall.core.sources import LOCAL_SENTINEL, Source, resolve_source
from netinstall.core.status import Status, Translator, status_message
from netinstall.core.types import GroupRecord
from netinstall.libs.fetcher import AsyncFetcher, FetchHandle
from netinstall.libs.parser import parse_group_document
from netinstall.observability.logger import get_logger

logger = get_logger(__name__)

GROUPS_URL_KEY = "groupsUrl"
DEFAULT_SIDEBAR_LABEL = "Package selection"


def _untranslated(text: str) -> str:
    return text


class NetInstallConfig:
    """Configuration state and group loading for the netinstall module."""

    def __init__(
        self,
        *,
        model: GroupModel | None = None,
        global_storage: GlobalStorage | None = None,
        observer: ConfigObserver | None = None,
        fetcher: AsyncFetcher | None = None,
        translate: Translator = _untranslated,
        locale: str | None = None,
    ) -> None:
        self.model = model if model is not None else InMemoryGroupModel()
        self.global_storage = global_storage if global_storage is not None else InMemoryGlobalStorage()
        self.observer = observer if observer is not None else ConfigObserver()
        self.fetcher = fetcher if fetcher is not None else AsyncFetcher()
        self.translate = translate
        self.locale = locale

        self._settings = NetInstallSettings()
        self._sources: list[Source] = []
        self._status = Status.OK

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def status(self) -> Status:
        return self._status

    @property
    def status_message(self) -> str:
        return status_message(self._status, self.translate)

    @property
    def required(self) -> bool:
        # Stored only; no status outcome depends on it.
        return self._settings.required

    @property
    def sources(self) -> tuple[Source, ...]:
        return tuple(self._sources)

    @property
    def sidebar_label(self) -> str:
        label = self._settings.sidebar_label
        return label.get(self.locale) if label is not None else self.translate(DEFAULT_SIDEBAR_LABEL)

    @property
    def title_label(self) -> str:
        label = self._settings.title_label
        return label.get(self.locale) if label is not None else ""

    def _set_status(self, status: Status) -> None:
        self._status = status
        self.observer.status_changed(self.status_message)

    def retranslate(self, locale: str | None = None) -> None:
        """Switch locale and re-announce every translated text."""

        if locale is not None:
            self.locale = locale
        self.observer.status_changed(self.status_message)
        self.observer.sidebar_label_changed(self.sidebar_label)
        self.observer.title_label_changed(self.title_label)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, configuration_map: Mapping[str, Any]) -> None:
        """Apply a configuration map and start loading the groups it names."""

        self.fetcher.cancel()
        self._sources = []
        if self._status.failed:
            self._set_status(Status.OK)

        try:
            settings = parse_settings(configuration_map)
        except SettingsError as e:
            logger.warning("NetInstall configuration is invalid: %s", e)
            self._settings = NetInstallSettings()
            self._set_status(e.status)
            return
        self._settings = settings

        if settings.sidebar_label is not None:
            self.observer.sidebar_label_changed(self.sidebar_label)
        if settings.title_label is not None:
            self.observer.title_label_changed(self.title_label)

        for groups_url in settings.groups_urls:
            self._sources.append(resolve_source(configuration_map, groups_url))

        # Only the scalar form of groupsUrl is loaded; a list only fills sources.
        groups_url = settings.groups_url
        if groups_url:
            self.global_storage.insert(GROUPS_URL_KEY, groups_url)
            if groups_url == LOCAL_SENTINEL:
                self.load_group_list(list(settings.groups))
            else:
                self.load_group_list_from_url(groups_url)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_group_list(self, groups: list[GroupRecord]) -> None:
        """Publish `groups` to the model and announce readiness."""

        self.model.setup_model_data(groups)
        self.observer.status_ready()

    def load_group_list_from_url(self, url: str) -> None:
        logger.debug("NetInstall loading groups from %s", url)
        try:
            self.fetcher.fetch(url, self.received_group_data)
        except ConfigurationError as e:
            logger.debug("NetInstall request failed immediately: %s", e)
            self._set_status(e.status)

    def received_group_data(self, handle: FetchHandle | None) -> None:
        """Completion callback for the outstanding group-data request."""

        try:
            reply = self.fetcher.take_finished(handle)
        except InternalError as e:
            logger.warning("NetInstall data called too early.")
            logger.debug("%s", e.to_dict())
            self._set_status(e.status)
            return

        with reply:
            logger.debug("NetInstall group data received %d bytes from %s", reply.size, reply.url)
            try:
                reply.raise_for_error()
                groups = parse_group_document(reply.read_all())
            except TransportError as e:
                logger.warning("unable to fetch netinstall package lists.")
                logger.debug("Request for url: %s failed with: %s", reply.url, e)
                self._set_status(e.status)
                return
            except DataError as e:
                logger.warning("%s", e.explanation or e)
                self._set_status(e.status)
                return

        if groups is None:
            return

        self.load_group_list(groups)
        if self.model.row_count() < 1:
            logger.warning("NetInstall groups data was empty.")

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def settled(self) -> None:
        """Wait for the outstanding request, if any, to be delivered."""

        await self.fetcher.join()

    def close(self) -> None:
        """Abort the outstanding request; its completion will not be delivered."""

        self.fetcher.cancel()

    async def aclose(self) -> None:
        await self.fetcher.aclose()
