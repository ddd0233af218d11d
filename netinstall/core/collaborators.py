"""Contracts for the collaborators the loader publishes to.

The loader never looks these up globally; `NetInstallConfig` receives them
as constructor arguments. The in-memory implementations back the command
line entry point and the tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from netinstall.core.types import GroupRecord

_MISSING = object()


class GroupModel(ABC):
    """Selectable-group model that takes ownership of published records."""

    @abstractmethod
    def setup_model_data(self, groups: list[GroupRecord]) -> None:
        pass

    @abstractmethod
    def row_count(self) -> int:
        pass


class GlobalStorage(ABC):
    """Process-wide key/value store used to pass data between modules."""

    @abstractmethod
    def insert(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def value(self, key: str, default: Any = None) -> Any:
        pass

    def contains(self, key: str) -> bool:
        return self.value(key, _MISSING) is not _MISSING


class ConfigObserver:
    """Receives notifications from `NetInstallConfig`.

    All methods are no-ops; subclasses override the ones they care about.
    """

    def status_changed(self, message: str) -> None:
        return None

    def status_ready(self) -> None:
        return None

    def sidebar_label_changed(self, label: str) -> None:
        return None

    def title_label_changed(self, label: str) -> None:
        return None


class InMemoryGroupModel(GroupModel):
    def __init__(self) -> None:
        self.groups: list[GroupRecord] = []

    def setup_model_data(self, groups: list[GroupRecord]) -> None:
        self.groups = groups

    def row_count(self) -> int:
        return len(self.groups)


class InMemoryGlobalStorage(GlobalStorage):
    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def insert(self, key: str, value: Any) -> None:
        self._data[key] = value

    def value(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)


class RecordingObserver(ConfigObserver):
    """Observer that keeps every notification it receives, in order."""

    def __init__(self) -> None:
        self.status_messages: list[str] = []
        self.ready_count = 0
        self.sidebar_labels: list[str] = []
        self.title_labels: list[str] = []

    def status_changed(self, message: str) -> None:
        self.status_messages.append(message)

    def status_ready(self) -> None:
        self.ready_count += 1

    def sidebar_label_changed(self, label: str) -> None:
        self.sidebar_labels.append(label)

    def title_label_changed(self, label: str) -> None:
        self.title_labels.append(label)
