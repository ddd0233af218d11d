"""Module configuration loading and validation.

This module turns the loosely-typed netinstall configuration map into a
typed `NetInstallSettings` once, at the `configure` boundary.

Design principles:
- Fail-fast: invalid fields raise a readable error that includes the field path
- Deterministic defaults: absent optional keys get fixed defaults, unknown keys are ignored
- No side effects: this module only parses/validates configuration; no network I/O
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from netinstall.core.errors import ConfigurationError
from netinstall.core.types import GroupRecord, TranslatedString


class SettingsError(ConfigurationError):
    """Raised when the module configuration is missing or invalid."""


@dataclass(frozen=True)
class NetInstallSettings:
    required: bool = False
    sidebar_label: TranslatedString | None = None
    title_label: TranslatedString | None = None
    # Scalar `groupsUrl`; the only value that triggers a load.
    groups_url: str | None = None
    # Every `groupsUrl` entry, scalar or list form, in configuration order.
    groups_urls: tuple[str, ...] = ()
    groups: list[GroupRecord] = field(default_factory=list)


def _optional_section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SettingsError(f"Invalid section type: {key}")
    return value


def _as_bool(value: Any, path: str) -> bool:
    if not isinstance(value, bool):
        raise SettingsError(f"Invalid value for {path}: expected bool")
    return value


def _as_str_list(value: Any, path: str) -> list[str]:
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        raise SettingsError(f"Invalid value for {path}: expected list[str]")
    out: list[str] = []
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise SettingsError(f"Invalid value for {path}[{i}]: expected str")
        out.append(item)
    return out


def _as_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise SettingsError(f"Invalid value for {path}: expected list")
    return list(value)


def _label(label_raw: Mapping[str, Any], key: str) -> TranslatedString | None:
    if key not in label_raw:
        return None
    try:
        return TranslatedString.from_map(label_raw, key)
    except ValueError as e:
        raise SettingsError(f"Invalid value for label.{e}") from e


def parse_settings(raw: Any) -> NetInstallSettings:
    """Validate a configuration map and return typed settings."""

    if not isinstance(raw, Mapping):
        raise SettingsError("Invalid configuration root: expected mapping")

    label_raw = _optional_section(raw, "label")

    groups_url: str | None = None
    groups_urls: tuple[str, ...] = ()
    groups_url_raw = raw.get("groupsUrl")
    if isinstance(groups_url_raw, str):
        groups_url = groups_url_raw
        groups_urls = (groups_url_raw,)
    elif groups_url_raw is not None:
        groups_urls = tuple(_as_str_list(groups_url_raw, "groupsUrl"))

    groups_raw = raw.get("groups")
    groups = [] if groups_raw is None else _as_list(groups_raw, "groups")

    return NetInstallSettings(
        required=_as_bool(raw.get("required", False), "required"),
        sidebar_label=_label(label_raw, "sidebar"),
        title_label=_label(label_raw, "title"),
        groups_url=groups_url,
        groups_urls=groups_urls,
        groups=groups,
    )


def load_configuration_map(path: str | Path) -> dict[str, Any]:
    """Load a netinstall module configuration map from a YAML file."""

    config_path = Path(path)
    if not config_path.exists():
        raise SettingsError(f"Configuration file not found: {config_path}")

    try:
        raw_obj = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in configuration file: {config_path}") from e

    if raw_obj is None or not isinstance(raw_obj, Mapping):
        raise SettingsError(f"Invalid configuration root: expected mapping in {config_path}")

    return dict(raw_obj)
