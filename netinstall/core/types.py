"""Shared data types for the group loader.

Rules:
- group records are opaque mappings; the loader never looks inside them
- translated strings keep every `key[locale]` variant found in the configuration
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

GroupRecord = dict[str, Any]


@dataclass(frozen=True)
class TranslatedString:
    """A configurable label with optional per-locale variants.

    The configuration spells variants as `sidebar[nl]` next to the plain
    `sidebar` key; the plain key is the fallback.
    """

    key: str
    default: str
    translations: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_map(cls, raw: Mapping[str, Any], key: str) -> "TranslatedString":
        default = raw.get(key)
        if not isinstance(default, str):
            raise ValueError(f"{key}: expected string")

        prefix = f"{key}["
        translations: dict[str, str] = {}
        for raw_key, value in raw.items():
            if not isinstance(raw_key, str):
                continue
            if raw_key.startswith(prefix) and raw_key.endswith("]"):
                locale = raw_key[len(prefix) : -1]
                if not locale:
                    continue
                if not isinstance(value, str):
                    raise ValueError(f"{raw_key}: expected string")
                translations[locale] = value
        return cls(key=key, default=default, translations=translations)

    def get(self, locale: str | None = None) -> str:
        if locale:
            if locale in self.translations:
                return self.translations[locale]
            # "nl_BE.UTF-8" and "sr@latin" fall back to the bare language
            language = locale.split(".", 1)[0].split("@", 1)[0].split("_", 1)[0]
            if language in self.translations:
                return self.translations[language]
        return self.default
