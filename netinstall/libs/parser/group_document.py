"""Parsing of package-group documents.

A group document is YAML whose top level is either a list of groups, or a
mapping with a `groups` list. The groups themselves are passed on untouched.
"""

from __future__ import annotations

from typing import Any

import yaml

from netinstall.core.errors import DataError
from netinstall.core.types import GroupRecord
from netinstall.observability.logger import get_logger

logger = get_logger(__name__)

# Lines of payload quoted on either side of the line a YAML error points at.
CONTEXT_LINES = 2


def explain_yaml_error(error: yaml.YAMLError, payload: bytes, label: str) -> str:
    """Describe where and why `payload` failed to parse, quoting the payload."""

    mark = getattr(error, "problem_mark", None) or getattr(error, "context_mark", None)
    problem = getattr(error, "problem", None) or str(error)
    text = payload.decode("utf-8", errors="replace")

    if mark is None:
        return f"YAML error in {label}: {problem}\n{text}"

    lines = text.splitlines()
    first = max(mark.line - CONTEXT_LINES, 0)
    last = min(mark.line + CONTEXT_LINES + 1, len(lines))
    explanation = [
        f"YAML error in {label} at line {mark.line + 1}, column {mark.column + 1}: {problem}",
    ]
    for index in range(first, last):
        explanation.append(f"{index + 1:>4} | {lines[index]}")
        if index == mark.line:
            explanation.append("     | " + " " * mark.column + "^")
    return "\n".join(explanation)


def _log_raw_payload(payload: bytes, label: str) -> None:
    logger.debug("Raw %s payload:\n%s", label, payload.decode("utf-8", errors="replace"))


def _load(payload: bytes, label: str) -> Any:
    try:
        return yaml.safe_load(payload)
    except RecursionError as e:
        # PyYAML composes nested collections recursively.
        _log_raw_payload(payload, label)
        raise DataError(
            f"Invalid YAML in {label}",
            explanation=f"YAML error in {label}: document nests too deeply to be loaded",
        ) from e
    except yaml.YAMLError as e:
        _log_raw_payload(payload, label)
        mark = getattr(e, "problem_mark", None)
        raise DataError(
            f"Invalid YAML in {label}",
            line=mark.line + 1 if mark is not None else None,
            column=mark.column + 1 if mark is not None else None,
            explanation=explain_yaml_error(e, payload, label),
        ) from e


def parse_group_document(
    payload: bytes, label: str = "netinstall groups data"
) -> list[GroupRecord] | None:
    """Extract the group records from `payload`.

    Returns the records (possibly an empty list), or None when the document
    parses but has no usable shape. Raises `DataError` when the payload is
    not YAML.
    """

    document = _load(payload, label)

    if isinstance(document, list):
        return list(document)
    if isinstance(document, dict) and isinstance(document.get("groups"), list):
        return list(document["groups"])

    logger.warning("NetInstall groups data does not form a sequence.")
    return None
