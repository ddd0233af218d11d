"""Load status of the package-group data and its user-facing description."""

from __future__ import annotations

from enum import Enum
from typing import Callable, assert_never

Translator = Callable[[str], str]


class Status(Enum):
    """Outcome of the most recent load attempt.

    `OK` is the initial state and the state a new `configure` call resets to.
    Every other value is terminal for the attempt that produced it.
    """

    OK = "ok"
    FAILED_BAD_CONFIGURATION = "failed_bad_configuration"
    FAILED_BAD_DATA = "failed_bad_data"
    FAILED_INTERNAL_ERROR = "failed_internal_error"
    FAILED_NETWORK_ERROR = "failed_network_error"

    @property
    def failed(self) -> bool:
        return self is not Status.OK


def _untranslated(text: str) -> str:
    return text


def status_message(status: Status, translate: Translator = _untranslated) -> str:
    """Return the description shown to the user for `status` (empty when OK)."""

    match status:
        case Status.OK:
            return ""
        case Status.FAILED_BAD_CONFIGURATION:
            return translate("Network Installation. (Disabled: Incorrect configuration)")
        case Status.FAILED_BAD_DATA:
            return translate("Network Installation. (Disabled: Received invalid groups data)")
        case Status.FAILED_INTERNAL_ERROR:
            return translate("Network Installation. (Disabled: internal error)")
        case Status.FAILED_NETWORK_ERROR:
            return translate(
                "Network Installation. (Disabled: Unable to fetch package lists, "
                "check your network connection)"
            )
        case _:
            assert_never(status)
