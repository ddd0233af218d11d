"""Command line entry point.

Loads a netinstall module configuration, runs one group load and reports
the outcome.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from netinstall.core.collaborators import InMemoryGroupModel, RecordingObserver
from netinstall.core.config import NetInstallConfig
from netinstall.core.settings import SettingsError, load_configuration_map
from netinstall.observability.logger import LOG_LEVELS, get_logger, set_level


async def run(
    configuration_map: dict, locale: str | None = None
) -> tuple[NetInstallConfig, InMemoryGroupModel, RecordingObserver]:
    model = InMemoryGroupModel()
    observer = RecordingObserver()
    config = NetInstallConfig(model=model, observer=observer, locale=locale)
    try:
        config.configure(configuration_map)
        await config.settled()
    finally:
        await config.aclose()
    return config, model, observer


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Load netinstall package groups")
    parser.add_argument("config", help="Path to the netinstall module configuration (YAML)")
    parser.add_argument("--locale", default=None, help="Locale used for labels, e.g. nl_BE")
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level",
    )
    args = parser.parse_args(argv)

    logger = get_logger("netinstall.cli")
    set_level(args.log_level)

    try:
        configuration_map = load_configuration_map(args.config)
    except SettingsError as e:
        logger.error(str(e))
        return 2

    config, model, observer = asyncio.run(run(configuration_map, args.locale))

    print(config.title_label or config.sidebar_label)
    for group in model.groups:
        name = group.get("name", "(unnamed)") if isinstance(group, dict) else str(group)
        print(f"  - {name}")
    if config.status_message:
        print(config.status_message)

    return 0 if observer.ready_count else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
