"""Entry point for running a bandwidth probe session."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from netprobe import bootstrap
from netprobe.config import DEFAULT_CONFIG_NAME

LOGGER = logging.getLogger("netprobe.main")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Local network transfer probe")
    parser.add_argument("--config", help="Path to config.yaml", default=DEFAULT_CONFIG_NAME)
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    # The default file is optional; an explicitly named one must exist.
    config_path = args.config
    if config_path == DEFAULT_CONFIG_NAME and not Path(config_path).exists():
        config_path = None
    try:
        context = bootstrap(config_path, args.log_level)
    except (OSError, TypeError, ValueError) as exc:
        LOGGER.critical("Invalid configuration: %s", exc)
        return 1

    try:
        asyncio.run(context.run())
    except OSError as exc:
        LOGGER.critical("Responder could not be started: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
