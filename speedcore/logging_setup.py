"""Centralized logging configuration."""

from __future__ import annotations

import logging
import sys


def configure_logging(debug: bool = False) -> None:
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    root_logger.addHandler(console_handler)

    # Library chatter stays out of debug output.
    for name in ("icmplib", "asyncio", "aiohttp"):
        logging.getLogger(name).setLevel(logging.WARNING)
