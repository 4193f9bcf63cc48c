"""Logging configuration for agentcloud.

Library logging is silent until an application installs handlers.

Example:
    from agentcloud.observability.logging import LogConfig, setup_logging

    handler_ids = setup_logging(LogConfig(level="DEBUG", console=True))
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeAlias

from agentcloud.observability.logger import logger

LogLevel: TypeAlias = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Logging configuration.

    Attributes:
        level: Minimum log level for the console handler.
        file: Path to log file. ``None`` disables file logging.
        console: Whether to log to stderr through rich.
        rotation: File rotation size (e.g. "50 MB").
        retention: Number of rotated files to keep.
    """

    level: LogLevel = "INFO"
    file: str | None = ".agentcloud/agentcloud.log"
    console: bool = False
    rotation: str = "50 MB"
    retention: int = 10


def setup_logging(config: LogConfig) -> list[int]:
    """Install handlers for ``config`` and return their ids for teardown."""
    logger.remove()
    logger.enable()
    handler_ids: list[int] = []

    if config.console:
        handler_ids.append(logger.add(sys.stderr, level=config.level))

    if config.file:
        Path(config.file).parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(
            logger.add(
                config.file,
                level="DEBUG",
                rotation=config.rotation,
                retention=config.retention,
                compression=True,
            )
        )

    return handler_ids


def teardown_logging(handler_ids: list[int]) -> None:
    for hid in handler_ids:
        logger.remove(hid)
