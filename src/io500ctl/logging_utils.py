# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Logging setup shared by the CLI entry points."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging with a Rich handler on stderr.

    Safe to call more than once; later calls replace the handler.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[handler],
        force=True,
    )


def log_banner(logger: logging.Logger, message: str) -> None:
    """Log a message framed by separator lines."""
    logger.info("=" * 60)
    logger.info(message)
    logger.info("=" * 60)
