"""Logging setup for the CLI and the `::::: ` stage banners CI operators grep for."""

from __future__ import annotations

import logging


def configure_logging(*, debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def banner(logger: logging.Logger, *lines: str) -> None:
    logger.info(":::::")
    for line in lines:
        logger.info("::::: %s", line)
    logger.info(":::::")
