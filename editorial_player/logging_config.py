"""Logging configuration for the player."""

from __future__ import annotations

import logging

from .config import PlayerConfig

LOGGER_NAME = "editorial_player"


def _route_to_file(name: str, file_handler: logging.Handler) -> None:
    routed = logging.getLogger(name)
    routed.setLevel(logging.DEBUG)
    routed.propagate = False
    for handler in list(routed.handlers):
        routed.removeHandler(handler)
    routed.addHandler(file_handler)


def setup_logging(config: PlayerConfig) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.log_level)
    console_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))

    file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
    file_handler.setLevel(config.file_log_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(module)s:%(lineno)d | "
            "%(funcName)s | %(message)s"
        )
    )

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    logging.captureWarnings(True)
    _route_to_file("py.warnings", file_handler)
    _route_to_file("vlc", file_handler)
    return logger
