"""Logging setup for the command line."""

from __future__ import annotations

import logging

# Request lines from these loggers drown out phase progress at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "hishel")


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Configure the root logger through ``logging.basicConfig``.

    ``verbose`` switches to DEBUG and lets the HTTP stack log every request.
    Pass ``force=True`` to replace handlers installed by an earlier call.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
