from __future__ import annotations

import logging
import sys

LOGGER_NAME = "barbeat"

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stderr handler to the ``barbeat`` logger (once).

    stdout is reserved for the MCP stdio transport.
    """
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
