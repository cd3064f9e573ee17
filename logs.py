"""
Logger factory shared by the rendering pipeline, delivery and web layer.
"""

import logging
from pathlib import Path

from config import Config


def logger(name: str) -> logging.Logger:
    """
    Return a configured logger for ``name``.

    Accepts ``__name__`` or ``__file__``; file paths are reduced to the
    module stem so log lines stay short.
    """
    if "/" in name or "\\" in name:
        name = Path(name).stem

    log = logging.getLogger(name)

    # Only configure if not already configured
    if not log.handlers:
        log.setLevel(getattr(logging, Config.LOG_LEVEL, logging.INFO))
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        log.addHandler(handler)
        # root handlers (Flask, pytest) would repeat every line
        log.propagate = False

    return log
