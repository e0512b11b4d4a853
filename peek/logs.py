"""Opt-in file logging.

The display owns stdout and stderr, so the ``peek`` logger is silent unless a
log file is requested through ``PEEK_LOG`` or the ``log_file`` preference.
"""

from __future__ import annotations

import logging
import os

LOG_ENV_VAR = "PEEK_LOG"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

package_logger = logging.getLogger("peek")


def configure_logging(log_file: str | None = None) -> logging.Handler | None:
    """Attach a DEBUG file handler when a log path is configured.

    ``PEEK_LOG`` takes precedence over ``log_file``. Returns the installed
    handler, or ``None`` when logging stays disabled.
    """
    path = os.environ.get(LOG_ENV_VAR, "").strip() or log_file
    if not path:
        return None
    handler = logging.FileHandler(os.path.expanduser(path), mode="a", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    return handler
