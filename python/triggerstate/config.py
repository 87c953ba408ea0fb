"""Status file location and on-disk constants.

The state directory defaults to /var/lib/triggerstate and can be moved with
environment variables:

  TRIGGERSTATE_TRACK_DIR     directory holding the status file
  TRIGGERSTATE_STATUS_FILE   full path of the status file (wins over the dir)
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_TRACK_DIR = "/var/lib/triggerstate"
STATUS_FILE_NAME = "status"
TRACK_DIR_MODE = 0o755
STATUS_HEADER = "# This file is automatically generated. DO NOT EDIT\n"

TRACK_DIR_ENV = "TRIGGERSTATE_TRACK_DIR"
STATUS_FILE_ENV = "TRIGGERSTATE_STATUS_FILE"


def _env_override(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        logger.warning("config.blank_override", extra={"variable": name})
        return None
    return value


def resolve_status_file(explicit: str | None = None) -> str:
    """Return the status file path.

    Precedence: explicit argument, TRIGGERSTATE_STATUS_FILE,
    TRIGGERSTATE_TRACK_DIR joined with the default file name, built-in default.
    """
    if explicit:
        return explicit

    status_file = _env_override(STATUS_FILE_ENV)
    if status_file is not None:
        return status_file

    track_dir = _env_override(TRACK_DIR_ENV) or DEFAULT_TRACK_DIR
    return os.path.join(track_dir, STATUS_FILE_NAME)
