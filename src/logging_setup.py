from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOG_LEVEL_ENV = "ORBIT_VIEWER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def level_from_name(value: Any, default: int = logging.INFO) -> int:
    """
    Normalise a level given as int, digit string or name.
    Unknown values fall back to ``default``.
    """
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)
        name = s.upper()
        if name in _VALID_LEVELS:
            return getattr(logging, name)
    return default


def setup_logging(
        level: Any = None,
        *,
        log_file: Path | str | None = None,
        max_bytes: int = 2_000_000,
        backup_count: int = 3,
) -> int:
    """
    Configure the root logger: console handler, plus a rotating file handler
    when ``log_file`` is given. Returns the effective level.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV)
    resolved = level_from_name(level)

    root = logging.getLogger()
    root.setLevel(resolved)

    # Prevent duplicate registration of handlers; close the ones a previous call opened.
    for h in list(root.handlers):
        root.removeHandler(h)
        if getattr(h, "_orbit_viewer_owned", False):
            h.close()

    fmt = logging.Formatter(LOG_FORMAT)

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    ch._orbit_viewer_owned = True
    root.addHandler(ch)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        fh.setFormatter(fmt)
        fh._orbit_viewer_owned = True
        root.addHandler(fh)

    return resolved
