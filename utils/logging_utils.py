"""
mawmakepkg - Logging Utility

The helper lives for a few milliseconds before exec() replaces it, so the
only sink is stderr: stdout is inherited by makepkg and must stay clean, and
nothing is written to disk while the process still runs as root.

User names, paths and forwarded makepkg arguments all come from the sudo
caller; they go through sanitize_log_string() before reaching a log line.
"""

import logging
import re
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# CSI sequences first, then any remaining C0 control byte or DEL.
_ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")
_CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")


def sanitize_log_string(value, max_length: int = 512) -> str:
    """
    Make a caller-supplied value safe to embed in one log line.

    Terminal escapes are dropped, control characters (newlines included)
    become "[?]" so a value can never forge a second record, and anything
    past *max_length* is cut with a "...[truncated]" marker.
    """
    if not isinstance(value, str):
        try:
            value = str(value)
        except Exception:
            return "<non-representable>"

    cleaned = _CONTROL_CHAR_PATTERN.sub("[?]", _ANSI_ESCAPE_PATTERN.sub("", value))
    if len(cleaned) <= max_length:
        return cleaned
    return cleaned[:max_length] + "...[truncated]"


def sanitize_argv(args: list, max_length: int = 1024) -> str:
    """Render a forwarded argument list as one sanitized, space-joined string."""
    return sanitize_log_string(" ".join(str(a) for a in args), max_length=max_length)


def setup_logging(log_level: str = "INFO", name: Optional[str] = None) -> logging.Logger:
    """
    Attach a single stderr handler to *name* (the root logger by default, so
    utils.privilege, launcher and friends all propagate to it).
    Unknown level names fall back to INFO. Calling it twice does not add a
    second handler.
    """
    level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
        logger.addHandler(handler)

    return logger
