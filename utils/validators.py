"""
mawmakepkg - Input Validation Utilities
Centralized validation for all externally-sourced values.

Design principle: validate at the boundary. The package path is pasted
unescaped into shell code, and config values end up in argv and the
environment, so both are checked before any privilege change.
"""

import re
from typing import Optional

# Characters allowed in the package path file name. Anything else (spaces,
# quotes, $, `, ;, |, &, <, >, *, ?, ~, newlines...) would be interpreted by bash.
_SAFE_PATH_RE = re.compile(r"[A-Za-z0-9_./+,:@%-]+")

_ENV_VAR_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_pkgfile_path(path: str) -> tuple[bool, Optional[str]]:
    """Return (True, None) or (False, error_message)."""
    if not path:
        return False, "package path file name is empty"
    if not _SAFE_PATH_RE.fullmatch(path):
        return False, (
            f"package path file name {path!r} contains characters that are "
            "not safe inside shell code"
        )
    return True, None


def validate_program_name(name) -> bool:
    """A program name for argv[0]: non-empty string, no whitespace, NUL or '='."""
    if not isinstance(name, str) or not name:
        return False
    return not any(c.isspace() or c in "\x00=" for c in name)


def validate_env_var_name(name) -> bool:
    """Return True if name is a portable environment variable name."""
    return isinstance(name, str) and bool(_ENV_VAR_RE.fullmatch(name))


def validate_log_level(level) -> bool:
    return isinstance(level, str) and level.upper() in _LOG_LEVELS


def validate_config(config_data: dict) -> list:
    """
    Validate a full configuration dict.
    Returns a list of error strings (empty list = valid). The messages name
    the offending key only; values may come from a root-only file.
    """
    errors = []

    general = config_data.get("general", {})
    if not validate_log_level(general.get("log_level", "INFO")):
        errors.append("general.log_level is not a known log level")

    identity = config_data.get("identity", {})
    if not validate_env_var_name(identity.get("env_var", "SUDO_USER")):
        errors.append("identity.env_var is not a valid environment variable name")

    build = config_data.get("build", {})
    for key in ("shell", "tool", "pacman_override"):
        value = build.get(key)
        if not validate_program_name(value):
            errors.append(f"build.{key} is not a valid program name")

    return errors
