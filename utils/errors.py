"""
mawmakepkg - Error Types
Every failure in the helper is fatal; main() maps these to a non-zero exit.
"""

from typing import Optional


class MawMakepkgError(Exception):
    """Base class for all mawmakepkg failures."""

    exit_code = 1


class ConfigurationError(MawMakepkgError):
    """Missing environment variable, bad argument or invalid config value."""


class UserLookupError(MawMakepkgError):
    """The invoking user has no entry in the password database."""


class PrivilegeDropError(MawMakepkgError):
    """A group/user id change or environment setup step failed."""

    def __init__(self, message: str, errno: Optional[int] = None):
        super().__init__(message)
        self.errno = errno


class HookBuildError(MawMakepkgError):
    """The shell hook could not be built for the given output path."""


class LaunchError(MawMakepkgError):
    """Replacing the process image with the build shell failed."""

    def __init__(self, message: str, errno: Optional[int] = None):
        super().__init__(message)
        self.errno = errno


class PkgPathError(MawMakepkgError):
    """The package path file written by the hook could not be read."""


class BuildFailedError(MawMakepkgError):
    """The wrapped build exited non-zero."""

    def __init__(self, message: str, returncode: int):
        super().__init__(message)
        self.returncode = returncode
