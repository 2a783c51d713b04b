"""
mawmakepkg - Package Path File
Caller side of the helper: creates the temporary file that mawmakepkg's exit
hook appends package paths to, runs the helper, and reads the paths back.

Security notes:
- subprocess is called with a list (never shell=True)
- Under sudo the temp file is chowned to the invoking user, otherwise the
  dropped build could not append to it
"""

import logging
import os
import subprocess
import tempfile
from typing import Optional, Sequence

from utils.errors import (
    BuildFailedError,
    MawMakepkgError,
    PkgPathError,
)
from utils.logging_utils import sanitize_argv, sanitize_log_string
from utils.privilege import InvokingUser, lookup_invoking_user

logger = logging.getLogger(__name__)

MAX_PATH_LINE = 4096
DEFAULT_HELPER = "mawmakepkg"
DEFAULT_MAKEPKG_ARGS = ("-s", "-m", "-f")


class PkgPathFile:
    """A temporary file that collects the paths of built packages."""

    def __init__(self, owner: Optional[InvokingUser] = None, dir: Optional[str] = None):
        fd, self.path = tempfile.mkstemp(prefix="maw", dir=dir)
        os.close(fd)
        if owner is not None:
            try:
                os.chown(self.path, owner.uid, owner.gid)
            except OSError:
                self.cleanup()
                raise
            logger.debug(f"Package path file {self.path} handed to {owner.name}")

    @property
    def name(self) -> str:
        return self.path

    def read_lines(self) -> list[str]:
        """Return the recorded package paths, one per non-empty line."""
        paths = []
        with open(self.path, encoding="utf-8", errors="surrogateescape") as f:
            for line in f:
                line = line.rstrip("\n")
                if len(line) > MAX_PATH_LINE:
                    raise PkgPathError("Extremely long line for package path")
                if line:
                    paths.append(line)
        return paths

    def cleanup(self):
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.cleanup()
        return False


def _sudo_owner() -> Optional[InvokingUser]:
    """Return the SUDO_USER record when running as root under sudo, else None."""
    if os.geteuid() != 0:
        return None
    try:
        return lookup_invoking_user()
    except MawMakepkgError as e:
        logger.debug(f"Package path file stays owned by root: {e}")
        return None


def build_packages(
    srcdir: str,
    makepkg_args: Sequence[str] = DEFAULT_MAKEPKG_ARGS,
    helper: str = DEFAULT_HELPER,
) -> list[str]:
    """
    Build the package in *srcdir* through the helper and return the paths of
    the package files it produced.

    Raises:
        BuildFailedError: the helper could not be run or exited non-zero.
        PkgPathError:     the recorded paths could not be read.
    """
    with PkgPathFile(owner=_sudo_owner()) as pathfile:
        args = [helper, pathfile.name, *makepkg_args]
        logger.info(f"Building in {sanitize_log_string(srcdir)}: {sanitize_argv(args)}")
        try:
            result = subprocess.run(args, cwd=srcdir, shell=False)
        except FileNotFoundError:
            raise BuildFailedError(f"Command not found: {helper}", returncode=127) from None

        if result.returncode != 0:
            raise BuildFailedError(
                f"makepkg failed with exit status {result.returncode}",
                returncode=result.returncode,
            )

        return pathfile.read_lines()
