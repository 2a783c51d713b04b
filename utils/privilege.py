"""
mawmakepkg - Privilege Manager
Drops root privileges back to the user that invoked sudo before makepkg runs.

Security notes:
- The invoking user comes from SUDO_USER and is resolved through pwd
- Supplementary groups are reset with os.initgroups() before dropping
- GID is set before UID (would lose permission to set GID after UID drop)
- There is no way back: every failure raises and the process must exit
"""

import logging
import os
import pwd
from typing import Mapping, NamedTuple, Optional

from utils.errors import ConfigurationError, PrivilegeDropError, UserLookupError
from utils.logging_utils import sanitize_log_string

logger = logging.getLogger(__name__)

DEFAULT_USER_ENV_VAR = "SUDO_USER"
PACMAN_ENV_VAR = "PACMAN"
DEFAULT_PACMAN_OVERRIDE = "maw"


class InvokingUser(NamedTuple):
    """Password database record of the user who ran sudo."""

    name: str
    uid: int
    gid: int
    home: str


def lookup_invoking_user(
    environ: Optional[Mapping[str, str]] = None,
    variable: str = DEFAULT_USER_ENV_VAR,
) -> InvokingUser:
    """
    Resolve the pre-sudo user named by *variable* in *environ*.

    Raises:
        ConfigurationError: the variable is unset or empty.
        UserLookupError:    no password entry exists for that name.
    """
    if environ is None:
        environ = os.environ

    username = environ.get(variable)
    if not username:
        raise ConfigurationError(
            f"{variable} is not set; it does not appear that we are running "
            "under sudo, aborting."
        )

    try:
        entry = pwd.getpwnam(username)
    except KeyError:
        raise UserLookupError(
            f"the {variable} named '{sanitize_log_string(username)}' was not found."
        ) from None

    return InvokingUser(entry.pw_name, entry.pw_uid, entry.pw_gid, entry.pw_dir)


class DroppedPrivileges:
    """
    Proof that drop_privileges() completed for *user*.
    Only drop_privileges() should create one; the launcher refuses to run
    without it.
    """

    def __init__(self, user: InvokingUser):
        self.user = user

    def __repr__(self) -> str:
        return f"DroppedPrivileges(user={self.user.name!r}, uid={self.user.uid}, gid={self.user.gid})"

    def build_environment(
        self,
        base_env: Optional[Mapping[str, str]] = None,
        pacman: str = DEFAULT_PACMAN_OVERRIDE,
    ) -> dict[str, str]:
        """
        Return the environment for the build process: a copy of *base_env*
        with PACMAN redirected to *pacman* and the login variables pointed
        at the invoking user.
        """
        if not pacman or "=" in pacman or "\x00" in pacman:
            raise PrivilegeDropError(
                f"failed to set {PACMAN_ENV_VAR} env. variable to {pacman!r}."
            )

        env = dict(os.environ if base_env is None else base_env)
        env[PACMAN_ENV_VAR] = pacman
        env["HOME"] = self.user.home
        env["USER"] = self.user.name
        env["LOGNAME"] = self.user.name
        return env


def drop_privileges(user: InvokingUser) -> DroppedPrivileges:
    """
    Permanently switch the process to *user*'s group and user id.

    Raises:
        PrivilegeDropError: any of the id changes failed. The caller must
        exit; the process may be left with only part of the change applied.
    """
    if is_root():
        try:
            os.initgroups(user.name, user.gid)
        except OSError as e:
            raise PrivilegeDropError(
                f"failed to set supplementary groups for {user.name} user: {e.strerror}",
                errno=e.errno,
            ) from e
    else:
        logger.debug("Not running as root; supplementary groups left unchanged.")

    try:
        os.setgid(user.gid)
    except OSError as e:
        raise PrivilegeDropError(
            f"failed to set gid to {user.gid} for {user.name} user: {e.strerror}",
            errno=e.errno,
        ) from e

    try:
        os.setuid(user.uid)
    except OSError as e:
        raise PrivilegeDropError(
            f"failed to set uid to {user.uid} for {user.name} user: {e.strerror}",
            errno=e.errno,
        ) from e

    logger.info(f"Privileges dropped to {user.name} (uid={user.uid}, gid={user.gid})")
    return DroppedPrivileges(user)


def is_root() -> bool:
    """Return True if the current process is running as root."""
    return os.geteuid() == 0
