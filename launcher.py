"""
mawmakepkg - Build Launcher
Runs the whole hand-off: resolve the sudo user, drop to it, build the exit
hook and replace this process with `bash -c <hook> makepkg [args...]`.

Arguments after the script given to `bash -c` become $0, $1, ... of that
script, so the build tool name lands in $0 and the forwarded arguments follow.
"""

import logging
import os
from typing import Mapping, Optional, Sequence

from config import Config
from utils.errors import ConfigurationError, LaunchError
from utils.logging_utils import sanitize_argv, sanitize_log_string
from utils.privilege import DroppedPrivileges, drop_privileges, lookup_invoking_user
from utils.shell_hook import build_shell_hook
from utils.validators import validate_config

logger = logging.getLogger(__name__)


def build_command(
    hook: str,
    build_tool: str,
    build_args: Sequence[str],
    shell: str = "bash",
) -> list[str]:
    """Return the argv that runs *hook* under *shell* with *build_tool* as $0."""
    return [shell, "-c", hook, build_tool, *build_args]


def exec_build(
    command: list[str],
    env: Mapping[str, str],
    privileges: DroppedPrivileges,
) -> None:
    """
    Replace the current process with *command*. Does not return on success.

    Raises:
        LaunchError: privileges were not dropped, or execvpe() failed.
    """
    if not isinstance(privileges, DroppedPrivileges):
        raise LaunchError("refusing to start the build before privileges are dropped")

    logger.debug(f"Executing {command[0]} as {privileges.user.name}")
    try:
        os.execvpe(command[0], command, env)
    except OSError as e:
        raise LaunchError(
            f"failed to exec {sanitize_log_string(command[0])}: {e.strerror}",
            errno=e.errno,
        ) from e


def launch_build(
    pkgfile_path: str,
    build_args: Sequence[str],
    config: Config,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """
    Run the privilege drop and exec the build. Every step raises a
    MawMakepkgError on failure and nothing is retried.
    """
    if environ is None:
        environ = os.environ

    errors = validate_config(config.as_dict())
    if errors:
        raise ConfigurationError("invalid configuration: " + "; ".join(errors))

    build = config.get_section("build")

    user = lookup_invoking_user(environ, config.get("identity", "env_var"))
    privileges = drop_privileges(user)
    env = privileges.build_environment(environ, build["pacman_override"])

    hook = build_shell_hook(pkgfile_path)
    command = build_command(hook, build["tool"], build_args, shell=build["shell"])

    logger.info(
        f"Running {build['tool']} {sanitize_argv(list(build_args))} "
        f"(package paths -> {sanitize_log_string(pkgfile_path)})"
    )
    exec_build(command, env, privileges)
