"""
mawmakepkg - makepkg privilege wrapper
Run as root through sudo: drops back to SUDO_USER, points PACMAN at maw and
executes makepkg inside a bash hook that records the built package paths.

Usage:
    sudo mawmakepkg PKGFILE [makepkg args...]

PKGFILE receives one line per package file that makepkg wrote. Every
argument after it goes to makepkg untouched, including "--" and anything
that looks like an option. The helper has no options of its own; settings
come only from the root-owned /etc/mawmakepkg.json.
"""

import logging
import sys

from config import DEFAULT_CONFIG_PATH, Config
from launcher import launch_build
from utils.errors import MawMakepkgError
from utils.logging_utils import setup_logging

EX_USAGE = 2

logger = logging.getLogger("mawmakepkg")


def main(argv=None, config_path: str = DEFAULT_CONFIG_PATH) -> int:
    args = sys.argv[1:] if argv is None else list(argv)

    cfg = Config(config_path)
    setup_logging(log_level=cfg.get("general", "log_level") or "INFO")

    if len(args) == 0:
        logger.error("supply a temporary file name to write package paths to")
        print("usage: mawmakepkg PKGFILE [makepkg args...]", file=sys.stderr)
        return EX_USAGE

    try:
        launch_build(args[0], args[1:], cfg)
    except MawMakepkgError as e:
        logger.error(str(e))
        return e.exit_code

    # launch_build() replaces the process on success.
    logger.critical("internal error: reached the end of program")
    return 1


if __name__ == "__main__":
    sys.exit(main())
