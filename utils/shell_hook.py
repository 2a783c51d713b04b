"""
mawmakepkg - makepkg exit hook
Bash code that is run with `bash -c` in place of makepkg itself. It replaces
the exit builtin with a function, then sources the build tool named by $0.
When the build finishes successfully the function appends the path of every
package file that was actually written to the package path file.

makepkg re-executes "$0" internally, so $0 must stay the build tool's name.
The hook's own variables are declared local to exit() and never assign to a
makepkg global of the same name.
"""

import logging

from utils.errors import HookBuildError
from utils.validators import validate_pkgfile_path

logger = logging.getLogger(__name__)

# One substitution point: the package path file. It is inserted unquoted,
# validate_pkgfile_path() guarantees it holds no shell metacharacters.
_HOOK_TEMPLATE = """\
exit () {
  local ret=${1:-$?}
  if [ "$ret" -ne 0 ] ; then command exit "$ret" ; fi
  local fullver pkg arch pkgfile
  fullver=$(get_full_version)
  for pkg in "${pkgname[@]}" ; do
    for arch in "$CARCH" any ; do
      pkgfile="${PKGDEST}/${pkg}-${fullver}-${arch}${PKGEXT}"
      if [ -f "$pkgfile" ] ; then
        echo "$pkgfile" >> %s
      fi
    done
  done
  command exit 0
}
source "$0"
"""


def build_shell_hook(pkgfile_path: str) -> str:
    """
    Return the hook script that records built package paths in *pkgfile_path*.

    Lines are appended, never truncated; the file is created by the shell
    redirection if it does not exist yet.

    Raises:
        HookBuildError: the path is empty or contains characters bash would
        interpret.
    """
    ok, err = validate_pkgfile_path(pkgfile_path)
    if not ok:
        raise HookBuildError(err)

    logger.debug(f"Built makepkg exit hook writing to {pkgfile_path}")
    return _HOOK_TEMPLATE % pkgfile_path
