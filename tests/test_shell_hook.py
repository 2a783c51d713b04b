"""
Tests for utils/shell_hook.py — the makepkg exit hook.
The bash tests source a fake build tool that mimics the makepkg variables.
"""

import shutil
import subprocess

import pytest

from utils.errors import HookBuildError
from utils.shell_hook import build_shell_hook

needs_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")

FAKE_BUILD_TOOL = """\
get_full_version() {
  if (( epoch > 0 )); then
    printf '%s\\n' "$epoch:$pkgver-$pkgrel"
  else
    printf '%s\\n' "$pkgver-$pkgrel"
  fi
}
pkgname=(foo)
pkgver=1.0
pkgrel=1
epoch=0
CARCH=x86_64
PKGEXT=.pkg.tar.zst
PKGDEST="$FAKE_PKGDEST"
"""


def _write_tool(tmp_path, body: str):
    tool = tmp_path / "fakebuild"
    tool.write_text(FAKE_BUILD_TOOL + body)
    return tool


def _run_hook(tmp_path, tool, out_file, *args):
    pkgdest = tmp_path / "pkgdest"
    pkgdest.mkdir(exist_ok=True)
    hook = build_shell_hook(str(out_file))
    return subprocess.run(
        ["bash", "-c", hook, str(tool), *args],
        env={"PATH": "/usr/bin:/bin", "FAKE_PKGDEST": str(pkgdest)},
        capture_output=True,
        text=True,
        timeout=30,
    )


# ── Template ─────────────────────────────────────────────────────────────────

class TestBuildShellHook:
    def test_path_appears_exactly_once(self):
        path = "/tmp/maw_pkgpaths_Q7x9"
        hook = build_shell_hook(path)
        assert hook.count(path) == 1

    def test_path_is_verbatim(self):
        hook = build_shell_hook("/tmp/with+plus,comma:colon@at%pct")
        assert ">> /tmp/with+plus,comma:colon@at%pct\n" in hook

    def test_sources_positional_zero(self):
        assert build_shell_hook("/tmp/out").rstrip().endswith('source "$0"')

    def test_overrides_exit(self):
        hook = build_shell_hook("/tmp/out")
        assert hook.startswith("exit () {")
        assert "command exit 0" in hook

    def test_loop_variables_are_local(self):
        hook = build_shell_hook("/tmp/out")
        assert "  local fullver pkg arch pkgfile\n" in hook
        assert hook.index("local fullver") < hook.index("fullver=$(")

    @pytest.mark.parametrize("bad", [
        "",
        "/tmp/out; rm -rf ~",
        "/tmp/$(id)",
        "/tmp/has space",
        "/tmp/`id`",
        "/tmp/out\n",
        "~/out",
        "/tmp/a|b",
        "/tmp/'q'",
    ])
    def test_rejects_unsafe_paths(self, bad):
        with pytest.raises(HookBuildError):
            build_shell_hook(bad)


# ── Behaviour under bash ─────────────────────────────────────────────────────

@needs_bash
class TestHookUnderBash:
    def test_successful_build_records_existing_package(self, tmp_path):
        tool = _write_tool(tmp_path, 'touch "$PKGDEST/foo-1.0-1-x86_64.pkg.tar.zst"\nexit 0\n')
        out = tmp_path / "out.txt"

        result = _run_hook(tmp_path, tool, out)

        assert result.returncode == 0, result.stderr
        assert out.read_text().splitlines() == [
            str(tmp_path / "pkgdest" / "foo-1.0-1-x86_64.pkg.tar.zst")
        ]

    def test_any_arch_package_recorded(self, tmp_path):
        tool = _write_tool(tmp_path, 'touch "$PKGDEST/foo-1.0-1-any.pkg.tar.zst"\nexit 0\n')
        out = tmp_path / "out.txt"

        assert _run_hook(tmp_path, tool, out).returncode == 0
        assert out.read_text().splitlines() == [
            str(tmp_path / "pkgdest" / "foo-1.0-1-any.pkg.tar.zst")
        ]

    def test_split_package_skips_unbuilt_names(self, tmp_path):
        tool = _write_tool(
            tmp_path,
            'pkgname=(foo foo-docs bar)\n'
            'touch "$PKGDEST/foo-1.0-1-x86_64.pkg.tar.zst"\n'
            'touch "$PKGDEST/foo-docs-1.0-1-any.pkg.tar.zst"\n'
            'exit 0\n',
        )
        out = tmp_path / "out.txt"

        assert _run_hook(tmp_path, tool, out).returncode == 0
        assert [line.rsplit("/", 1)[1] for line in out.read_text().splitlines()] == [
            "foo-1.0-1-x86_64.pkg.tar.zst",
            "foo-docs-1.0-1-any.pkg.tar.zst",
        ]

    def test_epoch_in_file_name(self, tmp_path):
        tool = _write_tool(tmp_path, 'epoch=2\ntouch "$PKGDEST/foo-2:1.0-1-x86_64.pkg.tar.zst"\nexit 0\n')
        out = tmp_path / "out.txt"

        assert _run_hook(tmp_path, tool, out).returncode == 0
        assert out.read_text().endswith("foo-2:1.0-1-x86_64.pkg.tar.zst\n")

    def test_appends_without_truncating(self, tmp_path):
        tool = _write_tool(tmp_path, 'touch "$PKGDEST/foo-1.0-1-x86_64.pkg.tar.zst"\nexit 0\n')
        out = tmp_path / "out.txt"
        out.write_text("earlier\n")

        assert _run_hook(tmp_path, tool, out).returncode == 0
        lines = out.read_text().splitlines()
        assert lines[0] == "earlier"
        assert len(lines) == 2

    def test_failed_build_keeps_exit_code_and_file(self, tmp_path):
        tool = _write_tool(tmp_path, 'touch "$PKGDEST/foo-1.0-1-x86_64.pkg.tar.zst"\nexit 4\n')
        out = tmp_path / "out.txt"
        out.write_text("untouched\n")

        result = _run_hook(tmp_path, tool, out)

        assert result.returncode == 4
        assert out.read_text() == "untouched\n"

    def test_bare_exit_after_failure_propagates(self, tmp_path):
        tool = _write_tool(tmp_path, "false\nexit\n")
        out = tmp_path / "out.txt"

        result = _run_hook(tmp_path, tool, out)

        assert result.returncode == 1
        assert not out.exists()

    def test_nothing_built_writes_nothing(self, tmp_path):
        tool = _write_tool(tmp_path, "exit 0\n")
        out = tmp_path / "out.txt"

        assert _run_hook(tmp_path, tool, out).returncode == 0
        assert not out.exists()

    def test_forwarded_arguments_visible_to_tool(self, tmp_path):
        tool = _write_tool(tmp_path, 'printf "%s|" "$0" "$@"\nexit 0\n')
        out = tmp_path / "out.txt"

        result = _run_hook(tmp_path, tool, out, "-s", "--noconfirm")

        assert result.stdout == f"{tool}|-s|--noconfirm|"
