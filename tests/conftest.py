import os
import pwd

import pytest

ALICE = pwd.struct_passwd(("alice", "x", 1000, 1000, "Alice", "/home/alice", "/bin/bash"))


@pytest.fixture
def fake_passwd(monkeypatch):
    """pwd.getpwnam() that only knows alice."""
    def _getpwnam(name):
        if name == ALICE.pw_name:
            return ALICE
        raise KeyError(f"getpwnam(): name not found: '{name}'")

    monkeypatch.setattr(pwd, "getpwnam", _getpwnam)
    return ALICE


@pytest.fixture
def syscalls(monkeypatch):
    """
    Record id changes and exec instead of performing them.
    Returns the list of (name, args) tuples in call order.
    """
    calls = []
    monkeypatch.setattr(os, "geteuid", lambda: 0)
    monkeypatch.setattr(os, "initgroups", lambda name, gid: calls.append(("initgroups", (name, gid))))
    monkeypatch.setattr(os, "setgid", lambda gid: calls.append(("setgid", (gid,))))
    monkeypatch.setattr(os, "setuid", lambda uid: calls.append(("setuid", (uid,))))
    monkeypatch.setattr(
        os, "execvpe",
        lambda file, args, env: calls.append(("execvpe", (file, list(args), dict(env)))),
    )
    return calls
