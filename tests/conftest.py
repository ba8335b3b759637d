import itertools
import shutil
import subprocess
from datetime import datetime, timezone

import pytest

import vio.log
import vio.version

requires_tools = pytest.mark.skipif(
    shutil.which("git") is None or shutil.which("rsync") is None,
    reason="git and rsync are required",
)

EPOCH = 1405544146


@pytest.fixture(autouse=True)
def _isolate_home(monkeypatch, tmp_path):
    """Keep ~/.vio (global config, audit log) of the developer machine out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(vio.log, "LOGS_FILE", home / ".vio" / "logs.jsonl")


def run_git(repo, *args):
    return subprocess.run(
        ["git", *args], cwd=repo, check=True, capture_output=True, text=True
    ).stdout


@pytest.fixture
def git_repo(tmp_path):
    """A git repository with README and .gitignore committed."""
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    run_git(repo, "config", "user.email", "tests@example.com")
    run_git(repo, "config", "user.name", "Tests")
    run_git(repo, "config", "commit.gpgsign", "false")
    (repo / "README").write_text("foo\n")
    (repo / ".gitignore").write_text(".snapshots\n")
    run_git(repo, "add", "README", ".gitignore")
    run_git(repo, "commit", "-q", "-m", "yeah")
    return repo


@pytest.fixture
def frozen_clock(monkeypatch):
    """Every new Version is stamped at EPOCH."""
    now = datetime.fromtimestamp(EPOCH, tz=timezone.utc)
    monkeypatch.setattr(vio.version, "_now", lambda: now)
    return now


@pytest.fixture
def ticking_clock(monkeypatch):
    """Every new Version is stamped one second after the previous one."""
    ticks = itertools.count(EPOCH)
    monkeypatch.setattr(
        vio.version, "_now", lambda: datetime.fromtimestamp(next(ticks), tz=timezone.utc)
    )
    return ticks


@pytest.fixture
def fake_vcs(monkeypatch):
    """Stand-in git answers for a clean tree at revision abc1234."""
    import vio.vcs

    state = {"dirty": False, "revision": "abc1234", "tracked": ["README"]}
    monkeypatch.setattr(vio.vcs, "has_uncommitted_changes", lambda repo: state["dirty"])
    monkeypatch.setattr(vio.vcs, "current_revision", lambda repo: state["revision"])
    monkeypatch.setattr(vio.vcs, "tracked_files", lambda repo: list(state["tracked"]))
    return state
