"""Tests for repository-level operations and the audit log."""

import pytest

from conftest import requires_tools, run_git
import vio.log
from vio import api
from vio.errors import AlreadyInitialized, MalformedEntry, NotFound, VersionNotFound
from vio.log import read_logs, write_log
from vio.version import Version


class FakeBackend:
    def __init__(self, versions):
        self.versions = versions

    def get_versions(self):
        return list(self.versions)


@pytest.fixture
def history():
    return [
        Version.parse("aaa#100", {"run": "1"}),
        Version.parse("bbb#200"),
        Version.parse("aaa#300", {"run": "2"}),
    ]


def test_resolve_full_ref_ignores_metadata(history):
    assert api.resolve_version(FakeBackend(history), "aaa#100") is history[0]


def test_resolve_bare_revision_picks_latest(history):
    assert api.resolve_version(FakeBackend(history), "aaa") is history[2]


@pytest.mark.parametrize("ref", ["ccc", "aaa#999"])
def test_resolve_unknown(history, ref):
    with pytest.raises(VersionNotFound):
        api.resolve_version(FakeBackend(history), ref)


def test_resolve_malformed(history):
    with pytest.raises(MalformedEntry):
        api.resolve_version(FakeBackend(history), "aaa#soon")


def test_open_backend_without_config(tmp_path):
    with pytest.raises(NotFound):
        api.open_backend(tmp_path)


def test_read_logs_filters_by_repo_and_skips_garbage():
    write_log({"event": "commit", "repo": "/a", "version": "x#1"})
    write_log({"event": "commit", "repo": "/b", "version": "y#2"})
    with open(vio.log.LOGS_FILE, "a") as f:
        f.write("not json\n")

    assert [e["version"] for e in read_logs()] == ["x#1", "y#2"]
    assert [e["version"] for e in read_logs("/b")] == ["y#2"]
    assert "timestamp" in read_logs()[0]


def test_read_logs_without_file():
    assert read_logs() == []


@requires_tools
class TestRepository:
    def test_init_writes_config_and_index(self, git_repo):
        config_path = api.init(git_repo)

        assert config_path == git_repo / ".vioconfig"
        assert (git_repo / ".snapshots" / "index").is_file()
        assert [e["event"] for e in read_logs(git_repo)] == ["init"]

    def test_init_twice(self, git_repo):
        api.init(git_repo)

        with pytest.raises(AlreadyInitialized):
            api.init(git_repo)

    def test_init_with_absolute_snapshot_path(self, git_repo, tmp_path):
        api.init(git_repo, snapshots_path=tmp_path / "external")

        assert (tmp_path / "external" / "index").is_file()

    def test_commit_log_checkout(self, git_repo):
        api.init(git_repo)
        (git_repo / "bar").write_text("yeah")

        v = api.commit({"run": "1"}, start=git_repo)
        assert api.log(git_repo) == [v]

        (git_repo / "bar").unlink()
        restored = api.checkout(v.ref, start=git_repo)

        assert restored == v
        assert (git_repo / "bar").read_text() == "yeah"
        events = read_logs(git_repo)
        assert [e["event"] for e in events] == ["init", "commit", "checkout"]
        assert events[1]["version"] == v.ref
        assert events[1]["metadata"] == {"run": "1"}
        assert events[1]["files"] >= 1

    def test_operations_from_subdirectory(self, git_repo):
        api.init(git_repo)
        sub = git_repo / "sub"
        sub.mkdir()
        (sub / "data.csv").write_text("1,2")

        v = api.commit(start=sub)

        snap = git_repo / ".snapshots" / v.revision / str(v.epoch)
        assert (snap / "sub" / "data.csv").exists()

    def test_checkout_after_new_git_commit(self, git_repo):
        api.init(git_repo)
        (git_repo / "bar").write_text("yeah")
        v = api.commit(start=git_repo)
        (git_repo / "more").write_text("x")
        run_git(git_repo, "add", "more")
        run_git(git_repo, "commit", "-q", "-m", "more")
        (git_repo / "bar").unlink()

        api.checkout(v.revision, start=git_repo)

        assert (git_repo / "bar").exists()
