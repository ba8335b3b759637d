from pathlib import Path

from vio import snapshot, vcs
from vio.backend.base import Backend, Status
from vio.errors import (
    AlreadyInitialized,
    DuplicateVersion,
    NotFound,
    UncommittedChanges,
    Unimplemented,
    VersionNotFound,
)
from vio.index import Index
from vio.version import Version, contains_version

INDEX_NAME = "index"


class PosixBackend(Backend):
    """Snapshots stored as plain directory trees next to a text index.

    Layout:
        <snapshots_path>/index
        <snapshots_path>/<revision>/<epoch>/...
    """

    def __init__(self, snapshots_path, repo_path, lock_timeout=None):
        self.snapshots_path = Path(snapshots_path)
        self.repo_path = Path(repo_path)
        self.lock_timeout = lock_timeout

    @property
    def index_path(self):
        return self.snapshots_path / INDEX_NAME

    def init(self):
        if self.is_initialized():
            raise AlreadyInitialized(f"Repository already initialized at {self.snapshots_path}")
        self.snapshots_path.mkdir(parents=True, exist_ok=True)
        Index.create(self.index_path)

    def open(self):
        Index.open(self.index_path)
        return self

    def is_initialized(self):
        return self.index_path.is_file()

    def get_status(self):
        self._require_initialized()
        return Status.COMMITTED

    def commit(self, metadata=None):
        index = self._require_initialized()
        self._require_clean_tree("commit")

        tracked = vcs.tracked_files(self.repo_path)
        revision = vcs.current_revision(self.repo_path)
        version = Version(revision, None, metadata or {})

        with index.lock(self.lock_timeout):
            existing = index.read_all()
            if contains_version(existing, version):
                raise DuplicateVersion(f"Version {version} already in index.")
            # one snapshot directory per (revision, epoch)
            for v in existing:
                if v.revision == version.revision and v.epoch == version.epoch:
                    raise DuplicateVersion(
                        f"Snapshot address {version.ref} is already used by {v}."
                    )

            # snapshot before index: a crash in between leaves an orphaned
            # directory, never an index entry without data
            snapshot.create_snapshot(self.repo_path, self.snapshots_path, version, tracked)
            index.append(version)

        return version

    def checkout(self, version):
        index = self._require_initialized()
        self._require_clean_tree("checkout")

        with index.lock(self.lock_timeout):
            if not index.contains(version):
                raise VersionNotFound(f"Version {version} not found in index.")
            snapshot.restore_snapshot(self.snapshots_path, self.repo_path, version)

    def diff(self, v1, v2, path):
        raise Unimplemented("diff is not supported by the posix backend")

    def get_versions(self):
        return Index.open(self.index_path).read_all()

    def _require_initialized(self):
        if not self.is_initialized():
            raise NotFound(
                f"Uninitialized repository: no index at {self.index_path}. Run 'vio init' first."
            )
        return Index(self.index_path)

    def _require_clean_tree(self, action):
        if vcs.has_uncommitted_changes(self.repo_path):
            raise UncommittedChanges(
                f"Uncommitted changes in {self.repo_path}. Commit or stash them before {action}."
            )
