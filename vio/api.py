"""Repository-level operations used by the CLI.

These locate .vioconfig, build the configured backend and record every
successful operation in the audit log.
"""

from pathlib import Path

from vio.backend import create_backend
from vio.config import DEFAULT_CONFIG, VIOCONFIG, find_config, init_config, load_config
from vio.errors import AlreadyInitialized, MalformedEntry, NotFound, VersionNotFound
from vio.log import write_log
from vio.snapshot import count_files, snapshot_path
from vio.version import Version


def init(repo_path=None, snapshots_path=None, backend_type=None):
    """Initialize vio in repo_path (default cwd) and write .vioconfig."""
    repo = Path(repo_path).resolve() if repo_path else Path.cwd()
    if (repo / VIOCONFIG).exists():
        raise AlreadyInitialized(f"{repo / VIOCONFIG} already exists.")

    snapshots_path = snapshots_path or DEFAULT_CONFIG["snapshots_path"]
    backend_type = backend_type or DEFAULT_CONFIG["backend_type"]
    backend = create_backend({
        "backend_type": backend_type,
        "snapshots_path": str(snapshots_path),
        "repo_path": str(repo),
    })
    backend.init()

    config_path = init_config(repo, snapshots_path, backend_type)
    write_log({"event": "init", "repo": str(repo), "backend": backend_type})
    return config_path


def open_backend(start=None):
    """Backend for the repository containing start (default cwd)."""
    config = load_config(start)
    if config is None:
        raise NotFound("No .vioconfig found. Run 'vio init' first.")
    return create_backend(config).open()


def commit(metadata=None, start=None):
    backend = open_backend(start)
    version = backend.commit(metadata or {})
    write_log({
        "event": "commit",
        "repo": str(backend.repo_path),
        "version": version.ref,
        "metadata": dict(version.metadata),
        "files": count_files(snapshot_path(backend.snapshots_path, version)),
    })
    return version


def resolve_version(backend, ref):
    """Find the index entry a user reference points at.

    ``revision#epoch`` matches revision and timestamp, whatever the
    metadata. A bare ``revision`` picks the latest entry for it.
    """
    versions = backend.get_versions()
    if "#" in ref:
        wanted = Version.parse(ref)
        for v in versions:
            if v.revision == wanted.revision and v.timestamp == wanted.timestamp:
                return v
    else:
        revision = ref.strip()
        if not revision:
            raise MalformedEntry("Empty version reference")
        for v in reversed(versions):
            if v.revision == revision:
                return v
    raise VersionNotFound(f"No committed version matches {ref!r}. Run 'vio log' to list versions.")


def checkout(ref, start=None):
    backend = open_backend(start)
    version = ref if isinstance(ref, Version) else resolve_version(backend, ref)
    backend.checkout(version)
    write_log({"event": "checkout", "repo": str(backend.repo_path), "version": version.ref})
    return version


def log(start=None):
    """Committed versions, oldest first."""
    return open_backend(start).get_versions()


def repo_root(start=None):
    config_path = find_config(start)
    return config_path.parent if config_path else None
