from pathlib import Path

from vio.backend.base import Backend, Status
from vio.errors import ConfigError

__all__ = ["Backend", "Status", "create_backend"]


def create_backend(config):
    """Create a backend from config.

    Config keys:
        backend_type: "posix" (default)
        snapshots_path: required, relative paths resolve against repo_path
        repo_path: required
        lock_timeout: optional, seconds to wait for the index lock
    """
    backend = config.get("backend_type", "posix")

    if backend == "posix":
        from vio.backend.posix import PosixBackend
        for key in ("snapshots_path", "repo_path"):
            if not config.get(key):
                raise ConfigError(f"Expecting key '{key}' in configuration.")
        repo_path = Path(config["repo_path"])
        snapshots_path = Path(config["snapshots_path"])
        if not snapshots_path.is_absolute():
            snapshots_path = repo_path / snapshots_path
        return PosixBackend(
            snapshots_path,
            repo_path,
            lock_timeout=config.get("lock_timeout"),
        )

    raise ConfigError(f"Unknown backend: {backend!r}. Use 'posix'.")
