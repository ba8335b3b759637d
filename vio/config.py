import json
from pathlib import Path

from vio.errors import ConfigError

VIOCONFIG = ".vioconfig"

REQUIRED_KEYS = {"backend_type", "snapshots_path"}

DEFAULT_CONFIG = {
    "backend_type": "posix",
    "snapshots_path": ".snapshots",
    # Optional: "lock_timeout": 30
}


def load_global_config():
    """Load ~/.vio/config.json, user-wide defaults for every repository."""
    path = Path.home() / ".vio" / "config.json"
    if path.exists():
        try:
            return json.loads(path.read_text())
        except (json.JSONDecodeError, OSError):
            pass
    return {}


def find_config(start=None):
    """Walk up from start (default cwd) to find .vioconfig, like git finds .git."""
    current = Path(start).resolve() if start else Path.cwd()
    for parent in [current, *current.parents]:
        config_path = parent / VIOCONFIG
        if config_path.is_file():
            return config_path
    return None


def load_config(start=None):
    """Merged config for the repository containing start, or None if there is none.

    Merge order: defaults -> global config -> project .vioconfig. The result
    also carries repo_path (the directory holding .vioconfig) and config_file.
    """
    config_path = find_config(start)
    if config_path is None:
        return None

    config = {**DEFAULT_CONFIG, **load_global_config()}
    try:
        raw = json.loads(config_path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}")
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a JSON object in {config_path}")
    config.update(raw)

    missing = REQUIRED_KEYS - {k for k, v in config.items() if v}
    if missing:
        raise ConfigError(f"Missing required keys in .vioconfig: {sorted(missing)}")

    if config.get("lock_timeout") is not None:
        try:
            config["lock_timeout"] = float(config["lock_timeout"])
        except (TypeError, ValueError):
            raise ConfigError(
                f"Invalid lock_timeout in {config_path}: expected seconds, "
                f"got {config['lock_timeout']!r}"
            )

    config["repo_path"] = str(config_path.parent)
    config["config_file"] = str(config_path)
    return config


def init_config(path=None, snapshots_path=None, backend_type=None):
    """Create a .vioconfig in the given directory.

    The repository path is not stored: it is always the
    directory that holds .vioconfig.
    """
    target = Path(path) if path else Path.cwd()
    config_path = target / VIOCONFIG
    global_cfg = load_global_config()
    init = {
        "backend_type": backend_type or global_cfg.get("backend_type") or DEFAULT_CONFIG["backend_type"],
        "snapshots_path": str(snapshots_path or global_cfg.get("snapshots_path") or DEFAULT_CONFIG["snapshots_path"]),
    }
    config_path.write_text(json.dumps(init, indent=2) + "\n")
    return config_path
