"""Tests for .vioconfig handling."""

import json
from pathlib import Path

import pytest

from vio.config import find_config, init_config, load_config
from vio.errors import ConfigError


def test_init_config_writes_defaults(tmp_path):
    path = init_config(tmp_path)

    assert path == tmp_path / ".vioconfig"
    assert json.loads(path.read_text()) == {"backend_type": "posix", "snapshots_path": ".snapshots"}


def test_init_config_with_values(tmp_path):
    init_config(tmp_path, "/data/snaps", "posix")

    assert json.loads((tmp_path / ".vioconfig").read_text())["snapshots_path"] == "/data/snaps"


def test_find_config_walks_up(tmp_path):
    init_config(tmp_path)
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_config(nested) == tmp_path / ".vioconfig"


def test_find_config_none(tmp_path):
    assert find_config(tmp_path) is None
    assert load_config(tmp_path) is None


def test_load_config_adds_repo_path(tmp_path):
    init_config(tmp_path)
    (tmp_path / "sub").mkdir()

    config = load_config(tmp_path / "sub")

    assert config["repo_path"] == str(tmp_path)
    assert config["config_file"] == str(tmp_path / ".vioconfig")
    assert config["backend_type"] == "posix"


def test_global_config_is_merged_under_project(tmp_path):
    global_dir = Path.home() / ".vio"
    global_dir.mkdir(parents=True)
    (global_dir / "config.json").write_text(json.dumps({"lock_timeout": 5, "snapshots_path": "g"}))
    (tmp_path / ".vioconfig").write_text(json.dumps({"snapshots_path": "p"}))

    config = load_config(tmp_path)

    assert config["lock_timeout"] == 5.0
    assert config["snapshots_path"] == "p"
    assert config["backend_type"] == "posix"


def test_invalid_json(tmp_path):
    (tmp_path / ".vioconfig").write_text("{nope")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_not_an_object(tmp_path):
    (tmp_path / ".vioconfig").write_text("[]")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_empty_required_key(tmp_path):
    (tmp_path / ".vioconfig").write_text(json.dumps({"snapshots_path": ""}))

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_bad_lock_timeout(tmp_path):
    (tmp_path / ".vioconfig").write_text(json.dumps({"lock_timeout": "soon"}))

    with pytest.raises(ConfigError):
        load_config(tmp_path)
