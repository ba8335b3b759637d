"""Snapshot engine: filtered copies of the working tree.

A snapshot lives at ``<snapshots_path>/<revision>/<epoch>/`` and holds only
what git does not track. The copy itself is delegated to rsync; this module
decides where it goes and what is excluded.
"""

import os
import re
from pathlib import Path

from vio import sync
from vio.errors import NotFound, SnapshotIOError
from vio.ignore import get_exclude_patterns, get_ignore_filters

_RSYNC_WILDCARDS = re.compile(r"[*?\[]")
_RSYNC_SPECIALS = re.compile(r"([*?\[\\])")
_LINE_BREAKS = re.compile(r"[\r\n]")


def snapshot_path(snapshots_path, version):
    return Path(snapshots_path) / version.revision / str(version.epoch)


def _anchored(rel_path):
    # rsync matches a pattern without wildcards literally, backslashes
    # included. A line break can't go into the exclude file, so it becomes ?.
    if _RSYNC_WILDCARDS.search(rel_path) or _LINE_BREAKS.search(rel_path):
        rel_path = _LINE_BREAKS.sub("?", _RSYNC_SPECIALS.sub(r"\\\1", rel_path))
    return "/" + rel_path


def build_excludes(repo_path, snapshots_path, tracked_files):
    """Exclude patterns for a commit snapshot.

    Tracked files (anchored at the tree root), git metadata and the snapshot
    root when it sits inside the working tree. .vioignore files are applied
    by rsync itself, see create_snapshot.
    """
    excludes = [_anchored(p) for p in tracked_files]
    excludes += get_exclude_patterns()

    repo = Path(repo_path).resolve()
    snaps = Path(snapshots_path).resolve()
    if snaps != repo and repo in snaps.parents:
        rel = snaps.relative_to(repo).as_posix()
        excludes.append(_anchored(rel) + "/")
    return excludes


def create_snapshot(repo_path, snapshots_path, version, tracked_files):
    """Copy the untracked part of repo_path into the version's snapshot dir.

    Every .vioignore in the tree also excludes what it lists, relative to
    its own directory. A failure may leave a partial, unreferenced directory
    behind; it is never registered in the index because the index append
    comes afterwards.
    """
    dest = snapshot_path(snapshots_path, version)
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.mkdir()
    except FileExistsError as e:
        raise SnapshotIOError(f"Snapshot directory {dest} already exists") from e
    except OSError as e:
        raise SnapshotIOError(f"Unable to create snapshot directory {dest}: {e}") from e

    excludes = build_excludes(repo_path, snapshots_path, tracked_files)
    sync.sync_tree(repo_path, dest, excludes, filters=get_ignore_filters())
    return dest


def restore_snapshot(snapshots_path, repo_path, version):
    """Copy a snapshot back on top of the working tree.

    Tracked files are left alone since the snapshot never contains them.
    Nothing in the working tree is deleted.
    """
    src = snapshot_path(snapshots_path, version)
    if not src.is_dir():
        raise NotFound(f"Snapshot for {version.ref} not found at {src}")
    sync.sync_tree(src, repo_path)
    return src


def count_files(path):
    """Number of regular files under path."""
    total = 0
    for _, _, files in os.walk(path):
        total += len(files)
    return total
