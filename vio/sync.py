"""rsync as the tree synchronizer."""

import os
import subprocess
import tempfile
from pathlib import Path

from vio.errors import SnapshotIOError


def sync_tree(source, destination, excludes=(), filters=()):
    """Copy source/ into destination/ (archive mode, no deletes).

    Exclude patterns go to rsync one per line through a temporary file, so
    long tracked-file lists never hit argument limits. Filters are extra
    rsync filter rules such as per-directory merge files.
    """
    args = ["rsync", "-a"]

    exclude_file = None
    if excludes:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="utf-8", suffix=".excludes", delete=False
        ) as f:
            f.write("\n".join(excludes) + "\n")
            exclude_file = Path(f.name)
        args.append(f"--exclude-from={exclude_file}")
    args += [f"--filter={rule}" for rule in filters]

    args += [os.path.join(str(source), ""), os.path.join(str(destination), "")]

    try:
        subprocess.run(args, check=True, capture_output=True)
    except FileNotFoundError as e:
        raise SnapshotIOError("Unable to execute 'rsync'. Is it installed and on PATH?") from e
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
        raise SnapshotIOError(
            f"rsync from {source} to {destination} failed (exit {e.returncode}): {stderr}"
        ) from e
    finally:
        if exclude_file is not None:
            exclude_file.unlink(missing_ok=True)
