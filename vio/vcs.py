"""git as the version-control oracle.

Commands run as argument vectors with ``cwd`` set to the repository, never
through a shell. Any failure is a hard error for the calling operation.
"""

import subprocess

from vio.errors import VcsError


def _git(repo_path, *args):
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=str(repo_path),
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise VcsError("Unable to execute 'git'. Is it installed and on PATH?") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
        raise VcsError(f"'{' '.join(cmd)}' failed in {repo_path}: {detail}") from e
    return result.stdout


def has_uncommitted_changes(repo_path):
    """True if tracked files differ from HEAD. Untracked files don't count."""
    out = _git(repo_path, "status", "--porcelain", "--untracked-files=no")
    return out.strip() != ""


def is_working_tree_clean(repo_path):
    return not has_uncommitted_changes(repo_path)


def current_revision(repo_path):
    """Short hash of HEAD."""
    return _git(repo_path, "rev-parse", "--verify", "--short", "HEAD").strip()


def tracked_files(repo_path):
    """Paths under version control, relative to repo_path."""
    out = _git(repo_path, "ls-files", "-z")
    return [p for p in out.split("\0") if p]
