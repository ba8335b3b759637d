"""Append-only index of committed versions.

One line per version, in commit order. Lines are only ever appended; nothing
is rewritten or removed. Writers serialize on an exclusive flock of the index
file itself.
"""

import fcntl
import json
import os
import time
from contextlib import contextmanager
from pathlib import Path

from vio.errors import AlreadyInitialized, LockTimeout, MalformedEntry, NotFound
from vio.version import Version, contains_version

DEFAULT_LOCK_TIMEOUT = 30.0
_LOCK_POLL_INTERVAL = 0.05


def parse_line(line):
    """Parse one ``revision#epoch,<json>`` index line into a Version."""
    i = line.find(",")
    if i < 0:
        raise MalformedEntry(f"Malformed version in index: {line}")
    head, meta_str = line[:i], line[i + 1:]
    if "#" not in head:
        raise MalformedEntry(f"Missing timestamp in index entry: {line}")

    try:
        meta = json.loads(meta_str)
    except json.JSONDecodeError as e:
        raise MalformedEntry(f"Invalid metadata JSON in index entry: {line}") from e
    if not isinstance(meta, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in meta.items()
    ):
        raise MalformedEntry(f"Metadata must be an object of strings: {line}")

    try:
        return Version.parse(head, meta)
    except MalformedEntry as e:
        raise MalformedEntry(f"{e} (index entry: {line})") from e


class Index:
    """The durable version log of one repository."""

    def __init__(self, path):
        self.path = Path(path)

    @classmethod
    def open(cls, path):
        path = Path(path)
        if not path.is_file():
            raise NotFound(f"Index not found at {path}. Run 'vio init' first.")
        return cls(path)

    @classmethod
    def create(cls, path):
        path = Path(path)
        try:
            with open(path, "x", encoding="utf-8"):
                pass
        except FileExistsError as e:
            raise AlreadyInitialized(f"Repository already initialized ({path} exists)") from e
        return cls(path)

    def read_all(self):
        """Every committed version, in insertion order.

        A malformed line aborts the read: dropping it would silently lose a
        committed version.
        """
        try:
            contents = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise NotFound(f"Index not found at {self.path}") from e

        versions = []
        for line in contents.split("\n"):
            if not line.strip():
                continue
            versions.append(parse_line(line))
        return versions

    def contains(self, version):
        return contains_version(self.read_all(), version)

    def append(self, version):
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(version.serialize() + "\n")
            f.flush()
            os.fsync(f.fileno())

    @contextmanager
    def lock(self, timeout=None):
        """Hold an exclusive lock on the index for the duration of the block.

        Waits at most ``timeout`` seconds (DEFAULT_LOCK_TIMEOUT when None),
        then raises LockTimeout. The lock is released on every exit path.
        """
        timeout = DEFAULT_LOCK_TIMEOUT if timeout is None else timeout
        try:
            lock_fd = open(self.path, "rb")
        except FileNotFoundError as e:
            raise NotFound(f"Index not found at {self.path}") from e

        try:
            deadline = time.monotonic() + timeout
            while True:
                try:
                    fcntl.flock(lock_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    if time.monotonic() >= deadline:
                        raise LockTimeout(
                            f"Timed out after {timeout}s waiting for the lock on {self.path}"
                        )
                    time.sleep(_LOCK_POLL_INTERVAL)
            try:
                yield self
            finally:
                fcntl.flock(lock_fd, fcntl.LOCK_UN)
        finally:
            lock_fd.close()
