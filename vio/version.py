"""Version model: a git revision plus a point-in-time snapshot and metadata.

A version is written to the index as:

    <revision>#<epoch seconds>,<json metadata>

e.g. ``3943943128#5635869343,{"foo":"bar","hello":"goodbye"}``. git revisions
never contain ``#``, so the encoding stays unambiguous and greppable.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Optional

from vio.errors import MalformedEntry

_FORBIDDEN_IN_REVISION = ("#", ",")


def _now():
    return datetime.now(timezone.utc)


def _from_epoch(seconds):
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


@dataclass(frozen=True, eq=False)
class Version:
    """One commit of vio. Immutable once built."""

    revision: str
    timestamp: Optional[datetime] = None
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.revision or not self.revision.strip():
            raise MalformedEntry("Version revision must be non-empty")
        if any(c in self.revision for c in _FORBIDDEN_IN_REVISION) or any(
            c.isspace() for c in self.revision
        ):
            raise MalformedEntry(f"Invalid revision {self.revision!r}")

        # Whole seconds only: the index stores epoch seconds, so a fresh
        # version must compare equal to the same version read back.
        ts = self.timestamp if self.timestamp is not None else _now()
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        object.__setattr__(self, "timestamp", ts.astimezone(timezone.utc).replace(microsecond=0))
        metadata = dict(self.metadata or {})
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in metadata.items()):
            raise MalformedEntry(f"Metadata keys and values must be strings: {metadata!r}")
        object.__setattr__(self, "metadata", MappingProxyType(metadata))

    @classmethod
    def parse(cls, text, metadata=None):
        """Parse ``revision`` or ``revision#epochSeconds``.

        Without a timestamp the version is stamped with the current time.
        A timestamp that is present but not an integer is a fatal error,
        never silently replaced.
        """
        fields = text.split("#")
        if len(fields) > 2:
            raise MalformedEntry(f"Malformed version {text!r}: more than one '#'")

        revision = fields[0].strip()
        if len(fields) == 1:
            return cls(revision, None, metadata or {})

        raw_ts = fields[1].strip()
        try:
            seconds = int(raw_ts)
        except ValueError as e:
            raise MalformedEntry(f"Malformed timestamp {raw_ts!r} in version {text!r}") from e
        try:
            ts = _from_epoch(seconds)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedEntry(f"Timestamp out of range in version {text!r}") from e
        return cls(revision, ts, metadata or {})

    @property
    def epoch(self):
        """Unix-epoch seconds; also the snapshot directory name."""
        return int(self.timestamp.timestamp())

    @property
    def ref(self):
        """Short ``revision#epoch`` form accepted by ``vio checkout``."""
        return f"{self.revision}#{self.epoch}"

    def serialize(self):
        meta = json.dumps(dict(self.metadata), separators=(",", ":"), sort_keys=True)
        return f"{self.ref},{meta}"

    def __str__(self):
        return self.serialize()

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return versions_equal(self, other)

    def __hash__(self):
        return hash((self.revision, self.timestamp, frozenset(self.metadata.items())))


def versions_equal(a, b):
    """Field-wise structural equality: revision, timestamp and metadata."""
    return (
        a.revision == b.revision
        and a.timestamp == b.timestamp
        and dict(a.metadata) == dict(b.metadata)
    )


def contains_version(versions, version):
    return any(versions_equal(v, version) for v in versions)
