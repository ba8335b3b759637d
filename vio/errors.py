"""Exception hierarchy for vio.

Every failure aborts the current operation and surfaces one of these types.
Nothing is retried or recovered automatically.
"""


class VioError(Exception):
    """Base class for all vio failures."""


class ConfigError(VioError, ValueError):
    """Invalid or incomplete .vioconfig / backend configuration."""


class AlreadyInitialized(VioError):
    """The repository already has an index."""


class NotFound(VioError):
    """The index, config or a snapshot directory is missing."""


class UncommittedChanges(VioError):
    """Tracked files have local modifications."""


class DuplicateVersion(VioError):
    """An equal version is already in the index."""


class VersionNotFound(VioError):
    """The requested version is not in the index."""


class MalformedEntry(VioError, ValueError):
    """A version string or index line could not be parsed."""


class SnapshotIOError(VioError):
    """Creating or restoring a snapshot directory failed."""


class LockTimeout(VioError):
    """The index lock could not be acquired in time."""


class VcsError(VioError):
    """git is missing or one of its commands failed."""


class Unimplemented(VioError, NotImplementedError):
    """The backend does not provide this operation."""
