from abc import ABC, abstractmethod
from enum import Enum


class Status(Enum):
    COMMITTED = "committed"


class Backend(ABC):
    """Base interface for snapshot backends.

    Implementations: PosixBackend.
    """

    @abstractmethod
    def init(self):
        """Initialize storage for the repository."""
        pass

    @abstractmethod
    def open(self):
        """Open an initialized backend. Returns the backend."""
        pass

    @abstractmethod
    def is_initialized(self):
        pass

    @abstractmethod
    def get_status(self):
        """Returns a Status."""
        pass

    @abstractmethod
    def commit(self, metadata=None):
        """Snapshot untracked files at the current revision. Returns the Version."""
        pass

    @abstractmethod
    def checkout(self, version):
        """Restore the snapshot of a committed version into the working tree."""
        pass

    @abstractmethod
    def diff(self, v1, v2, path):
        """Text diff of path between two versions."""
        pass

    @abstractmethod
    def get_versions(self):
        """Committed versions, oldest first."""
        pass
