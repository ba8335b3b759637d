"""vio: snapshot the files git doesn't track, next to the revision that does."""

__version__ = "0.1.0"
