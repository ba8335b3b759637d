VIOIGNORE = ".vioignore"

# git metadata never goes into a snapshot, whatever .vioignore says
ALWAYS_EXCLUDE = [".git"]


def get_exclude_patterns():
    """Entries excluded from every snapshot."""
    return list(ALWAYS_EXCLUDE)


def get_ignore_filters(name=VIOIGNORE):
    """rsync filter rules that honour ignore files anywhere in the tree.

    Each ``name`` file is merged per directory: its patterns (one per line,
    blank and ``#`` lines skipped) apply to the directory holding it and
    everything below.
    """
    return [f":- {name}"]
