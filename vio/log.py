"""Audit logging.

Appends structured JSON entries to ~/.vio/logs.jsonl.
Each entry records a repository event (init, commit, checkout) with
timestamp, repository path and version.
"""

import json
from datetime import datetime
from pathlib import Path

LOGS_FILE = Path.home() / ".vio" / "logs.jsonl"


def write_log(entry):
    """Append an audit log entry."""
    LOGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    entry["timestamp"] = datetime.now().isoformat()
    with open(LOGS_FILE, "a") as f:
        f.write(json.dumps(entry) + "\n")


def read_logs(repo=None):
    """Audit entries oldest-first, optionally only those for one repository.

    Unparsable lines are skipped; the audit log is informational, unlike
    the index.
    """
    if not LOGS_FILE.exists():
        return []
    entries = []
    for line in LOGS_FILE.read_text().splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            continue
        if repo and entry.get("repo") != str(repo):
            continue
        entries.append(entry)
    return entries
