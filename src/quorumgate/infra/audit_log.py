"""Append-only audit log for approval decisions."""

from __future__ import annotations

import datetime
from pathlib import Path


def log_event(event: str, audit_path: Path, **fields: object) -> None:
    """Append one decision record to the audit log."""
    ts = datetime.datetime.now(tz=datetime.UTC).isoformat()
    details = "".join(f" {name}={value!r}" for name, value in sorted(fields.items()))
    entry = f"[{ts}] event={event}{details}\n"
    audit_path.parent.mkdir(parents=True, exist_ok=True)
    with audit_path.open("a") as f:
        f.write(entry)
