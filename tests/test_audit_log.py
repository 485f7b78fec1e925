"""Tests for the append-only decision audit log."""

from __future__ import annotations

from pathlib import Path

from quorumgate.infra.audit_log import log_event


def test_log_event_appends_lines(tmp_path: Path) -> None:
    audit_path = tmp_path / "logs" / "audit.log"

    log_event("accepted", audit_path, signer="abc", session="s1")
    log_event("authorized", audit_path, token="t1")

    lines = audit_path.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("[")
    assert lines[0].endswith("event=accepted session='s1' signer='abc'")
    assert "event=authorized token='t1'" in lines[1]
