"""Tests for approval bundle parsing."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from quorumgate.approval.key_files import load_approval_bundle, read_json_file
from quorumgate.approval.types import ConfigError

if TYPE_CHECKING:
    from conftest import SignerKeys


def _write_bundle(tmp_path: Path, payload: Any) -> Path:
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_bundle(
    tmp_path: Path, make_signer: Callable[..., SignerKeys], message: bytes
) -> None:
    signer = make_signer()
    signature = signer.sign(message)
    path = _write_bundle(
        tmp_path,
        {
            "message_hex": "0x" + message.hex(),
            "approvals": [
                {
                    "scheme": "ed25519",
                    "public_key": signer.key.hex(),
                    "signature": signature.hex(),
                }
            ],
        },
    )

    bundle = load_approval_bundle(path)

    assert bundle.message == message
    assert bundle.approvals[0].key == signer.key
    assert bundle.approvals[0].signature == signature


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"approvals": []},
        {"message_hex": "00", "approvals": {}},
        {"message_hex": "zz", "approvals": []},
    ],
)
def test_malformed_bundles_rejected(tmp_path: Path, payload: Any) -> None:
    with pytest.raises(ConfigError) as exc:
        load_approval_bundle(_write_bundle(tmp_path, payload))
    assert exc.value.code == "invalid_config"


def test_malformed_entries_kept_as_row_rejections(
    tmp_path: Path, make_signer: Callable[..., SignerKeys], message: bytes
) -> None:
    signer = make_signer()
    good = {
        "scheme": "ed25519",
        "public_key": signer.key.hex(),
        "signature": signer.sign(message).hex(),
    }
    path = _write_bundle(
        tmp_path,
        {
            "message_hex": message.hex(),
            "approvals": [
                "not-an-object",
                {"scheme": "ed25519", "public_key": "00"},
                {"scheme": "bls12-381", "public_key": "ab" * 48, "signature": "00"},
                {"scheme": "ed25519", "public_key": "zz", "signature": "00"},
                {**good, "signature": "not-hex"},
                good,
            ],
        },
    )

    bundle = load_approval_bundle(path)

    assert [a.error for a in bundle.approvals] == [
        "malformed_approval",
        "malformed_approval",
        "invalid_key",
        "invalid_key",
        "malformed_approval",
        None,
    ]
    assert all(a.key is None for a in bundle.approvals[:5])
    assert bundle.approvals[0].label == "approval #0"
    assert bundle.approvals[2].label == "ab" * 8
    assert bundle.approvals[5].key == signer.key
    assert bundle.approvals[5].label == signer.key.key_id[:16]


def test_read_json_file_missing_and_invalid(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="missing"):
        read_json_file(tmp_path / "nope.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid JSON"):
        read_json_file(broken)
