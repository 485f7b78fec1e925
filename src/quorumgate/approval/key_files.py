"""Filesystem and serialization helpers for signer keys and approval bundles.

An approval bundle is a JSON object carrying the message and the approvals
collected for it::

    {
      "message_hex": "ab...",
      "approvals": [
        {"scheme": "ed25519", "public_key": "...", "signature": "..."}
      ]
    }

Dependencies: approval.crypto, approval.types
Wired in: cli.py → verify command
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from quorumgate.approval.crypto import VerificationKey
from quorumgate.approval.types import ConfigError


@dataclass(frozen=True)
class BundledApproval:
    """One signer claim plus its signature as read from a bundle.

    Entries that cannot be parsed keep their place in the bundle with
    ``key`` set to None and ``error`` holding the rejection code.
    """

    key: VerificationKey | None
    signature: bytes
    error: str | None = None
    label: str = ""


@dataclass(frozen=True)
class ApprovalBundle:
    """Message and the approvals submitted for it."""

    message: bytes
    approvals: list[BundledApproval]


def read_json_file(path: Path) -> dict[str, Any]:
    """Read and validate a JSON object from disk."""
    if not path.exists():
        raise ConfigError("invalid_config", f"Required file missing: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError("invalid_config", f"Invalid JSON file: {path}") from exc
    if not isinstance(data, dict):
        raise ConfigError("invalid_config", f"Invalid JSON object in file: {path}")
    return cast(dict[str, Any], data)


def load_approval_bundle(path: Path) -> ApprovalBundle:
    """Parse an approval bundle file into verification keys and signature bytes."""
    data = read_json_file(path)
    message_hex = data.get("message_hex")
    if not isinstance(message_hex, str):
        raise ConfigError("invalid_config", f"Bundle {path} is missing message_hex.")
    approvals_raw = data.get("approvals")
    if not isinstance(approvals_raw, list):
        raise ConfigError("invalid_config", f"Bundle {path} is missing approvals.")

    message = _hex_to_bytes(message_hex, "message_hex")
    approvals: list[BundledApproval] = []
    for index, item in enumerate(cast(list[Any], approvals_raw)):
        try:
            approvals.append(_parse_approval(index, item))
        except ConfigError as exc:
            approvals.append(
                BundledApproval(key=None, signature=b"", error=exc.code, label=_label(index, item))
            )
    return ApprovalBundle(message=message, approvals=approvals)


def _parse_approval(index: int, item: object) -> BundledApproval:
    if not isinstance(item, dict):
        raise ConfigError("malformed_approval", f"Bundle approval #{index} must be an object.")
    entry = cast(dict[str, Any], item)
    scheme = entry.get("scheme")
    public_key = entry.get("public_key")
    signature = entry.get("signature")
    if not all(isinstance(field, str) for field in (scheme, public_key, signature)):
        raise ConfigError(
            "malformed_approval",
            f"Bundle approval #{index} needs string scheme, public_key and signature.",
        )
    key = VerificationKey.from_hex(cast(str, scheme), cast(str, public_key))
    return BundledApproval(
        key=key,
        signature=_hex_to_bytes(
            cast(str, signature), f"approval #{index} signature", code="malformed_approval"
        ),
        label=key.key_id[:16],
    )


def _label(index: int, item: object) -> str:
    if isinstance(item, dict):
        public_key = cast(dict[str, Any], item).get("public_key")
        if isinstance(public_key, str) and public_key:
            return public_key[:16]
    return f"approval #{index}"


def _hex_to_bytes(value: str, field_name: str, *, code: str = "invalid_config") -> bytes:
    text = value.strip()
    if text.lower().startswith("0x"):
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise ConfigError(code, f"Bundle {field_name} is not valid hex.") from exc
