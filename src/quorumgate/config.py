"""Gate configuration loading and TOML parsing.

A gate config names the authorized signers and the approval threshold::

    [gate]
    threshold = 2
    prehashed = true

    [signers.alice]
    scheme = "ed25519"
    public_key = "3b6a27bc..."

Dependencies: approval.crypto, approval.types
Wired in: cli.py → main(), approval/registry.py → SignerRegistry.from_config
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from quorumgate.approval.crypto import SUPPORTED_SCHEMES, VerificationKey
from quorumgate.approval.types import ConfigError

CONFIG_ENV_VAR = "QUORUMGATE_CONFIG"
AUDIT_LOG_ENV_VAR = "QUORUMGATE_AUDIT_LOG"
DEFAULT_CONFIG_NAME = "quorumgate.toml"


@dataclass(frozen=True)
class SignerEntry:
    """One named signer from the config file."""

    name: str
    """Operator-facing label, e.g. ``"alice"``."""

    key: VerificationKey
    """Canonicalized verification key."""


@dataclass(frozen=True)
class GateConfig:
    """Fully resolved signer set and threshold."""

    threshold: int
    signers: list[SignerEntry]
    prehashed: bool = True
    """When ``True``, secp256k1 approvals sign a 32-byte message digest."""

    def signer_name(self, key_id: str) -> str | None:
        for entry in self.signers:
            if entry.key.key_id == key_id:
                return entry.name
        return None


def _parse_signer(name: str, raw: dict[str, object]) -> SignerEntry:
    scheme = raw.get("scheme")
    if not isinstance(scheme, str) or scheme not in SUPPORTED_SCHEMES:
        msg = (
            f"Signer '{name}': invalid scheme '{scheme}'. "
            f"Must be one of {sorted(SUPPORTED_SCHEMES)}."
        )
        raise ConfigError("invalid_config", msg)
    public_key = raw.get("public_key")
    if not isinstance(public_key, str) or not public_key:
        raise ConfigError("invalid_config", f"Signer '{name}': 'public_key' must be a hex string.")
    return SignerEntry(name=name, key=VerificationKey.from_hex(scheme, public_key))


def load_gate_config(config_path: Path) -> GateConfig:
    """Load a gate configuration from a TOML file.

    Structural problems raise ``ConfigError``; threshold range checks are left
    to ``SignerRegistry`` so both entry points enforce the same rules.
    """
    if not config_path.is_file():
        raise ConfigError("invalid_config", f"Gate config not found: {config_path}")

    try:
        with config_path.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError("invalid_config", f"Invalid TOML in {config_path}: {exc}") from exc

    gate_raw: object = data.get("gate")
    if not isinstance(gate_raw, dict):
        raise ConfigError("invalid_config", "Config is missing the [gate] section.")
    gate = cast(dict[str, object], gate_raw)

    threshold = gate.get("threshold")
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise ConfigError("invalid_config", "[gate] 'threshold' must be an integer.")
    prehashed = gate.get("prehashed", True)
    if not isinstance(prehashed, bool):
        raise ConfigError("invalid_config", "[gate] 'prehashed' must be a boolean.")

    signers_raw: object = data.get("signers", {})
    if not isinstance(signers_raw, dict):
        raise ConfigError("invalid_config", "[signers] must be a table of signer sections.")
    signers: list[SignerEntry] = []
    for signer_name, signer_val in cast(dict[str, object], signers_raw).items():
        if not isinstance(signer_val, dict):
            raise ConfigError("invalid_config", f"Signer '{signer_name}' must be a table.")
        signers.append(_parse_signer(signer_name, cast(dict[str, object], signer_val)))

    return GateConfig(threshold=threshold, signers=signers, prehashed=prehashed)


def resolve_config_path(explicit: str | None, base_dir: Path) -> Path:
    """Pick the config path from the flag, then the environment, then the default."""
    raw = explicit or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_NAME
    path = Path(raw)
    return path if path.is_absolute() else base_dir / path


def resolve_audit_log_path(explicit: str | None, base_dir: Path) -> Path | None:
    raw = explicit or os.environ.get(AUDIT_LOG_ENV_VAR)
    if not raw:
        return None
    path = Path(raw)
    return path if path.is_absolute() else base_dir / path
