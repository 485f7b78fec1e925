"""Tests for gate configuration loading."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from quorumgate.approval.crypto import ED25519, SECP256K1
from quorumgate.approval.registry import SignerRegistry
from quorumgate.approval.types import ConfigError
from quorumgate.config import (
    AUDIT_LOG_ENV_VAR,
    CONFIG_ENV_VAR,
    load_gate_config,
    resolve_audit_log_path,
    resolve_config_path,
)

if TYPE_CHECKING:
    from conftest import SignerKeys


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "quorumgate.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_and_build_registry(
    tmp_path: Path, make_signer: Callable[..., SignerKeys]
) -> None:
    alice, bob = make_signer(ED25519), make_signer(SECP256K1)
    path = _write(
        tmp_path,
        f"""
[gate]
threshold = 2
prehashed = false

[signers.alice]
scheme = "ed25519"
public_key = "{alice.key.hex()}"

[signers.bob]
scheme = "secp256k1"
public_key = "0x{bob.key.hex()}"
""",
    )

    config = load_gate_config(path)
    registry = SignerRegistry.from_config(config)

    assert config.threshold == 2
    assert config.prehashed is False
    assert [entry.name for entry in config.signers] == ["alice", "bob"]
    assert config.signer_name(bob.key.key_id) == "bob"
    assert config.signer_name("f" * 64) is None
    assert registry.contains(alice.key) and registry.contains(bob.key)


def test_threshold_range_enforced_by_registry(
    tmp_path: Path, make_signer: Callable[..., SignerKeys]
) -> None:
    alice = make_signer()
    path = _write(
        tmp_path,
        f"""
[gate]
threshold = 2

[signers.alice]
scheme = "ed25519"
public_key = "{alice.key.hex()}"
""",
    )

    config = load_gate_config(path)
    assert config.prehashed is True
    with pytest.raises(ConfigError) as exc:
        SignerRegistry.from_config(config)
    assert exc.value.code == "threshold_out_of_range"


def test_no_signers_is_empty_signer_set(tmp_path: Path) -> None:
    config = load_gate_config(_write(tmp_path, "[gate]\nthreshold = 1\n"))
    with pytest.raises(ConfigError) as exc:
        SignerRegistry.from_config(config)
    assert exc.value.code == "empty_signer_set"


@pytest.mark.parametrize(
    "text",
    [
        "threshold = 1\n",
        "[gate]\nthreshold = 'two'\n",
        "[gate]\nthreshold = true\n",
        "[gate]\nthreshold = 1\nprehashed = 'yes'\n",
        "[gate]\nthreshold = 1\n[signers.alice]\nscheme = 'rsa'\npublic_key = 'ab'\n",
        "[gate]\nthreshold = 1\n[signers.alice]\nscheme = 'ed25519'\n",
        "signers = 3\n[gate]\nthreshold = 1\n",
        "[gate\n",
    ],
)
def test_malformed_config_rejected(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigError) as exc:
        load_gate_config(_write(tmp_path, text))
    assert exc.value.code == "invalid_config"


def test_bad_public_key_is_invalid_key(tmp_path: Path) -> None:
    text = "[gate]\nthreshold = 1\n[signers.alice]\nscheme = 'ed25519'\npublic_key = 'abcd'\n"
    with pytest.raises(ConfigError) as exc:
        load_gate_config(_write(tmp_path, text))
    assert exc.value.code == "invalid_key"


def test_missing_file_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_gate_config(tmp_path / "absent.toml")


def test_resolve_config_path_precedence(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    assert resolve_config_path(None, tmp_path) == tmp_path / "quorumgate.toml"

    monkeypatch.setenv(CONFIG_ENV_VAR, "conf/gate.toml")
    assert resolve_config_path(None, tmp_path) == tmp_path / "conf/gate.toml"
    assert resolve_config_path("/etc/gate.toml", tmp_path) == Path("/etc/gate.toml")


def test_resolve_audit_log_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(AUDIT_LOG_ENV_VAR, raising=False)
    assert resolve_audit_log_path(None, tmp_path) is None

    monkeypatch.setenv(AUDIT_LOG_ENV_VAR, "logs/audit.log")
    assert resolve_audit_log_path(None, tmp_path) == tmp_path / "logs/audit.log"
