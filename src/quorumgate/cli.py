"""Operator CLI for validating gate configs and checking approval bundles."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from quorumgate.approval.crypto import default_verifier
from quorumgate.approval.key_files import load_approval_bundle
from quorumgate.approval.registry import SignerRegistry
from quorumgate.approval.session import ApprovalSession
from quorumgate.approval.types import ApprovalError, ConfigError
from quorumgate.cli_options import parse_cli_args
from quorumgate.config import (
    GateConfig,
    load_gate_config,
    resolve_audit_log_path,
    resolve_config_path,
)
from quorumgate.infra.audit_log import log_event

try:
    from rich.console import Console
    from rich.table import Table
except ModuleNotFoundError as exc:
    missing_package = exc.name or "unknown package"
    raise SystemExit(
        f"Missing display dependency package `{missing_package}`. "
        "Run `uv sync` so `rich>=13.0` is installed."
    ) from exc

EXIT_AUTHORIZED = 0
EXIT_NOT_AUTHORIZED = 1
EXIT_CONFIG_ERROR = 2


def _check_config(config: GateConfig, registry: SignerRegistry, console: Console) -> int:
    table = Table(title="Authorized signers")
    table.add_column("name")
    table.add_column("scheme")
    table.add_column("key id")
    for entry in config.signers:
        table.add_row(entry.name, entry.key.scheme, entry.key.key_id[:16])
    console.print(table)
    console.print(f"threshold: {registry.threshold()} of {registry.size()} signers")
    return EXIT_AUTHORIZED


def _verify_bundle(
    config: GateConfig,
    registry: SignerRegistry,
    bundle_path: Path,
    audit_path: Path | None,
    console: Console,
) -> int:
    bundle = load_approval_bundle(bundle_path)
    session = ApprovalSession(
        registry,
        bundle.message,
        verifier=default_verifier(prehashed=config.prehashed),
    )

    table = Table(title=f"Approvals for {session.message_digest[:16]}")
    table.add_column("#")
    table.add_column("signer")
    table.add_column("outcome")
    for index, approval in enumerate(bundle.approvals):
        if approval.key is None:
            outcome = approval.error or "malformed_approval"
            signer_ref = approval.label
            signer = approval.label
        else:
            signer_ref = approval.key.key_id
            try:
                outcome = session.submit(approval.key, approval.signature).value
            except ApprovalError as exc:
                outcome = exc.code
            signer = config.signer_name(signer_ref) or signer_ref[:16]
        table.add_row(str(index), signer, outcome)
        if audit_path is not None:
            log_event(
                outcome,
                audit_path,
                session=session.session_id,
                signer=signer_ref,
                message_digest=session.message_digest,
            )
    console.print(table)

    status = session.status()
    console.print(f"approvals: {status.approved_count}/{status.threshold}")
    if not status.is_authorized:
        console.print(f"NOT AUTHORIZED: {status.remaining} more approvals required")
        return EXIT_NOT_AUTHORIZED

    authorization = session.authorize_once()
    if audit_path is not None:
        log_event(
            "authorized",
            audit_path,
            session=session.session_id,
            token=authorization.token_id,
            signers=",".join(authorization.signer_ids),
        )
    console.print(f"AUTHORIZED: token {authorization.token_id}")
    return EXIT_AUTHORIZED


def main(argv: list[str] | None = None, *, console: Console | None = None) -> int:
    """Load config, build the signer registry, and run the selected command."""
    repo_root = Path(__file__).resolve().parents[2]
    load_dotenv(dotenv_path=Path.cwd() / ".env")
    args = parse_cli_args(repo_root, argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    out = console or Console()
    base_dir = Path.cwd()

    config_path = resolve_config_path(args.config, base_dir)
    try:
        config = load_gate_config(config_path)
        registry = SignerRegistry.from_config(config)
        if args.command == "check-config":
            return _check_config(config, registry, out)
        audit_path = resolve_audit_log_path(args.audit_log, base_dir)
        return _verify_bundle(config, registry, Path(args.bundle), audit_path, out)
    except ConfigError as exc:
        print(f"Configuration error [{exc.code}]: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
