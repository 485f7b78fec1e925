"""CLI argument and version helpers for the quorumgate entrypoint."""

from __future__ import annotations

import argparse
import tomllib
from importlib import metadata
from pathlib import Path

_DIST_NAME = "quorumgate"
_FALLBACK_VERSION = "0.1.0"
_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def project_version(repo_root: Path) -> str:
    """Return the installed distribution version.

    Source checkouts that were never installed fall back to pyproject.toml,
    then to 0.1.0.
    """
    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        pass
    toml_path = repo_root / "pyproject.toml"
    if not toml_path.exists():
        return _FALLBACK_VERSION
    with open(toml_path, "rb") as fh:
        data = tomllib.load(fh)
    project_data: dict[str, object] = data.get("project", {})
    raw_version: object = project_data.get("version")
    return str(raw_version) if raw_version is not None else _FALLBACK_VERSION


def _add_common_options(parser: argparse.ArgumentParser, *, defaults: bool) -> None:
    # Subcommands must not reset values already given before the subcommand.
    parser.add_argument(
        "--config",
        default=None if defaults else argparse.SUPPRESS,
        help="Path to gate config TOML (default: $QUORUMGATE_CONFIG or quorumgate.toml)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING" if defaults else argparse.SUPPRESS,
        choices=_LOG_LEVELS,
        help="Logging verbosity (default: WARNING)",
    )


def parse_cli_args(repo_root: Path, argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments.

    ``--config`` and ``--log-level`` are accepted before or after the subcommand.
    """
    parser = argparse.ArgumentParser(
        prog="quorumgate", description="Threshold signature authorization gate"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=project_version(repo_root),
    )
    _add_common_options(parser, defaults=True)
    common = argparse.ArgumentParser(add_help=False)
    _add_common_options(common, defaults=False)

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "check-config", parents=[common], help="Validate the signer set and threshold"
    )

    verify = subparsers.add_parser(
        "verify",
        parents=[common],
        help="Collect the approvals in a bundle and report authorization",
    )
    verify.add_argument("bundle", help="Path to an approval bundle JSON file")
    verify.add_argument(
        "--audit-log",
        default=None,
        help="Append decisions to this file (default: $QUORUMGATE_AUDIT_LOG)",
    )
    return parser.parse_args(argv)
