"""Threshold-signature authorization gate.

Public API: ApprovalSession, SignerRegistry, SubmissionGate, VerificationKey,
    default_verifier, load_gate_config
Internal: approval, config, infra, cli
"""

from quorumgate.approval import (
    ApprovalSession,
    SignerRegistry,
    SubmissionGate,
    VerificationKey,
    default_verifier,
)
from quorumgate.config import load_gate_config

__all__ = [
    "ApprovalSession",
    "SignerRegistry",
    "SubmissionGate",
    "VerificationKey",
    "default_verifier",
    "load_gate_config",
]
