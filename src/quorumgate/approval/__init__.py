"""Signer registry, approval collection, and threshold decision.

Public API: ApprovalError, ApprovalSession, ApprovalStatus, Authorization,
    ConfigError, Ed25519Verifier, InvalidSignatureError, MultiSchemeVerifier,
    PayloadSubmitter, Secp256k1Verifier, SignerRegistry, SubmissionGate,
    SubmissionReceipt, SubmitOutcome, ThresholdNotReachedError, TransportError,
    UnknownSignerError, VerificationKey, Verifier, default_verifier
Internal: crypto, key_files, registry, session, submission, types
"""

from quorumgate.approval.crypto import (
    Ed25519Verifier,
    MultiSchemeVerifier,
    Secp256k1Verifier,
    VerificationKey,
    Verifier,
    default_verifier,
)
from quorumgate.approval.registry import SignerRegistry
from quorumgate.approval.session import ApprovalSession
from quorumgate.approval.submission import PayloadSubmitter, SubmissionGate, SubmissionReceipt
from quorumgate.approval.types import (
    ApprovalError,
    ApprovalStatus,
    Authorization,
    ConfigError,
    InvalidSignatureError,
    SubmitOutcome,
    ThresholdNotReachedError,
    TransportError,
    UnknownSignerError,
)

__all__ = [
    "ApprovalError",
    "ApprovalSession",
    "ApprovalStatus",
    "Authorization",
    "ConfigError",
    "Ed25519Verifier",
    "InvalidSignatureError",
    "MultiSchemeVerifier",
    "PayloadSubmitter",
    "Secp256k1Verifier",
    "SignerRegistry",
    "SubmissionGate",
    "SubmissionReceipt",
    "SubmitOutcome",
    "ThresholdNotReachedError",
    "TransportError",
    "UnknownSignerError",
    "VerificationKey",
    "Verifier",
    "default_verifier",
]
