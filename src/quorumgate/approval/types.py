"""Shared error taxonomy and value types for threshold approval.

Dependencies: (none; leaf module)
Wired in: approval/registry.py, approval/session.py, approval/submission.py
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ApprovalGateError(ValueError):
    """Base error carrying a stable machine-readable code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class ConfigError(ApprovalGateError):
    """Raised when a signer registry or gate config is malformed.

    Fatal: callers must not proceed with a registry that failed to build.
    """


class ApprovalError(ApprovalGateError):
    """Raised when a single submitted approval cannot be counted."""


class UnknownSignerError(ApprovalError):
    """The claimed signer is not a member of the registry."""

    def __init__(self, key_id: str) -> None:
        super().__init__("unknown_signer", f"Signer {key_id[:16]} is not registered.")
        self.key_id = key_id


class InvalidSignatureError(ApprovalError):
    """The claimed signer is registered but the signature does not verify."""

    def __init__(self, key_id: str) -> None:
        super().__init__(
            "invalid_signature",
            f"Signature from signer {key_id[:16]} does not verify against the message.",
        )
        self.key_id = key_id


class ThresholdNotReachedError(ApprovalError):
    """No authorization token is available for this caller."""

    def __init__(self, approved_count: int, threshold: int) -> None:
        super().__init__(
            "threshold_not_reached",
            f"Authorization unavailable: {approved_count}/{threshold} approvals.",
        )
        self.approved_count = approved_count
        self.threshold = threshold


class TransportError(ApprovalGateError):
    """Raised by a payload submitter when the downstream action fails."""

    def __init__(self, message: str) -> None:
        super().__init__("transport_failure", message)


class SubmitOutcome(StrEnum):
    """Result of a successful ``ApprovalSession.submit`` call."""

    ACCEPTED = "accepted"
    DUPLICATE_IGNORED = "duplicate_ignored"


@dataclass(frozen=True)
class ApprovalStatus:
    """Consistent snapshot of a session's approval progress."""

    approved_count: int
    threshold: int
    is_authorized: bool

    @property
    def remaining(self) -> int:
        return max(0, self.threshold - self.approved_count)

    def to_dict(self) -> dict[str, Any]:
        return {
            "approved_count": self.approved_count,
            "threshold": self.threshold,
            "is_authorized": self.is_authorized,
        }


@dataclass(frozen=True)
class Authorization:
    """Single-use token issued once per session when the threshold is met."""

    token_id: str
    message_digest: str
    signer_ids: tuple[str, ...]
    threshold: int
    issued_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "token_id": self.token_id,
            "message_digest": self.message_digest,
            "signer_ids": list(self.signer_ids),
            "threshold": self.threshold,
            "issued_at": self.issued_at,
        }
