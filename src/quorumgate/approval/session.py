"""Per-message signature collection and threshold decision.

An ``ApprovalSession`` binds a ``SignerRegistry`` to one message and counts
approvals by distinct signer identity. Distinct signature bytes from the same
signer never count twice: ECDSA signatures are malleable and re-randomized
nonces produce new valid signatures for the same (key, message) pair.

Dependencies: approval.crypto, approval.registry, approval.types
Wired in: approval/submission.py, cli.py
"""

from __future__ import annotations

import hashlib
import logging
import threading
from datetime import UTC, datetime
from uuid import uuid4

from quorumgate.approval.crypto import VerificationKey, Verifier, default_verifier
from quorumgate.approval.registry import SignerRegistry
from quorumgate.approval.types import (
    ApprovalStatus,
    Authorization,
    InvalidSignatureError,
    SubmitOutcome,
    ThresholdNotReachedError,
    UnknownSignerError,
)

_log = logging.getLogger(__name__)


class ApprovalSession:
    """Thread-safe collector of signer approvals for a single message.

    States are Collecting and Authorized. Authorized is terminal: accepted
    approvals are never removed, so the threshold once met stays met.

    Raises ``ConfigError("invalid_message")`` when the verifier can never
    accept a signature over *message* for a scheme in the registry.
    """

    def __init__(
        self,
        registry: SignerRegistry,
        message: bytes,
        *,
        verifier: Verifier | None = None,
        session_id: str | None = None,
    ) -> None:
        self._registry = registry
        self._message = bytes(message)
        self._verifier: Verifier = verifier if verifier is not None else default_verifier()
        check_message = getattr(self._verifier, "check_message", None)
        if check_message is not None:
            check_message(self._message, registry.schemes())
        self._session_id = session_id or uuid4().hex
        self._approvals: dict[str, bytes] = {}
        self._token_issued = False
        self._lock = threading.Lock()

    @property
    def registry(self) -> SignerRegistry:
        return self._registry

    @property
    def message(self) -> bytes:
        return self._message

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def message_digest(self) -> str:
        return hashlib.sha256(self._message).hexdigest()

    def submit(self, signer_claim: VerificationKey, signature: bytes) -> SubmitOutcome:
        """Validate and record one approval from the claimed signer.

        Membership is checked before any cryptography runs, and the signature
        is verified only under the claimed key.
        """
        key_id = signer_claim.key_id
        if not self._registry.contains(signer_claim):
            _log.warning(
                "Session %s: rejected approval from unregistered signer %s",
                self._session_id,
                key_id[:16],
            )
            raise UnknownSignerError(key_id)

        with self._lock:
            if key_id in self._approvals:
                return self._duplicate(key_id)

        if not self._verifier.verify(self._message, bytes(signature), signer_claim):
            _log.warning(
                "Session %s: invalid signature from registered signer %s",
                self._session_id,
                key_id[:16],
            )
            raise InvalidSignatureError(key_id)

        with self._lock:
            if key_id in self._approvals:
                return self._duplicate(key_id)
            self._approvals[key_id] = bytes(signature)
            approved_count = len(self._approvals)

        threshold = self._registry.threshold()
        _log.info(
            "Session %s: accepted approval from %s (%d/%d)",
            self._session_id,
            key_id[:16],
            approved_count,
            threshold,
        )
        if approved_count == threshold:
            _log.info("Session %s: approval threshold reached", self._session_id)
        return SubmitOutcome.ACCEPTED

    def _duplicate(self, key_id: str) -> SubmitOutcome:
        """Report a repeat approval from a signer already counted (caller holds lock)."""
        _log.debug(
            "Session %s: ignored duplicate approval from %s", self._session_id, key_id[:16]
        )
        return SubmitOutcome.DUPLICATE_IGNORED

    def status(self) -> ApprovalStatus:
        with self._lock:
            approved_count = len(self._approvals)
        threshold = self._registry.threshold()
        return ApprovalStatus(
            approved_count=approved_count,
            threshold=threshold,
            is_authorized=approved_count >= threshold,
        )

    @property
    def is_authorized(self) -> bool:
        return self.status().is_authorized

    @property
    def is_token_issued(self) -> bool:
        with self._lock:
            return self._token_issued

    def approved_signers(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(sorted(self._approvals))

    def authorize_once(self) -> Authorization:
        """Issue the session's single authorization token.

        Exactly one caller receives the token once the threshold is met.
        Every other call raises ``ThresholdNotReachedError``, including calls
        made after the token was already issued.
        """
        threshold = self._registry.threshold()
        with self._lock:
            approved_count = len(self._approvals)
            if self._token_issued or approved_count < threshold:
                raise ThresholdNotReachedError(approved_count, threshold)
            self._token_issued = True
            signer_ids = tuple(sorted(self._approvals))
        authorization = Authorization(
            token_id=uuid4().hex,
            message_digest=self.message_digest,
            signer_ids=signer_ids,
            threshold=threshold,
            issued_at=datetime.now(UTC).isoformat(),
        )
        _log.info(
            "Session %s: issued authorization %s with %d signers",
            self._session_id,
            authorization.token_id,
            len(signer_ids),
        )
        return authorization

    def __repr__(self) -> str:
        status = self.status()
        return (
            f"ApprovalSession(id={self._session_id}, "
            f"approved={status.approved_count}/{status.threshold})"
        )
