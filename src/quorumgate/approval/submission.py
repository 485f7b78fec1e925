"""Gate between an authorized session and the external submission capability.

Dependencies: approval.session, approval.types
Wired in: infra/chain_submitter.py (implements PayloadSubmitter)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from quorumgate.approval.session import ApprovalSession
from quorumgate.approval.types import Authorization, TransportError

_log = logging.getLogger(__name__)


class PayloadSubmitter(Protocol):
    """External capability that performs the authorized action.

    Returns a transaction identifier or raises ``TransportError``.
    """

    def submit_payload(self, destination: str, value: int, data: bytes) -> str: ...


@dataclass(frozen=True)
class SubmissionReceipt:
    """Result of a gated submission."""

    transaction_id: str
    authorization: Authorization


class SubmissionGate:
    """Invoke a submitter at most once per session, and only after authorization."""

    def __init__(self, session: ApprovalSession, submitter: PayloadSubmitter) -> None:
        self._session = session
        self._submitter = submitter

    @property
    def session(self) -> ApprovalSession:
        return self._session

    def execute(self, destination: str, value: int, data: bytes = b"") -> SubmissionReceipt:
        """Consume the session's authorization token and submit the payload.

        ``ThresholdNotReachedError`` propagates untouched, so the submitter is
        never reached without a freshly issued token. The token stays consumed
        when the transport fails; the core does not retry.
        """
        authorization = self._session.authorize_once()
        try:
            transaction_id = self._submitter.submit_payload(destination, value, data)
        except TransportError:
            _log.error(
                "Session %s: submission failed after authorization %s",
                self._session.session_id,
                authorization.token_id,
            )
            raise
        except (OSError, RuntimeError, ValueError) as exc:
            _log.error(
                "Session %s: submission failed after authorization %s",
                self._session.session_id,
                authorization.token_id,
            )
            raise TransportError(f"Payload submission failed: {exc}") from exc
        _log.info(
            "Session %s: submitted authorized payload as %s",
            self._session.session_id,
            transaction_id,
        )
        return SubmissionReceipt(transaction_id=transaction_id, authorization=authorization)
