"""Low-level infrastructure and plumbing.

Public API: Web3PayloadSubmitter, log_event
Internal: audit_log, chain_submitter
"""

from quorumgate.infra.audit_log import log_event
from quorumgate.infra.chain_submitter import Web3PayloadSubmitter

__all__ = [
    "Web3PayloadSubmitter",
    "log_event",
]
