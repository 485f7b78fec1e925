"""Immutable set of authorized signers and the approval threshold.

Dependencies: approval.crypto, approval.types
Wired in: approval/session.py, cli.py
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from types import MappingProxyType
from typing import TYPE_CHECKING

from quorumgate.approval.crypto import VerificationKey
from quorumgate.approval.types import ConfigError

if TYPE_CHECKING:
    from quorumgate.config import GateConfig


class SignerRegistry:
    """Read-only registry keyed by each signer's canonical key encoding."""

    def __init__(self, signers: Iterable[VerificationKey], threshold: int) -> None:
        by_id = {key.key_id: key for key in signers}
        if not by_id:
            raise ConfigError("empty_signer_set", "Signer set must not be empty.")
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise ConfigError("threshold_out_of_range", "Threshold must be an integer.")
        if threshold <= 0 or threshold > len(by_id):
            raise ConfigError(
                "threshold_out_of_range",
                f"Threshold {threshold} must be between 1 and {len(by_id)} distinct signers.",
            )
        self._signers = MappingProxyType(by_id)
        self._threshold = threshold

    @classmethod
    def build(cls, keys: Iterable[VerificationKey], threshold: int) -> SignerRegistry:
        """Deduplicate *keys* by identity and validate *threshold* against them."""
        return cls(keys, threshold)

    @classmethod
    def from_config(cls, config: GateConfig) -> SignerRegistry:
        return cls([entry.key for entry in config.signers], config.threshold)

    def contains(self, key: VerificationKey) -> bool:
        return self._signers.get(key.key_id) == key

    def get(self, key_id: str) -> VerificationKey | None:
        return self._signers.get(key_id)

    def size(self) -> int:
        return len(self._signers)

    def threshold(self) -> int:
        return self._threshold

    def key_ids(self) -> tuple[str, ...]:
        return tuple(sorted(self._signers))

    def schemes(self) -> frozenset[str]:
        return frozenset(key.scheme for key in self._signers.values())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, VerificationKey) and self.contains(key)

    def __iter__(self) -> Iterator[VerificationKey]:
        return (self._signers[key_id] for key_id in self.key_ids())

    def __len__(self) -> int:
        return len(self._signers)

    def __repr__(self) -> str:
        return f"SignerRegistry(size={self.size()}, threshold={self._threshold})"
