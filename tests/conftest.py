"""Shared test fixtures for quorumgate."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from dataclasses import dataclass

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from quorumgate.approval.crypto import ED25519, SECP256K1, VerificationKey
from quorumgate.approval.registry import SignerRegistry
from quorumgate.approval.session import ApprovalSession

_MESSAGE = hashlib.sha256(b"transfer 100 tokens to 0x1111").digest()


@dataclass(frozen=True)
class SignerKeys:
    """Private signing key paired with its registry verification key."""

    private_key: Ed25519PrivateKey | ec.EllipticCurvePrivateKey
    key: VerificationKey

    def sign(self, message: bytes) -> bytes:
        if isinstance(self.private_key, Ed25519PrivateKey):
            return self.private_key.sign(message)
        return self.private_key.sign(message, ec.ECDSA(Prehashed(hashes.SHA256())))


def _new_signer(scheme: str) -> SignerKeys:
    if scheme == ED25519:
        ed_key = Ed25519PrivateKey.generate()
        raw = ed_key.public_key().public_bytes(encoding=Encoding.Raw, format=PublicFormat.Raw)
        return SignerKeys(private_key=ed_key, key=VerificationKey.ed25519(raw))
    if scheme == SECP256K1:
        ec_key = ec.generate_private_key(ec.SECP256K1())
        point = ec_key.public_key().public_bytes(
            encoding=Encoding.X962, format=PublicFormat.UncompressedPoint
        )
        return SignerKeys(private_key=ec_key, key=VerificationKey.secp256k1(point))
    raise ValueError(scheme)


@pytest.fixture()
def make_signer() -> Callable[..., SignerKeys]:
    """Factory for fresh signing identities (``ed25519`` by default)."""

    def _make(scheme: str = ED25519) -> SignerKeys:
        return _new_signer(scheme)

    return _make


@pytest.fixture()
def message() -> bytes:
    """32-byte digest of a pending transaction."""
    return _MESSAGE


@pytest.fixture()
def signers() -> list[SignerKeys]:
    """Three registered signers: one secp256k1 and two Ed25519."""
    return [_new_signer(SECP256K1), _new_signer(ED25519), _new_signer(ED25519)]


@pytest.fixture()
def registry(signers: list[SignerKeys]) -> SignerRegistry:
    """Two-of-three registry over ``signers``."""
    return SignerRegistry.build({s.key for s in signers}, 2)


@pytest.fixture()
def session(registry: SignerRegistry, message: bytes) -> ApprovalSession:
    """Fresh approval session over ``message``."""
    return ApprovalSession(registry, message)
