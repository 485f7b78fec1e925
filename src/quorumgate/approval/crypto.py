"""Verification keys and signature verification primitives.

Keys compare by their canonical public encoding, never by object identity.
Verifiers are stateless and safe to share across sessions and threads.

Dependencies: approval.types
Wired in: approval/registry.py, approval/session.py, config.py
"""

from __future__ import annotations

import hashlib
from collections.abc import Collection
from dataclasses import dataclass
from typing import Final, Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed, encode_dss_signature
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from quorumgate.approval.types import ConfigError

ED25519: Final[str] = "ed25519"
SECP256K1: Final[str] = "secp256k1"
SUPPORTED_SCHEMES: Final[frozenset[str]] = frozenset({ED25519, SECP256K1})

_COMPACT_SIGNATURE_LENGTH = 64
_DIGEST_LENGTH = 32


def _as_bytes(value: bytes | str) -> bytes:
    if isinstance(value, bytes):
        return value
    text = value.strip()
    if text.lower().startswith("0x"):
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise ConfigError("invalid_key", "Public key is not valid hex.") from exc


def _canonical_raw(scheme: str, raw: bytes) -> bytes:
    """Re-encode *raw* so every encoding of one key yields the same bytes."""
    if scheme == ED25519:
        try:
            ed_key = Ed25519PublicKey.from_public_bytes(raw)
        except ValueError as exc:
            raise ConfigError("invalid_key", "Malformed Ed25519 public key.") from exc
        return ed_key.public_bytes(encoding=Encoding.Raw, format=PublicFormat.Raw)
    if scheme == SECP256K1:
        try:
            ec_key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), raw)
        except ValueError as exc:
            raise ConfigError("invalid_key", "Malformed secp256k1 public key.") from exc
        return ec_key.public_bytes(encoding=Encoding.X962, format=PublicFormat.CompressedPoint)
    raise ConfigError("invalid_key", f"Unsupported signature scheme: {scheme}")


@dataclass(frozen=True)
class VerificationKey:
    """Public verification key identified by its canonical byte encoding.

    ``raw`` is canonicalized on construction: raw 32 bytes for Ed25519 and
    compressed SEC1 for secp256k1, so equal keys always share a ``key_id``.
    """

    scheme: str
    raw: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", _canonical_raw(self.scheme, bytes(self.raw)))

    @classmethod
    def ed25519(cls, value: bytes | str) -> VerificationKey:
        return cls(scheme=ED25519, raw=_as_bytes(value))

    @classmethod
    def secp256k1(cls, value: bytes | str) -> VerificationKey:
        """Accept compressed or uncompressed SEC1 points; store compressed."""
        return cls(scheme=SECP256K1, raw=_as_bytes(value))

    @classmethod
    def from_hex(cls, scheme: str, value: str) -> VerificationKey:
        if scheme not in SUPPORTED_SCHEMES:
            raise ConfigError("invalid_key", f"Unsupported signature scheme: {scheme}")
        return cls(scheme=scheme, raw=_as_bytes(value))

    @property
    def key_id(self) -> str:
        return compute_key_id(self)

    def hex(self) -> str:
        return public_key_hex(self)


class Verifier(Protocol):
    """Deterministic signature check; returns False instead of raising."""

    def verify(self, message: bytes, signature: bytes, key: VerificationKey) -> bool: ...


class Ed25519Verifier:
    """Verify Ed25519 signatures over the raw message bytes."""

    scheme = ED25519

    def verify(self, message: bytes, signature: bytes, key: VerificationKey) -> bool:
        if key.scheme != ED25519:
            return False
        try:
            Ed25519PublicKey.from_public_bytes(key.raw).verify(signature, message)
        except (InvalidSignature, ValueError):
            return False
        return True


class Secp256k1Verifier:
    """Verify ECDSA signatures over secp256k1.

    With ``prehashed`` the message must already be a 32-byte SHA-256 digest,
    otherwise the message is hashed with SHA-256 before verification.
    Signatures may be DER encoded or 64-byte compact ``r || s``.
    """

    scheme = SECP256K1

    def __init__(self, *, prehashed: bool = True) -> None:
        self._prehashed = prehashed

    def check_message(self, message: bytes, schemes: Collection[str] = (SECP256K1,)) -> None:
        """Raise ``ConfigError`` when *message* can never verify in this mode."""
        if SECP256K1 in schemes and self._prehashed and len(message) != _DIGEST_LENGTH:
            raise ConfigError(
                "invalid_message",
                f"Prehashed secp256k1 verification needs a {_DIGEST_LENGTH}-byte digest, "
                f"got {len(message)} bytes.",
            )

    def verify(self, message: bytes, signature: bytes, key: VerificationKey) -> bool:
        if key.scheme != SECP256K1:
            return False
        if self._prehashed and len(message) != _DIGEST_LENGTH:
            return False
        algorithm = (
            ec.ECDSA(Prehashed(hashes.SHA256()))
            if self._prehashed
            else ec.ECDSA(hashes.SHA256())
        )
        try:
            public_key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), key.raw)
            public_key.verify(_to_der(signature), message, algorithm)
        except (InvalidSignature, ValueError):
            return False
        return True


class MultiSchemeVerifier:
    """Dispatch verification to the verifier registered for the key's scheme."""

    def __init__(self, verifiers: dict[str, Verifier]) -> None:
        self._verifiers = dict(verifiers)

    def check_message(self, message: bytes, schemes: Collection[str]) -> None:
        """Run the per-scheme message checks for every scheme in *schemes*."""
        for scheme in sorted(set(schemes)):
            check = getattr(self._verifiers.get(scheme), "check_message", None)
            if check is not None:
                check(message, (scheme,))

    def verify(self, message: bytes, signature: bytes, key: VerificationKey) -> bool:
        verifier = self._verifiers.get(key.scheme)
        if verifier is None:
            return False
        return verifier.verify(message, signature, key)


def default_verifier(*, prehashed: bool = True) -> MultiSchemeVerifier:
    return MultiSchemeVerifier(
        {
            ED25519: Ed25519Verifier(),
            SECP256K1: Secp256k1Verifier(prehashed=prehashed),
        }
    )


def _to_der(signature: bytes) -> bytes:
    if len(signature) == _COMPACT_SIGNATURE_LENGTH:
        r = int.from_bytes(signature[:32], "big")
        s = int.from_bytes(signature[32:], "big")
        return encode_dss_signature(r, s)
    return signature


def compute_key_id(key: VerificationKey) -> str:
    """Compute stable key id from the canonical public bytes."""
    return hashlib.sha256(key.raw).hexdigest()


def public_key_hex(key: VerificationKey) -> str:
    """Serialize canonical public key bytes to hex."""
    return key.raw.hex()
