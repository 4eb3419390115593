"""Signed-blob primitives: key generation, signing, and verification.

A signed blob carries its own content next to the signature::

    <urlsafe-b64(content)>.<urlsafe-b64(signature)>

with base64 padding stripped, so verifying a blob recovers the exact text
that was signed.  Ed25519 and ECDSA P-256 (SHA-256) keys are supported.
"""

from __future__ import annotations

import base64
import binascii
from enum import Enum

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import (
    ECDSA,
    EllipticCurvePrivateKey,
)
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from aumai_packageseal.errors import SignatureInvalidError


class SignatureAlgorithm(str, Enum):
    """Asymmetric signing algorithm choices."""

    ed25519 = "ed25519"
    ecdsa_p256 = "ecdsa_p256"


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)


def generate_keypair(algorithm: SignatureAlgorithm) -> tuple[bytes, bytes]:
    """Generate a fresh key pair.

    Returns:
        A tuple of ``(private_key_bytes, public_key_bytes)`` in PEM format.
    """
    if algorithm == SignatureAlgorithm.ed25519:
        private_key: Ed25519PrivateKey | EllipticCurvePrivateKey = (
            Ed25519PrivateKey.generate()
        )
    else:
        private_key = ec.generate_private_key(ec.SECP256R1())

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


def sign_content(
    content: str,
    private_key_bytes: bytes,
    password: bytes | None = None,
) -> str:
    """Sign *content* with a PEM private key and return the signed blob."""
    payload = content.encode("utf-8")
    private_key = serialization.load_pem_private_key(
        private_key_bytes, password=password
    )

    if isinstance(private_key, Ed25519PrivateKey):
        raw_sig = private_key.sign(payload)
    elif isinstance(private_key, EllipticCurvePrivateKey):
        raw_sig = private_key.sign(payload, ECDSA(hashes.SHA256()))
    else:
        raise ValueError(
            f"Unsupported key type: {type(private_key).__name__}. "
            "Only Ed25519 and ECDSA P-256 are supported."
        )

    return f"{_b64encode(payload)}.{_b64encode(raw_sig)}"


class SignatureVerifier:
    """Verify signed blobs and recover the content they carry."""

    def verify(self, blob: str, public_key: str, purpose: str = "signature") -> str:
        """Verify *blob* with the PEM *public_key* and return its content.

        Args:
            blob: A signed blob produced by :func:`sign_content`.
            public_key: PEM-encoded public key text.
            purpose: Label used in error messages, e.g. ``"trust"`` or ``"digest"``.

        Raises:
            SignatureInvalidError: if the blob or key is malformed, the key type
                is unsupported, or the signature does not verify.  The message
                never includes key material.
        """
        encoded_payload, sep, encoded_sig = blob.strip().partition(".")
        if not sep or not encoded_payload or not encoded_sig:
            raise SignatureInvalidError(f"The {purpose} is not a well-formed signed blob.")
        try:
            payload = _b64decode(encoded_payload)
            raw_sig = _b64decode(encoded_sig)
        except (binascii.Error, ValueError) as exc:
            raise SignatureInvalidError(
                f"The {purpose} is not a well-formed signed blob: {exc}"
            ) from exc

        try:
            key = serialization.load_pem_public_key(public_key.encode("utf-8"))
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SignatureInvalidError(
                f"Unable to load the public key for the {purpose}: "
                f"{type(exc).__name__}: {exc}"
            ) from exc

        try:
            if isinstance(key, Ed25519PublicKey):
                key.verify(raw_sig, payload)
            elif isinstance(key, ec.EllipticCurvePublicKey):
                key.verify(raw_sig, payload, ECDSA(hashes.SHA256()))
            else:
                raise SignatureInvalidError(
                    f"Unsupported public key type for the {purpose}: {type(key).__name__}"
                )
        except InvalidSignature as exc:
            raise SignatureInvalidError(
                f"An exception was raised while verifying the {purpose}: "
                f"{type(exc).__name__}: {str(exc) or 'signature mismatch'}"
            ) from exc

        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SignatureInvalidError(
                f"The {purpose} content is not valid UTF-8 text."
            ) from exc


__all__ = [
    "SignatureAlgorithm",
    "SignatureVerifier",
    "generate_keypair",
    "sign_content",
]
