"""Shared test fixtures for aumai-packageseal."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from aumai_packageseal.codec import clear_signature_fields, encode_manifest
from aumai_packageseal.config import PackagingSettings
from aumai_packageseal.models import ManifestSignature, PackageManifest
from aumai_packageseal.signing import SignatureAlgorithm, generate_keypair, sign_content

PackageFactory = Callable[..., Path]

# ---------------------------------------------------------------------------
# Key-pair fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def ed25519_keypair() -> tuple[bytes, bytes]:
    """(private_pem, public_pem) for the publisher, Ed25519."""
    return generate_keypair(SignatureAlgorithm.ed25519)


@pytest.fixture(scope="session")
def ecdsa_p256_keypair() -> tuple[bytes, bytes]:
    """(private_pem, public_pem) for a publisher using ECDSA P-256."""
    return generate_keypair(SignatureAlgorithm.ecdsa_p256)


@pytest.fixture(scope="session")
def root_keypair() -> tuple[bytes, bytes]:
    """(private_pem, public_pem) for the root trust authority."""
    return generate_keypair(SignatureAlgorithm.ed25519)


@pytest.fixture()
def public_key_file(tmp_path: Path, ed25519_keypair: tuple[bytes, bytes]) -> Path:
    """The publisher's public key written to disk."""
    path = tmp_path / "publisher.pem"
    path.write_bytes(ed25519_keypair[1])
    return path


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture()
def workspace_root(tmp_path: Path) -> Path:
    return tmp_path / "workspaces"


@pytest.fixture()
def settings(workspace_root: Path, root_keypair: tuple[bytes, bytes]) -> PackagingSettings:
    """Settings isolating workspaces under tmp_path and trusting the test root key."""
    return PackagingSettings(
        workspace_root=workspace_root,
        trust_root_key=root_keypair[1].decode("ascii"),
    )


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------


@pytest.fixture()
def unsigned_manifest() -> PackageManifest:
    """A manifest with publisher metadata and an empty signature block."""
    return PackageManifest.model_validate(
        {
            "name": "acme.plugin",
            "version": "1.4.0",
            "description": "Example plugin",
            "namespace": "Acme.Plugins",
            "tags": ["sensor", "mqtt"],
            "signature": {"subject": "alice", "digest": "", "trust": ""},
        }
    )


@pytest.fixture()
def signed_manifest(
    unsigned_manifest: PackageManifest, ed25519_keypair: tuple[bytes, bytes]
) -> PackageManifest:
    """*unsigned_manifest* carrying a valid digest made with the publisher key."""
    digest = sign_content(
        encode_manifest(clear_signature_fields(unsigned_manifest)), ed25519_keypair[0]
    )
    return unsigned_manifest.model_copy(
        update={"signature": ManifestSignature(subject="alice", digest=digest)}
    )


@pytest.fixture()
def trusted_manifest(
    signed_manifest: PackageManifest, root_keypair: tuple[bytes, bytes]
) -> PackageManifest:
    """*signed_manifest* whose digest is counter-signed by the root authority."""
    trust = sign_content(signed_manifest.signature.digest, root_keypair[0])
    signature = signed_manifest.signature.model_copy(update={"trust": trust})
    return signed_manifest.model_copy(update={"signature": signature})


# ---------------------------------------------------------------------------
# Package builders
# ---------------------------------------------------------------------------


def _zip_bytes(files: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in files.items():
            archive.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture()
def package_factory(tmp_path: Path) -> PackageFactory:
    """Return a callable that writes a package file and returns its path.

    Keyword arguments:
        name: file name of the package (default ``package.pkg``).
        manifest: a PackageManifest, raw manifest text, or None to omit it.
        payload: mapping of payload file names to bytes, or None to omit
            the payload archive entirely.
    """

    def build(
        name: str = "package.pkg",
        manifest: PackageManifest | str | None = None,
        payload: dict[str, bytes] | None = None,
    ) -> Path:
        entries: dict[str, bytes] = {}
        if manifest is not None:
            text = manifest if isinstance(manifest, str) else encode_manifest(manifest)
            entries["manifest.json"] = text.encode("utf-8")
        if payload is not None:
            entries["payload.zip"] = _zip_bytes(payload)
        path = tmp_path / name
        path.write_bytes(_zip_bytes(entries))
        return path

    return build


@pytest.fixture()
def default_payload() -> dict[str, bytes]:
    return {"plugin.dll": b"\x4d\x5a" + bytes(range(64)), "readme.txt": b"hello"}
