"""aumai-packageseal quickstart: working demonstrations of package verification.

Run this file directly to verify your installation:

    python examples/quickstart.py

Each demo builds its packages in a temporary directory and cleans up after itself.
"""

from __future__ import annotations

import io
import tempfile
import zipfile
from pathlib import Path

from aumai_packageseal import (
    ManifestSignature,
    PackageInvalidError,
    PackageManifest,
    PackagingSettings,
    PackagingUpdate,
    SignatureAlgorithm,
    clear_signature_fields,
    encode_manifest,
    extract_manifest,
    generate_keypair,
    sign_content,
    verify_package,
)


def _build_package(path: Path, manifest: PackageManifest, payload: dict[str, bytes]) -> Path:
    inner = io.BytesIO()
    with zipfile.ZipFile(inner, "w") as archive:
        for name, data in payload.items():
            archive.writestr(name, data)
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("manifest.json", encode_manifest(manifest))
        archive.writestr("payload.zip", inner.getvalue())
    return path


def _print_update(update: PackagingUpdate) -> None:
    print(f"  [{update.type.value:>7}] {update.message}")


# ---------------------------------------------------------------------------
# Demo 1: unsigned package
# ---------------------------------------------------------------------------

def demo_unsigned_package() -> None:
    """An unsigned package is structurally valid but carries no authenticity guarantee."""

    print("\n=== Demo 1: Unsigned package ===")

    with tempfile.TemporaryDirectory() as tmpdir:
        tmp = Path(tmpdir)
        manifest = PackageManifest(
            name="acme.sensor", version="1.0.0", signature=ManifestSignature(subject="alice")
        )
        package = _build_package(tmp / "good.pkg", manifest, {"sensor.dll": b"\x4d\x5a"})

        verify_package(package, listeners=[_print_update])

        extracted = extract_manifest(package)
        print(f"  Extracted manifest for {extracted.name} v{extracted.version}")


# ---------------------------------------------------------------------------
# Demo 2: signed and trusted package
# ---------------------------------------------------------------------------

def demo_trusted_package() -> None:
    """Sign a manifest digest as a publisher, counter-sign it as the root authority."""

    print("\n=== Demo 2: Signed and trusted package ===")

    publisher_private, publisher_public = generate_keypair(SignatureAlgorithm.ed25519)
    root_private, root_public = generate_keypair(SignatureAlgorithm.ed25519)

    with tempfile.TemporaryDirectory() as tmpdir:
        tmp = Path(tmpdir)
        manifest = PackageManifest(
            name="acme.sensor", version="2.0.0", signature=ManifestSignature(subject="alice")
        )
        digest = sign_content(encode_manifest(clear_signature_fields(manifest)), publisher_private)
        trust = sign_content(digest, root_private)
        manifest = manifest.model_copy(
            update={"signature": ManifestSignature(subject="alice", digest=digest, trust=trust)}
        )
        package = _build_package(tmp / "trusted.pkg", manifest, {"sensor.dll": b"\x4d\x5a"})

        key_file = tmp / "alice.pem"
        key_file.write_bytes(publisher_public)
        settings = PackagingSettings(trust_root_key=root_public.decode("ascii"))

        verify_package(package, key_file, settings=settings, listeners=[_print_update])


# ---------------------------------------------------------------------------
# Demo 3: tampered package
# ---------------------------------------------------------------------------

def demo_tampered_package() -> None:
    """Changing a signed manifest after signing breaks the digest."""

    print("\n=== Demo 3: Tampered package ===")

    publisher_private, publisher_public = generate_keypair(SignatureAlgorithm.ed25519)

    with tempfile.TemporaryDirectory() as tmpdir:
        tmp = Path(tmpdir)
        manifest = PackageManifest(
            name="acme.sensor", version="3.0.0", signature=ManifestSignature(subject="alice")
        )
        digest = sign_content(encode_manifest(manifest), publisher_private)
        tampered = manifest.model_copy(
            update={
                "version": "3.0.1",
                "signature": ManifestSignature(subject="alice", digest=digest),
            }
        )
        package = _build_package(tmp / "tampered.pkg", tampered, {"sensor.dll": b"\x4d\x5a"})

        key_file = tmp / "alice.pem"
        key_file.write_bytes(publisher_public)

        try:
            verify_package(package, key_file)
        except PackageInvalidError as exc:
            print(f"  Rejected: {exc.message}")
            print(f"  Cause    : {type(exc.cause).__name__}")


if __name__ == "__main__":
    demo_unsigned_package()
    demo_trusted_package()
    demo_tampered_package()
