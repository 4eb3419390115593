"""Verification of package structure, trust, and digest signatures.

A verification runs through these stages, stopping at the first failure::

    extract -> check structure -> read manifest -> check trust -> check digest

Trust is checked only when the manifest carries a trust signature and the
digest only when it carries a digest signature; a manifest with neither is
structurally valid and verifies successfully.  All extracted files live in a
uniquely named workspace directory that is deleted before
:meth:`PackageVerifier.verify_package` returns or raises.
"""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path
from types import TracebackType

from aumai_packageseal.arguments import require_readable_file
from aumai_packageseal.codec import clear_signature_fields, encode_manifest
from aumai_packageseal.config import PackagingSettings
from aumai_packageseal.container import PackageContainer
from aumai_packageseal.errors import (
    DigestInvalidError,
    PackageInvalidError,
    PackageIOError,
    PackageStructureError,
    SignatureInvalidError,
    TrustInvalidError,
    WorkspaceCleanupError,
)
from aumai_packageseal.events import Listener, Notifier
from aumai_packageseal.extractor import read_manifest_file
from aumai_packageseal.keys import KeyResolver, load_key_file
from aumai_packageseal.models import ManifestSignature, OperationType, PackageManifest
from aumai_packageseal.observability import get_logger
from aumai_packageseal.signing import SignatureVerifier

logger = get_logger(__name__)

WORKSPACE_PREFIX = "aumai-packageseal-"


class ExtractionWorkspace:
    """A private, uniquely named scratch directory, removed when the context exits.

    The directory is created with :func:`tempfile.mkdtemp` under *root*, or
    under the system temporary directory when *root* is ``None``.

    If removal fails while another exception is propagating, the failure is
    logged and recorded as a note on that exception, which keeps propagating.
    If removal fails after a clean exit, :class:`WorkspaceCleanupError` is
    raised.
    """

    path: Path

    def __init__(self, root: Path | None, notifier: Notifier) -> None:
        self._root = root
        self._notifier = notifier

    def __enter__(self) -> ExtractionWorkspace:
        parent = self._root if self._root is not None else Path(tempfile.gettempdir())
        try:
            parent.mkdir(parents=True, exist_ok=True)
            self.path = Path(tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=parent))
        except OSError as exc:
            raise PackageIOError(
                f"Unable to create an extraction workspace under '{parent}': {exc}"
            ) from exc
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self._notifier.verbose("Deleting temporary files...")
        try:
            shutil.rmtree(self.path)
        except FileNotFoundError:
            pass
        except OSError as cleanup_exc:
            logger.error(
                "packageseal.workspace.cleanup_failed",
                workspace=str(self.path),
                error=str(cleanup_exc),
            )
            if exc is not None:
                exc.add_note(
                    f"The extraction workspace '{self.path}' could not be deleted: {cleanup_exc}"
                )
                return False
            raise WorkspaceCleanupError(
                f"The extraction workspace '{self.path}' could not be deleted: {cleanup_exc}"
            ) from cleanup_exc
        self._notifier.verbose("Temporary files deleted successfully.")
        return False


class PackageVerifier:
    """Verify packages against their embedded trust and digest signatures.

    Args:
        settings: Package layout, key directory, and trust root.  Defaults to
            :class:`PackagingSettings` defaults.
        listeners: Callables receiving a :class:`PackagingUpdate` per step.
        key_resolver: Resolver used when no local public key file is given.
            Built from *settings* on first use when omitted.
        signature_verifier: Verifier for signed blobs.
    """

    def __init__(
        self,
        settings: PackagingSettings | None = None,
        listeners: Iterable[Listener] = (),
        *,
        key_resolver: KeyResolver | None = None,
        signature_verifier: SignatureVerifier | None = None,
    ) -> None:
        self._settings = settings or PackagingSettings()
        self._notifier = Notifier(OperationType.verify, listeners)
        self._key_resolver = key_resolver
        self._signatures = signature_verifier or SignatureVerifier()

    def verify_package(
        self,
        package_path: str | Path,
        public_key_path: str | Path | None = None,
    ) -> None:
        """Verify the package at *package_path*.

        Args:
            package_path: Path to the package file.
            public_key_path: Optional PEM file holding the publisher's public
                key.  When given, the key directory is never queried.

        Raises:
            InvalidArgumentError: if either path is not a readable file.
            PackageInvalidError: if the package fails any check; ``cause``
                holds the specific error.
            WorkspaceCleanupError: if verification succeeded but the
                workspace could not be deleted.
        """
        package = require_readable_file(package_path, "package file")
        key_file: Path | None = None
        if public_key_path is not None and str(public_key_path) != "":
            key_file = require_readable_file(public_key_path, "public key file")

        self._notifier.info(f"Verifying package '{package.name}'...")

        workspace = ExtractionWorkspace(self._settings.workspace_root, self._notifier)
        try:
            with workspace:
                self._verify_in_workspace(package, workspace.path, key_file)
        except WorkspaceCleanupError:
            raise
        except Exception as exc:
            error = PackageInvalidError(package.name, exc)
            for note in getattr(exc, "__notes__", ()):
                error.add_note(note)
            logger.info(
                "packageseal.verify.failed",
                package=package.name,
                reason=error.message,
            )
            raise error from exc

    def _verify_in_workspace(
        self, package: Path, workspace: Path, key_file: Path | None
    ) -> None:
        notify = self._notifier
        settings = self._settings

        notify.verbose(f"Extracting package '{package.name}' to temp directory '{workspace}'")
        with PackageContainer.open(package) as container:
            container.extract_all(workspace)
        notify.verbose("Package extracted successfully.")

        notify.verbose("Checking extracted files...")
        manifest_file = workspace / settings.manifest_filename
        if not manifest_file.is_file():
            raise PackageStructureError("the package does not contain a manifest.")

        payload_archive = workspace / settings.payload_archive_name
        if not payload_archive.is_file():
            raise PackageStructureError("the package does not contain a payload archive.")
        notify.verbose("Manifest and payload archive extracted successfully.")

        notify.verbose("Extracting payload archive...")
        payload_directory = workspace / settings.payload_directory_name
        with PackageContainer.open(payload_archive) as payload:
            payload.extract_all(payload_directory)
        notify.verbose("Payload archive extracted successfully.")

        notify.verbose("Checking extracted files...")
        if not any(path.is_file() for path in payload_directory.rglob("*")):
            raise PackageStructureError(
                "the payload archive is empty; the payload directory does not contain any files."
            )
        notify.verbose("Extracted files validated successfully.")

        notify.verbose(f"Fetching manifest from '{manifest_file}'...")
        manifest = read_manifest_file(manifest_file)
        notify.verbose("Manifest fetched successfully.")

        signature = manifest.signature
        if signature.trust:
            self._check_trust(signature)
        if signature.digest:
            self._check_digest(manifest, key_file)

        notify.success("Package verified successfully.")

    def _check_trust(self, signature: ManifestSignature) -> None:
        self._notifier.verbose("Verifying the manifest trust...")

        if not signature.digest:
            raise PackageStructureError(
                "the manifest is trusted but it contains no digest to trust."
            )
        if not self._settings.trust_root_key:
            raise SignatureInvalidError(
                "Unable to verify the manifest trust: no trust root key is configured."
            )

        verified_trust = self._signatures.verify(
            signature.trust, self._settings.trust_root_key, purpose="trust"
        )
        if verified_trust != signature.digest:
            raise TrustInvalidError(
                "the manifest trust is not valid; the trusted digest does not "
                "match the manifest digest."
            )

        self._notifier.verbose("Trust verified successfully.")

    def _check_digest(self, manifest: PackageManifest, key_file: Path | None) -> None:
        self._notifier.verbose("Verifying the manifest digest...")

        if key_file is not None:
            public_key = load_key_file(key_file)
        else:
            public_key = self._resolver().fetch_key_for_identity(manifest.signature.subject)

        verified_digest = self._signatures.verify(
            manifest.signature.digest, public_key, purpose="digest"
        )

        # the digest must reproduce the manifest itself, minus its signatures
        if encode_manifest(clear_signature_fields(manifest)) != verified_digest:
            raise DigestInvalidError(
                "the manifest digest is not valid; the verified digest does not "
                "match the manifest."
            )

        self._notifier.verbose("Digest verified successfully.")

    def _resolver(self) -> KeyResolver:
        if self._key_resolver is None:
            self._key_resolver = KeyResolver.from_settings(
                self._settings, notifier=self._notifier
            )
        return self._key_resolver


def verify_package(
    package_path: str | Path,
    public_key_path: str | Path | None = None,
    *,
    settings: PackagingSettings | None = None,
    listeners: Iterable[Listener] = (),
    key_resolver: KeyResolver | None = None,
    signature_verifier: SignatureVerifier | None = None,
) -> None:
    """Verify the package at *package_path*; see :meth:`PackageVerifier.verify_package`."""
    verifier = PackageVerifier(
        settings,
        listeners,
        key_resolver=key_resolver,
        signature_verifier=signature_verifier,
    )
    verifier.verify_package(package_path, public_key_path)


__all__ = ["ExtractionWorkspace", "PackageVerifier", "verify_package"]
