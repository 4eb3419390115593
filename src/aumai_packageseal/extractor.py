"""Extraction of :class:`PackageManifest` objects from packages."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from aumai_packageseal.arguments import require_readable_file
from aumai_packageseal.codec import decode_manifest, encode_manifest
from aumai_packageseal.config import PackagingSettings
from aumai_packageseal.container import PackageContainer
from aumai_packageseal.errors import (
    MalformedManifestError,
    NotFoundError,
    PackageIOError,
)
from aumai_packageseal.events import Listener, Notifier
from aumai_packageseal.models import OperationType, PackageManifest


def read_manifest_file(path: str | Path) -> PackageManifest:
    """Read and decode the manifest stored in the file at *path*.

    Raises:
        MalformedManifestError: if the file cannot be read or decoded.
    """
    manifest_path = Path(path)
    try:
        return decode_manifest(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, MalformedManifestError) as exc:
        reason = exc.message if isinstance(exc, MalformedManifestError) else str(exc)
        raise MalformedManifestError(
            f"The contents of manifest file '{manifest_path.name}' could not be "
            f"read and deserialized: {reason}"
        ) from exc


class ManifestExtractor:
    """Locate, decode, and optionally save the manifest inside a package."""

    def __init__(
        self,
        settings: PackagingSettings | None = None,
        listeners: Iterable[Listener] = (),
    ) -> None:
        self._settings = settings or PackagingSettings()
        self._notifier = Notifier(OperationType.extract_manifest, listeners)

    def extract_manifest(
        self,
        package_path: str | Path,
        output_path: str | Path | None = None,
    ) -> PackageManifest:
        """Extract the manifest from *package_path*.

        Args:
            package_path: Path to the package file.
            output_path: If given, the canonical manifest text is written here.

        Returns:
            The decoded :class:`PackageManifest`.

        Raises:
            InvalidArgumentError: if *package_path* is not a readable file.
            NotFoundError: if the package contains no manifest entry.
            MalformedManifestError: if the manifest cannot be decoded.
            PackageIOError: if the package cannot be read or the output
                file cannot be written.
        """
        package = require_readable_file(package_path, "package file")
        manifest_filename = self._settings.manifest_filename
        notify = self._notifier

        notify.info(f"Extracting manifest '{manifest_filename}' from package '{package.name}'...")
        notify.verbose("Locating manifest inside of package...")

        with PackageContainer.open(package) as container:
            entry = container.find_entry(manifest_filename)
            if entry is None:
                raise NotFoundError(f"The package '{package.name}' does not contain a manifest.")
            notify.verbose("Manifest located successfully.")

            notify.verbose("Reading manifest from package...")
            manifest_bytes = container.read_bytes(entry)
            notify.verbose("Manifest read successfully.")

        notify.verbose("Deserializing manifest...")
        try:
            manifest = decode_manifest(manifest_bytes.decode("utf-8"))
        except (UnicodeDecodeError, MalformedManifestError) as exc:
            reason = exc.message if isinstance(exc, MalformedManifestError) else str(exc)
            raise MalformedManifestError(
                f"The manifest within package '{package.name}' is malformed: {reason}"
            ) from exc
        notify.verbose("Manifest deserialized successfully.")
        notify.success("Manifest extracted successfully.")

        if output_path is not None and str(output_path) != "":
            destination = Path(output_path)
            notify.info(f"Saving extracted manifest to file '{destination}'...")
            try:
                destination.write_text(encode_manifest(manifest), encoding="utf-8")
            except OSError as exc:
                raise PackageIOError(
                    f"Unable to write to manifest file '{destination}': {exc}"
                ) from exc
            notify.info("File saved successfully.")

        return manifest


def extract_manifest(
    package_path: str | Path,
    output_path: str | Path | None = None,
    *,
    settings: PackagingSettings | None = None,
    listeners: Iterable[Listener] = (),
) -> PackageManifest:
    """Extract the manifest from *package_path*; see :meth:`ManifestExtractor.extract_manifest`."""
    return ManifestExtractor(settings, listeners).extract_manifest(package_path, output_path)


__all__ = ["ManifestExtractor", "extract_manifest", "read_manifest_file"]
