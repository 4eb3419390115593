"""Error taxonomy for aumai-packageseal.

Every failure raised by the library derives from :class:`PackagingError`.
Verification failures are collected into a single
:class:`PackageInvalidError` at the :mod:`~aumai_packageseal.verifier`
boundary; manifest extraction raises the specific classes directly.
"""

from __future__ import annotations


class PackagingError(Exception):
    """Base exception for all aumai-packageseal errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(PackagingError):
    """A file path argument is missing, unreadable, or not a regular file."""


class NotFoundError(PackagingError):
    """A file or a named package entry does not exist."""


class PackageStructureError(PackagingError):
    """The package is missing a required part (manifest, payload archive, payload files)."""


class MalformedManifestError(PackagingError):
    """The manifest text could not be parsed or does not match the schema."""


class SignatureInvalidError(PackagingError):
    """The signature primitive rejected a signature, or the blob or key is malformed."""


class TrustInvalidError(PackagingError):
    """The trust signature verified, but against content other than the manifest digest."""


class DigestInvalidError(PackagingError):
    """The digest signature verified, but against content other than the manifest."""


class KeyFetchError(PackagingError):
    """A publisher's public key could not be resolved from the key directory."""


class PackageIOError(PackagingError):
    """Reading or writing a file on disk failed."""


class WorkspaceCleanupError(PackageIOError):
    """The extraction workspace could not be removed after a successful verification."""


class PackageInvalidError(PackagingError):
    """Raised by :func:`~aumai_packageseal.verifier.verify_package` for any verification failure.

    Attributes:
        package_name: Base name of the package file that failed verification.
        cause: The underlying error that caused the failure.
    """

    def __init__(self, package_name: str, cause: BaseException) -> None:
        reason = cause.message if isinstance(cause, PackagingError) else str(cause)
        super().__init__(f"Package '{package_name}' is invalid: {reason}")
        self.package_name = package_name
        self.cause = cause


__all__ = [
    "DigestInvalidError",
    "InvalidArgumentError",
    "KeyFetchError",
    "MalformedManifestError",
    "NotFoundError",
    "PackageIOError",
    "PackageInvalidError",
    "PackageStructureError",
    "PackagingError",
    "SignatureInvalidError",
    "TrustInvalidError",
    "WorkspaceCleanupError",
]
