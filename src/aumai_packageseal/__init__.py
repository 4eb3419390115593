"""aumai-packageseal: Integrity and authenticity verification for signed packages."""

from aumai_packageseal.codec import clear_signature_fields, decode_manifest, encode_manifest
from aumai_packageseal.config import PackagingSettings
from aumai_packageseal.container import PackageContainer
from aumai_packageseal.errors import (
    DigestInvalidError,
    InvalidArgumentError,
    KeyFetchError,
    MalformedManifestError,
    NotFoundError,
    PackageInvalidError,
    PackageIOError,
    PackageStructureError,
    PackagingError,
    SignatureInvalidError,
    TrustInvalidError,
    WorkspaceCleanupError,
)
from aumai_packageseal.events import Listener, Notifier
from aumai_packageseal.extractor import ManifestExtractor, extract_manifest
from aumai_packageseal.keys import KeyResolver, load_key_file
from aumai_packageseal.models import (
    ManifestSignature,
    OperationType,
    PackageManifest,
    PackagingUpdate,
    UpdateType,
)
from aumai_packageseal.signing import (
    SignatureAlgorithm,
    SignatureVerifier,
    generate_keypair,
    sign_content,
)
from aumai_packageseal.verifier import PackageVerifier, verify_package

__version__ = "0.1.0"

__all__ = [
    "DigestInvalidError",
    "InvalidArgumentError",
    "KeyFetchError",
    "KeyResolver",
    "Listener",
    "MalformedManifestError",
    "ManifestExtractor",
    "ManifestSignature",
    "NotFoundError",
    "Notifier",
    "OperationType",
    "PackageContainer",
    "PackageIOError",
    "PackageInvalidError",
    "PackageManifest",
    "PackageStructureError",
    "PackageVerifier",
    "PackagingError",
    "PackagingSettings",
    "PackagingUpdate",
    "SignatureAlgorithm",
    "SignatureInvalidError",
    "SignatureVerifier",
    "TrustInvalidError",
    "UpdateType",
    "WorkspaceCleanupError",
    "clear_signature_fields",
    "decode_manifest",
    "encode_manifest",
    "extract_manifest",
    "generate_keypair",
    "load_key_file",
    "sign_content",
    "verify_package",
]
