"""Pydantic models for aumai-packageseal."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OperationType(str, Enum):
    """Packaging operations that emit progress updates."""

    extract_manifest = "extract_manifest"
    verify = "verify"


class UpdateType(str, Enum):
    """Severity of a progress update."""

    info = "info"
    verbose = "verbose"
    success = "success"


class ManifestSignature(BaseModel):
    """Signature block embedded in a :class:`PackageManifest`.

    ``digest`` is a signed blob whose content is the canonical manifest with
    ``digest`` and ``trust`` cleared.  ``trust`` is a signed blob, made by the
    root authority, whose content is ``digest``.  Either may be empty.
    """

    subject: str
    digest: str = ""
    trust: str = ""

    @field_validator("digest", "trust", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        return "" if value is None else value


class PackageManifest(BaseModel):
    """Publisher metadata describing a package, plus its signature block.

    Keys other than the ones declared here are publisher-defined and are
    carried through decoding and encoding unchanged.
    """

    model_config = ConfigDict(extra="allow")

    name: str = ""
    version: str = ""
    description: str = ""
    signature: ManifestSignature


class PackagingUpdate(BaseModel):
    """A single progress notification delivered to listeners."""

    model_config = ConfigDict(frozen=True)

    operation: OperationType
    type: UpdateType
    message: str = Field(min_length=1)


__all__ = [
    "ManifestSignature",
    "OperationType",
    "PackageManifest",
    "PackagingUpdate",
    "UpdateType",
]
