"""Canonical text encoding of package manifests.

The digest signature is computed over the exact output of
:func:`encode_manifest`, so the encoding must never vary for equal manifests.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from aumai_packageseal.errors import MalformedManifestError
from aumai_packageseal.models import PackageManifest


def encode_manifest(manifest: PackageManifest) -> str:
    """Deterministic JSON serialisation of *manifest*, publisher keys included."""
    data = manifest.model_dump(mode="json")
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def decode_manifest(text: str) -> PackageManifest:
    """Parse manifest *text*.

    Raises:
        MalformedManifestError: if *text* is not JSON or does not match the
            manifest schema.
    """
    try:
        return PackageManifest.model_validate_json(text)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in exc.errors()
        )
        raise MalformedManifestError(f"invalid manifest: {problems}") from exc


def clear_signature_fields(manifest: PackageManifest) -> PackageManifest:
    """Return a copy of *manifest* with ``digest`` and ``trust`` emptied.

    The encoding of the returned manifest is the content a digest signature
    is expected to carry.
    """
    signature = manifest.signature.model_copy(update={"digest": "", "trust": ""})
    return manifest.model_copy(update={"signature": signature}, deep=True)


__all__ = ["clear_signature_fields", "decode_manifest", "encode_manifest"]
