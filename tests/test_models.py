"""Tests for aumai_packageseal.models and aumai_packageseal.codec."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from aumai_packageseal.codec import (
    clear_signature_fields,
    decode_manifest,
    encode_manifest,
)
from aumai_packageseal.errors import MalformedManifestError
from aumai_packageseal.models import (
    ManifestSignature,
    OperationType,
    PackageManifest,
    PackagingUpdate,
    UpdateType,
)

# ===========================================================================
# Models
# ===========================================================================


class TestManifestSignature:
    def test_digest_and_trust_default_to_empty(self) -> None:
        sig = ManifestSignature(subject="alice")
        assert sig.digest == ""
        assert sig.trust == ""

    def test_null_digest_and_trust_become_empty(self) -> None:
        sig = ManifestSignature.model_validate(
            {"subject": "alice", "digest": None, "trust": None}
        )
        assert sig.digest == ""
        assert sig.trust == ""

    def test_subject_is_required(self) -> None:
        with pytest.raises(ValidationError):
            ManifestSignature.model_validate({"digest": ""})


class TestPackageManifest:
    def test_extra_publisher_keys_are_kept(self, unsigned_manifest: PackageManifest) -> None:
        dumped = unsigned_manifest.model_dump(mode="json")
        assert dumped["namespace"] == "Acme.Plugins"
        assert dumped["tags"] == ["sensor", "mqtt"]

    def test_signature_is_required(self) -> None:
        with pytest.raises(ValidationError):
            PackageManifest.model_validate({"name": "x"})


class TestPackagingUpdate:
    def test_is_frozen(self) -> None:
        update = PackagingUpdate(
            operation=OperationType.verify, type=UpdateType.info, message="hi"
        )
        with pytest.raises(ValidationError):
            update.message = "changed"  # type: ignore[misc]

    def test_empty_message_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PackagingUpdate(operation=OperationType.verify, type=UpdateType.info, message="")


# ===========================================================================
# Codec
# ===========================================================================


class TestEncodeManifest:
    def test_output_is_sorted_compact_json(self, unsigned_manifest: PackageManifest) -> None:
        text = encode_manifest(unsigned_manifest)
        data = json.loads(text)
        assert text == json.dumps(data, sort_keys=True, separators=(",", ":"))

    def test_equal_manifests_encode_identically(self) -> None:
        a = PackageManifest.model_validate(
            {"version": "1", "name": "p", "signature": {"subject": "s"}, "z": 1, "a": 2}
        )
        b = PackageManifest.model_validate(
            {"a": 2, "signature": {"subject": "s"}, "z": 1, "name": "p", "version": "1"}
        )
        assert encode_manifest(a) == encode_manifest(b)

    def test_different_metadata_encodes_differently(
        self, unsigned_manifest: PackageManifest
    ) -> None:
        changed = unsigned_manifest.model_copy(update={"version": "9.9.9"})
        assert encode_manifest(changed) != encode_manifest(unsigned_manifest)


class TestDecodeManifest:
    def test_round_trip(self, unsigned_manifest: PackageManifest) -> None:
        assert decode_manifest(encode_manifest(unsigned_manifest)) == unsigned_manifest

    def test_round_trip_signed(self, trusted_manifest: PackageManifest) -> None:
        assert decode_manifest(encode_manifest(trusted_manifest)) == trusted_manifest

    def test_re_encode_is_stable(self, unsigned_manifest: PackageManifest) -> None:
        text = encode_manifest(unsigned_manifest)
        assert encode_manifest(decode_manifest(text)) == text

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(MalformedManifestError):
            decode_manifest("{not json")

    def test_missing_signature_raises(self) -> None:
        with pytest.raises(MalformedManifestError, match="signature"):
            decode_manifest('{"name": "x"}')

    def test_non_object_raises(self) -> None:
        with pytest.raises(MalformedManifestError):
            decode_manifest("[1, 2, 3]")

    def test_wrong_field_type_raises(self) -> None:
        with pytest.raises(MalformedManifestError, match="subject"):
            decode_manifest('{"signature": {"subject": 42}}')

    def test_trust_without_digest_still_decodes(self) -> None:
        manifest = decode_manifest('{"signature": {"subject": "a", "trust": "t"}}')
        assert manifest.signature.trust == "t"
        assert manifest.signature.digest == ""


class TestClearSignatureFields:
    def test_clears_digest_and_trust(self, trusted_manifest: PackageManifest) -> None:
        cleared = clear_signature_fields(trusted_manifest)
        assert cleared.signature.digest == ""
        assert cleared.signature.trust == ""
        assert cleared.signature.subject == "alice"

    def test_does_not_mutate_input(self, trusted_manifest: PackageManifest) -> None:
        digest = trusted_manifest.signature.digest
        clear_signature_fields(trusted_manifest)
        assert trusted_manifest.signature.digest == digest

    def test_keeps_publisher_metadata(self, trusted_manifest: PackageManifest) -> None:
        cleared = clear_signature_fields(trusted_manifest)
        assert cleared.model_dump()["namespace"] == "Acme.Plugins"

    def test_cleared_signed_manifest_equals_unsigned_encoding(
        self, signed_manifest: PackageManifest, unsigned_manifest: PackageManifest
    ) -> None:
        assert encode_manifest(clear_signature_fields(signed_manifest)) == encode_manifest(
            unsigned_manifest
        )
