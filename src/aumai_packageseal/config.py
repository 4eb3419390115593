"""Runtime configuration for aumai-packageseal."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aumai_packageseal.errors import InvalidArgumentError

IDENTITY_PLACEHOLDER = "{identity}"
DEFAULT_KEY_URL_TEMPLATE = (
    "https://keybase.io/_/api/1.0/user/lookup.json?username=" + IDENTITY_PLACEHOLDER
)
DEFAULT_KEY_MINIMUM_LENGTH = 100

ENV_PREFIX = "AUMAI_PACKAGESEAL_"


class PackagingSettings(BaseModel):
    """Package layout, key directory, and trust root used by all operations.

    ``trust_root_key`` is the PEM public key of the root authority whose
    signatures make a manifest digest trusted.  When it is ``None`` any
    manifest carrying a trust signature fails verification.

    ``workspace_root`` is the parent of per-call extraction workspaces; when
    ``None`` they are created directly in the system temporary directory.
    """

    model_config = ConfigDict(frozen=True)

    manifest_filename: str = Field(default="manifest.json", min_length=1)
    payload_archive_name: str = Field(default="payload.zip", min_length=1)
    payload_directory_name: str = Field(default="payload", min_length=1)
    key_url_template: str = DEFAULT_KEY_URL_TEMPLATE
    key_minimum_length: int = Field(default=DEFAULT_KEY_MINIMUM_LENGTH, ge=1)
    key_fetch_timeout: float | None = Field(default=None, gt=0)
    workspace_root: Path | None = None
    trust_root_key: str | None = None

    @field_validator("key_url_template")
    @classmethod
    def _template_has_placeholder(cls, value: str) -> str:
        if IDENTITY_PLACEHOLDER not in value:
            raise ValueError(
                f"key_url_template must contain the {IDENTITY_PLACEHOLDER} placeholder"
            )
        return value

    @classmethod
    def from_env(cls) -> PackagingSettings:
        """Build settings from ``AUMAI_PACKAGESEAL_*`` environment variables.

        ``AUMAI_PACKAGESEAL_TRUST_ROOT_KEY`` holds the PEM text directly;
        ``AUMAI_PACKAGESEAL_TRUST_ROOT_KEY_FILE`` names a file containing it.
        Unset variables fall back to the field defaults.
        """
        values: dict[str, object] = {}
        for field_name in (
            "manifest_filename",
            "payload_archive_name",
            "payload_directory_name",
            "key_url_template",
            "key_minimum_length",
            "key_fetch_timeout",
            "workspace_root",
            "trust_root_key",
        ):
            raw = os.environ.get(ENV_PREFIX + field_name.upper())
            if raw:
                values[field_name] = raw

        key_file = os.environ.get(ENV_PREFIX + "TRUST_ROOT_KEY_FILE")
        if key_file and "trust_root_key" not in values:
            try:
                values["trust_root_key"] = Path(key_file).read_text(encoding="utf-8")
            except OSError as exc:
                raise InvalidArgumentError(
                    f"Unable to read trust root key file '{key_file}': {exc}"
                ) from exc

        return cls.model_validate(values)


__all__ = [
    "DEFAULT_KEY_MINIMUM_LENGTH",
    "DEFAULT_KEY_URL_TEMPLATE",
    "IDENTITY_PLACEHOLDER",
    "PackagingSettings",
]
