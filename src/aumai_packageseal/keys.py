"""Resolution of publisher verification keys.

Keys come either from a local PEM file supplied by the caller or from a
remote key directory queried over HTTP.  Nothing is cached: every lookup
re-reads or re-fetches the key.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from aumai_packageseal.config import (
    DEFAULT_KEY_MINIMUM_LENGTH,
    DEFAULT_KEY_URL_TEMPLATE,
    IDENTITY_PLACEHOLDER,
    PackagingSettings,
)
from aumai_packageseal.errors import InvalidArgumentError, KeyFetchError
from aumai_packageseal.events import Notifier
from aumai_packageseal.observability import get_logger

logger = get_logger(__name__)

KEY_FIELD_PATH = ("them", "public_keys", "primary", "bundle")


def load_key_file(path: str | Path) -> str:
    """Read a PEM public key from *path*.

    Raises:
        InvalidArgumentError: if the file is missing or unreadable.
    """
    key_path = Path(path)
    try:
        return key_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidArgumentError(
            f"Unable to read public key file '{key_path}': {exc}"
        ) from exc


def _extract_field(data: Any, path: tuple[str, ...]) -> Any:
    for part in path:
        if not isinstance(data, dict) or part not in data:
            raise KeyError(".".join(path))
        data = data[part]
    return data


class KeyResolver:
    """Fetch a publisher's public key from a remote key directory.

    The lookup URL is ``url_template`` with ``{identity}`` replaced by the
    URL-quoted identity.  The response must be JSON containing the key at
    ``them.public_keys.primary.bundle``.

    Args:
        url_template: Lookup URL containing the ``{identity}`` placeholder.
        minimum_key_length: Shortest key text accepted as plausible.
        timeout: Seconds before the request is abandoned; ``None`` waits
            indefinitely.
        transport: Optional httpx transport, for testing.
        notifier: Optional notifier receiving progress updates.
    """

    def __init__(
        self,
        url_template: str = DEFAULT_KEY_URL_TEMPLATE,
        minimum_key_length: int = DEFAULT_KEY_MINIMUM_LENGTH,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        if IDENTITY_PLACEHOLDER not in url_template:
            raise ValueError(
                f"url_template must contain the {IDENTITY_PLACEHOLDER} placeholder"
            )
        self._url_template = url_template
        self._minimum_key_length = minimum_key_length
        self._timeout = timeout
        self._transport = transport
        self._notifier = notifier

    @classmethod
    def from_settings(
        cls,
        settings: PackagingSettings,
        *,
        transport: httpx.BaseTransport | None = None,
        notifier: Notifier | None = None,
    ) -> KeyResolver:
        return cls(
            settings.key_url_template,
            settings.key_minimum_length,
            timeout=settings.key_fetch_timeout,
            transport=transport,
            notifier=notifier,
        )

    def build_url(self, identity: str) -> str:
        return self._url_template.replace(IDENTITY_PLACEHOLDER, quote(identity, safe=""))

    def fetch_key_for_identity(self, identity: str) -> str:
        """Fetch the primary public key published for *identity*.

        Raises:
            KeyFetchError: if the identity is empty, the request fails, the
                response is not JSON, the key field is absent, or the key is
                implausibly short.
        """
        if not identity:
            raise KeyFetchError(
                "Failed to retrieve the public key: the manifest names no signing subject."
            )

        url = self.build_url(identity)
        if self._notifier is not None:
            self._notifier.verbose(f"Fetching public key information from {url}...")

        kwargs: dict[str, Any] = {"timeout": self._timeout, "follow_redirects": True}
        if self._transport is not None:
            kwargs["transport"] = self._transport

        try:
            with httpx.Client(**kwargs) as client:
                response = client.get(url)
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("packageseal.key.fetch_failed", identity=identity, url=url)
            raise KeyFetchError(
                f"Failed to retrieve the public key for '{identity}' from '{url}': {exc}"
            ) from exc

        if self._notifier is not None:
            self._notifier.verbose("Key information fetched. Parsing primary public key...")

        try:
            key = _extract_field(response.json(), KEY_FIELD_PATH)
        except ValueError as exc:
            raise KeyFetchError(
                f"Failed to retrieve the public key for '{identity}' from '{url}': "
                f"the response is not valid JSON: {exc}"
            ) from exc
        except KeyError as exc:
            raise KeyFetchError(
                f"Failed to retrieve the public key for '{identity}' from '{url}': "
                f"the response does not contain '{'.'.join(KEY_FIELD_PATH)}'"
            ) from exc

        if not isinstance(key, str):
            raise KeyFetchError(
                f"Failed to retrieve the public key for '{identity}' from '{url}': "
                f"'{'.'.join(KEY_FIELD_PATH)}' is not a string"
            )
        if len(key) < self._minimum_key_length:
            raise KeyFetchError(
                f"Failed to retrieve the public key for '{identity}' from '{url}': "
                f"the retrieved key is too short to be valid "
                f"(expected: >= {self._minimum_key_length}, actual: {len(key)})"
            )

        logger.info("packageseal.key.fetched", identity=identity, url=url)
        if self._notifier is not None:
            self._notifier.verbose("Public key fetched successfully.")
        return key


__all__ = ["KEY_FIELD_PATH", "KeyResolver", "load_key_file"]
