from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from .exceptions import InvalidArgumentError, ValidationError

_logger = logging.getLogger("kv_sign_plugin.key_reference")

SECURE_SCHEME = "https"


@dataclass(frozen=True)
class KeyReference:
    """
    Locator for a specific key version in a remote key vault.

    key_id is always "{vault_url}/keys/{name}/{version}".
    """

    vault_url: str
    name: str
    version: str
    key_id: str

    @classmethod
    def from_key_id(cls, key_id: str | None) -> "KeyReference":
        if not key_id:
            raise InvalidArgumentError("key_id is required.")

        try:
            parts = urlsplit(key_id)
        except ValueError as exc:
            raise ValidationError(f"Invalid key identifier: {key_id}") from exc

        if parts.scheme.lower() != SECURE_SCHEME:
            raise ValidationError(
                f"Key identifier must use the {SECURE_SCHEME} scheme: {key_id}"
            )
        if not parts.netloc:
            raise ValidationError(f"Key identifier has no vault host: {key_id}")
        if parts.query or parts.fragment:
            raise ValidationError(
                f"Key identifier must not carry a query or fragment: {key_id}"
            )

        segments = parts.path.split("/")[1:] if parts.path.startswith("/") else []
        if (
            len(segments) != 3
            or segments[0] != "keys"
            or not segments[1]
            or not segments[2]
        ):
            raise ValidationError(
                "Invalid key identifier. Expected "
                f"'{SECURE_SCHEME}://<vault>/keys/<name>/<version>', got: {key_id}"
            )

        vault_url = f"{parts.scheme}://{parts.netloc}"
        _logger.debug(
            "Parsed key identifier vault_url=%s name=%s version=%s",
            vault_url,
            segments[1],
            segments[2],
        )
        return cls(
            vault_url=vault_url,
            name=segments[1],
            version=segments[2],
            key_id=f"{vault_url}/keys/{segments[1]}/{segments[2]}",
        )

    @classmethod
    def from_parts(
        cls,
        vault_url: str | None,
        name: str | None,
        version: str | None,
    ) -> "KeyReference":
        missing = [
            label
            for label, value in (
                ("vault_url", vault_url),
                ("name", name),
                ("version", version),
            )
            if not value
        ]
        if missing:
            raise InvalidArgumentError(f"Required values are empty: {', '.join(missing)}")

        base_url = vault_url.rstrip("/")
        return cls(
            vault_url=base_url,
            name=name,
            version=version,
            key_id=f"{base_url}/keys/{name}/{version}",
        )

    def matches_key_id(self, key_id: str | None) -> bool:
        """Return True when key_id names the same key name and version."""
        if not key_id:
            return False
        if key_id == self.key_id:
            return True
        try:
            other = KeyReference.from_key_id(key_id)
        except ValidationError:
            return False
        return other.name == self.name and other.version == self.version
