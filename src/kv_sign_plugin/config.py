from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from asn1crypto import x509

from .exceptions import InvalidArgumentError, PluginConfigurationError, ValidationError
from .key_reference import KeyReference
from .x509_ops import load_ca_certificates

CA_CERTS_CONFIG_KEY = "ca_certs"


@dataclass(frozen=True)
class PluginConfig:
    """Runtime configuration for one signing invocation."""

    key_id: str
    ca_certs_path: str | None = None

    @classmethod
    def from_env(cls) -> "PluginConfig":
        key_id = os.environ.get("KV_SIGN_KEY_ID")
        ca_certs = os.environ.get("KV_SIGN_CA_CERTS")

        if not key_id:
            raise PluginConfigurationError("KV_SIGN_KEY_ID is required.")
        return cls._build(key_id, ca_certs)

    @classmethod
    def from_plugin_config(
        cls,
        key_id: str | None,
        plugin_config: Mapping[str, str] | None = None,
    ) -> "PluginConfig":
        if not key_id:
            raise PluginConfigurationError("A key id is required.")
        ca_certs = (plugin_config or {}).get(CA_CERTS_CONFIG_KEY)
        return cls._build(key_id, ca_certs)

    @classmethod
    def _build(cls, key_id: str, ca_certs: str | None) -> "PluginConfig":
        try:
            KeyReference.from_key_id(key_id)
        except (InvalidArgumentError, ValidationError) as exc:
            raise PluginConfigurationError(str(exc)) from exc

        ca_certs_path: str | None = None
        if ca_certs:
            if not Path(ca_certs).is_file():
                raise PluginConfigurationError(
                    f"{CA_CERTS_CONFIG_KEY} path does not exist: {ca_certs}"
                )
            ca_certs_path = ca_certs

        return cls(key_id=key_id, ca_certs_path=ca_certs_path)

    def key_reference(self) -> KeyReference:
        return KeyReference.from_key_id(self.key_id)

    def ca_certificates(self) -> list[x509.Certificate]:
        if self.ca_certs_path is None:
            return []
        return load_ca_certificates(self.ca_certs_path)
