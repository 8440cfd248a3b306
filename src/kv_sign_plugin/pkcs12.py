from __future__ import annotations

import logging

from asn1crypto import cms, pkcs12, x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization.pkcs12 import (
    PKCS12Certificate,
    load_pkcs12,
)

from .exceptions import InvalidMacError, ValidationError

_logger = logging.getLogger("kv_sign_plugin.pkcs12")


def _cert_bag(item: PKCS12Certificate) -> pkcs12.SafeBag:
    certificate = x509.Certificate.load(
        item.certificate.public_bytes(serialization.Encoding.DER)
    )
    bag: dict[str, object] = {
        "bag_id": "cert_bag",
        "bag_value": pkcs12.CertBag({"cert_id": "x509", "cert_value": certificate}),
    }
    if item.friendly_name is not None:
        bag["bag_attributes"] = [
            {
                "type": "friendly_name",
                "values": [item.friendly_name.decode("utf-8", errors="replace")],
            }
        ]
    return pkcs12.SafeBag(bag)


def re_encode_pkcs12(data: bytes) -> bytes:
    """
    Re-encode a PKCS#12 container without MAC and without keys.

    Containers that are not password-MAC protected are returned unchanged.
    Some consumers (notably macOS) reject PKCS#12 files that carry a MAC over
    unencrypted contents, so the result keeps only the certificates, in one
    unencrypted safe contents block, sealed without integrity protection.
    """
    try:
        pfx = pkcs12.Pfx.load(data)
        auth_safe_type = pfx["auth_safe"]["content_type"].native
        has_mac = pfx["mac_data"].native is not None
    except ValueError as exc:
        _logger.warning("Rejected PKCS#12 input: %s", exc)
        raise ValidationError(f"Invalid PKCS#12 data: {exc}") from exc

    if auth_safe_type != "data" or not has_mac:
        _logger.debug(
            "PKCS#12 is not password-MAC protected auth_safe=%s mac=%s; unchanged",
            auth_safe_type,
            has_mac,
        )
        return data

    # OpenSSL tries the null password and then "" for both MAC and contents.
    try:
        loaded = load_pkcs12(data, None)
    except ValueError as exc:
        _logger.warning("PKCS#12 MAC verification failed with the null password")
        raise InvalidMacError("Invalid MAC or the MAC password is not null.") from exc
    except UnsupportedAlgorithm as exc:
        _logger.warning("PKCS#12 uses an unsupported algorithm: %s", exc)
        raise ValidationError(f"Unsupported PKCS#12 algorithm: {exc}") from exc

    certificates: list[PKCS12Certificate] = []
    if loaded.cert is not None:
        certificates.append(loaded.cert)
    certificates.extend(loaded.additional_certs)

    safe_contents = pkcs12.SafeContents([_cert_bag(item) for item in certificates])
    sealed = pkcs12.Pfx(
        {
            "version": "v3",
            "auth_safe": cms.ContentInfo(
                {
                    "content_type": "data",
                    "content": pkcs12.AuthenticatedSafe(
                        [
                            cms.ContentInfo(
                                {"content_type": "data", "content": safe_contents.dump()}
                            )
                        ]
                    ).dump(),
                }
            ),
        }
    )
    _logger.info(
        "Re-encoded PKCS#12 without MAC cert_bags=%d dropped_key=%s",
        len(certificates),
        loaded.key is not None,
    )
    return sealed.dump()
