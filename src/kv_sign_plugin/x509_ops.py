from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Union

from asn1crypto import pem, x509

from .exceptions import PluginConfigurationError, ValidationError

_logger = logging.getLogger("kv_sign_plugin.x509")

CertificateInput = Union[bytes, str, x509.Certificate]


def _load_pem_or_der(
    data: bytes | str,
    expected_pem_type: str,
) -> bytes:
    if isinstance(data, str):
        payload = data.encode("utf-8")
    else:
        payload = data

    if pem.detect(payload):
        pem_type, _headers, der_bytes = pem.unarmor(payload)
        if pem_type != expected_pem_type:
            raise ValidationError(
                f"Expected PEM type '{expected_pem_type}', received '{pem_type}'."
            )
        return der_bytes
    return payload


def load_certificate(data: CertificateInput) -> x509.Certificate:
    if isinstance(data, x509.Certificate):
        return data
    der_bytes = _load_pem_or_der(data, "CERTIFICATE")
    try:
        certificate = x509.Certificate.load(der_bytes)
        # Force a full parse so malformed input fails here, not mid-walk.
        certificate.native
    except ValueError as exc:
        raise ValidationError(f"Invalid X.509 certificate: {exc}") from exc
    return certificate


def load_certificates(items: Iterable[CertificateInput]) -> list[x509.Certificate]:
    return [load_certificate(item) for item in items]


def load_pem_bundle(data: bytes | str) -> list[x509.Certificate]:
    """Parse every CERTIFICATE block of a PEM bundle, in file order."""
    payload = data.encode("utf-8") if isinstance(data, str) else data
    if not pem.detect(payload):
        raise ValidationError("Certificate bundle is not PEM encoded.")

    certificates: list[x509.Certificate] = []
    for pem_type, _headers, der_bytes in pem.unarmor(payload, multiple=True):
        if pem_type != "CERTIFICATE":
            _logger.debug("Skipping PEM block type=%s in certificate bundle", pem_type)
            continue
        certificates.append(load_certificate(der_bytes))
    if not certificates:
        raise ValidationError("Certificate bundle contains no certificates.")
    return certificates


def load_ca_certificates(path: str | Path) -> list[x509.Certificate]:
    """Load the PEM file referenced by the ca_certs plugin config."""
    source = Path(path)
    if not source.is_file():
        raise PluginConfigurationError(f"ca_certs file does not exist: {source}")
    certificates = load_pem_bundle(source.read_bytes())
    _logger.info(
        "Loaded CA certificates path=%s count=%d", source, len(certificates)
    )
    return certificates


def subject_dn(certificate: x509.Certificate) -> str:
    return certificate.subject.human_friendly


def issuer_dn(certificate: x509.Certificate) -> str:
    return certificate.issuer.human_friendly


def dump_certificate_pem(certificate: x509.Certificate) -> bytes:
    return pem.armor("CERTIFICATE", certificate.dump())


def dump_chain_der(chain: Iterable[x509.Certificate]) -> list[bytes]:
    return [certificate.dump() for certificate in chain]


def dump_chain_pem(chain: Iterable[x509.Certificate]) -> bytes:
    return b"".join(dump_certificate_pem(certificate) for certificate in chain)
