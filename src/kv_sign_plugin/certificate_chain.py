from __future__ import annotations

import logging
from typing import Iterable

from asn1crypto import x509

from .exceptions import (
    DuplicateCertificateError,
    EmptyBundleError,
    IncompleteBundleError,
    MultipleLeafCandidatesError,
    OrphanedCertificatesError,
)
from .x509_ops import CertificateInput, issuer_dn, load_certificates, subject_dn

_logger = logging.getLogger("kv_sign_plugin.certificate_chain")


def build_certificate_chain(
    bundle: Iterable[CertificateInput],
) -> list[x509.Certificate]:
    """
    Order a certificate bundle into a chain by matching issuer and subject DNs.

    The first certificate of the result is the leaf and the last one is
    self-signed. Certificate signatures are not verified.
    """
    certificates = load_certificates(bundle)
    if not certificates:
        _logger.warning("Certificate bundle is empty")
        raise EmptyBundleError("The certificate bundle is empty.")

    if len(certificates) == 1:
        certificate = certificates[0]
        if subject_dn(certificate) != issuer_dn(certificate):
            _logger.warning(
                "Single certificate bundle is not self-signed subject=%s",
                subject_dn(certificate),
            )
            raise IncompleteBundleError(
                "The certificate bundle only contains one certificate but it is "
                "not self-signed. Complete the bundle with the `ca_certs` plugin "
                "config."
            )
        return certificates

    subjects = [subject_dn(certificate) for certificate in certificates]
    issuers = [issuer_dn(certificate) for certificate in certificates]

    subject_index: dict[str, int] = {}
    for index, subject in enumerate(subjects):
        if subject in subject_index:
            _logger.warning("Duplicate certificate subject=%s", subject)
            raise DuplicateCertificateError(
                f"The certificate bundle contains duplicated certificates: {subject}"
            )
        subject_index[subject] = index

    issuer_set = set(issuers)
    leaf_candidates = [
        index for index, subject in enumerate(subjects) if subject not in issuer_set
    ]
    if len(leaf_candidates) != 1:
        _logger.warning(
            "Certificate bundle has %d leaf candidates", len(leaf_candidates)
        )
        raise MultipleLeafCandidatesError(
            "The certificate bundle must contain exactly one leaf certificate, "
            f"found {len(leaf_candidates)}."
        )

    chain: list[x509.Certificate] = []
    visited: set[int] = set()
    current = leaf_candidates[0]
    while True:
        chain.append(certificates[current])
        visited.add(current)
        if subjects[current] == issuers[current]:
            break
        next_index = subject_index.get(issuers[current])
        if next_index is None:
            _logger.warning(
                "Issuer missing from certificate bundle subject=%s issuer=%s",
                subjects[current],
                issuers[current],
            )
            raise IncompleteBundleError(
                "The certificate bundle is not complete. The issuer of "
                f"{subjects[current]} is not found."
            )
        if next_index in visited:
            _logger.warning(
                "Issuer cycle in certificate bundle subject=%s", subjects[current]
            )
            raise IncompleteBundleError(
                "The certificate bundle does not terminate at a self-signed "
                f"certificate. The issuer of {subjects[current]} loops back into the chain."
            )
        current = next_index

    if len(chain) != len(certificates):
        _logger.warning(
            "Orphaned certificates in bundle bundle=%d chain=%d",
            len(certificates),
            len(chain),
        )
        raise OrphanedCertificatesError(
            f"The certificate bundle has {len(certificates)} certificates but the "
            f"certificate chain only has {len(chain)} certificates."
        )

    _logger.info(
        "Built certificate chain length=%d leaf=%s", len(chain), subjects[leaf_candidates[0]]
    )
    return chain
