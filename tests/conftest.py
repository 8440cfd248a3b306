from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Sequence

import pytest
from asn1crypto import keys, x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

# PKCS#12 files and their certificates produced with the openssl CLI
# (`openssl pkcs12 -export -passout pass: ...`), one file per cipher setup.
DATA_DIR = Path(__file__).parent / "data"

_SERIALS = itertools.count(1000)

CertificateFactory = Callable[..., x509.Certificate]


def read_data_file(name: str) -> bytes:
    return (DATA_DIR / name).read_bytes()


@pytest.fixture(scope="session")
def signing_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def make_certificate(signing_key: ec.EllipticCurvePrivateKey) -> CertificateFactory:
    """Mint a certificate for subject_cn issued by issuer_cn (self-signed by default)."""
    public_key_info = keys.PublicKeyInfo.load(
        signing_key.public_key().public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )

    def _make(subject_cn: str, issuer_cn: str | None = None) -> x509.Certificate:
        not_before = datetime.now(timezone.utc) - timedelta(minutes=5)
        not_after = not_before + timedelta(days=30)
        tbs_certificate = x509.TbsCertificate(
            {
                "version": "v3",
                "serial_number": next(_SERIALS),
                "signature": {"algorithm": "sha256_ecdsa"},
                "issuer": x509.Name.build({"common_name": issuer_cn or subject_cn}),
                "validity": x509.Validity(
                    {
                        "not_before": x509.Time({"utc_time": not_before}),
                        "not_after": x509.Time({"utc_time": not_after}),
                    }
                ),
                "subject": x509.Name.build({"common_name": subject_cn}),
                "subject_public_key_info": public_key_info,
            }
        )
        signature = signing_key.sign(tbs_certificate.dump(), ec.ECDSA(hashes.SHA256()))
        return x509.Certificate(
            {
                "tbs_certificate": tbs_certificate,
                "signature_algorithm": {"algorithm": "sha256_ecdsa"},
                "signature_value": signature,
            }
        )

    return _make


@pytest.fixture
def three_level_chain(make_certificate: CertificateFactory) -> list[x509.Certificate]:
    """Leaf A issued by B, B issued by root C."""
    return [
        make_certificate("A", "B"),
        make_certificate("B", "C"),
        make_certificate("C"),
    ]


def common_names(chain: Sequence[x509.Certificate]) -> list[str]:
    return [certificate.subject.native["common_name"] for certificate in chain]

