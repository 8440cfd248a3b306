"""Key vault signing plugin core: certificate chains, PKCS#12 and response checks."""

from .certificate_chain import build_certificate_chain
from .config import PluginConfig
from .exceptions import (
    CertificateBundleError,
    DuplicateCertificateError,
    EmptyBundleError,
    ErrorKind,
    IncompleteBundleError,
    InvalidArgumentError,
    InvalidMacError,
    MultipleLeafCandidatesError,
    OrphanedCertificatesError,
    PluginConfigurationError,
    PluginError,
    ResponseMismatchError,
    ValidationError,
    VersionMismatchError,
)
from .key_reference import KeyReference
from .logging_utils import configure_logging
from .pkcs12 import re_encode_pkcs12
from .response_validation import (
    SigningRequest,
    SigningResponse,
    validate_certificate_version,
    validate_signature,
)
from .signature_algorithms import (
    KEY_SPEC_ALGORITHMS,
    SIGNATURE_ALGORITHM_SPECS,
    SignatureAlgorithmSpec,
    algorithm_for_key_spec,
    get_signature_algorithm,
    list_signature_algorithms,
)
from .x509_ops import (
    dump_chain_der,
    dump_chain_pem,
    load_ca_certificates,
    load_certificate,
    load_pem_bundle,
)

__all__ = [
    "KEY_SPEC_ALGORITHMS",
    "SIGNATURE_ALGORITHM_SPECS",
    "CertificateBundleError",
    "DuplicateCertificateError",
    "EmptyBundleError",
    "ErrorKind",
    "IncompleteBundleError",
    "InvalidArgumentError",
    "InvalidMacError",
    "KeyReference",
    "MultipleLeafCandidatesError",
    "OrphanedCertificatesError",
    "PluginConfig",
    "PluginConfigurationError",
    "PluginError",
    "ResponseMismatchError",
    "SignatureAlgorithmSpec",
    "SigningRequest",
    "SigningResponse",
    "ValidationError",
    "VersionMismatchError",
    "algorithm_for_key_spec",
    "build_certificate_chain",
    "configure_logging",
    "dump_chain_der",
    "dump_chain_pem",
    "get_signature_algorithm",
    "list_signature_algorithms",
    "load_ca_certificates",
    "load_certificate",
    "load_pem_bundle",
    "re_encode_pkcs12",
    "validate_certificate_version",
    "validate_signature",
]
