from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Stable error identifiers for the plugin protocol layer."""

    INVALID_ARGUMENT = "invalid_argument"
    VALIDATION = "validation"
    INVALID_MAC = "invalid_mac"
    EMPTY_BUNDLE = "empty_bundle"
    DUPLICATE_CERTIFICATE = "duplicate_certificate"
    MULTIPLE_LEAF_CANDIDATES = "multiple_leaf_candidates"
    INCOMPLETE_BUNDLE = "incomplete_bundle"
    ORPHANED_CERTIFICATES = "orphaned_certificates"
    RESPONSE_MISMATCH = "response_mismatch"
    VERSION_MISMATCH = "version_mismatch"
    CONFIGURATION = "configuration"


class PluginError(RuntimeError):
    """Base plugin error."""

    kind: ErrorKind = ErrorKind.VALIDATION


class InvalidArgumentError(PluginError, ValueError):
    """A required argument is missing or empty."""

    kind = ErrorKind.INVALID_ARGUMENT


class ValidationError(PluginError):
    """Input is present but malformed."""

    kind = ErrorKind.VALIDATION


class InvalidMacError(ValidationError):
    """PKCS#12 MAC does not verify with the null password."""

    kind = ErrorKind.INVALID_MAC


class CertificateBundleError(PluginError):
    """The certificate bundle does not form a single chain."""


class EmptyBundleError(CertificateBundleError):
    kind = ErrorKind.EMPTY_BUNDLE


class DuplicateCertificateError(CertificateBundleError):
    kind = ErrorKind.DUPLICATE_CERTIFICATE


class MultipleLeafCandidatesError(CertificateBundleError):
    kind = ErrorKind.MULTIPLE_LEAF_CANDIDATES


class IncompleteBundleError(CertificateBundleError):
    kind = ErrorKind.INCOMPLETE_BUNDLE


class OrphanedCertificatesError(CertificateBundleError):
    kind = ErrorKind.ORPHANED_CERTIFICATES


class ResponseMismatchError(PluginError):
    """The remote response disagrees with the request."""

    kind = ErrorKind.RESPONSE_MISMATCH


class VersionMismatchError(PluginError):
    """The returned certificate version differs from the pinned version."""

    kind = ErrorKind.VERSION_MISMATCH


class PluginConfigurationError(PluginError):
    """Configuration is invalid or incomplete."""

    kind = ErrorKind.CONFIGURATION
