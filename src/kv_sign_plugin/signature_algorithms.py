from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .exceptions import ValidationError


@dataclass(frozen=True)
class SignatureAlgorithmSpec:
    """Key vault signing algorithm and the key material it applies to."""

    name: str
    key_type: Literal["RSA", "EC"]
    hash_algorithm: str
    padding: Literal["pkcs1v15", "pss"] | None = None
    ec_curve: str | None = None


SIGNATURE_ALGORITHM_SPECS: dict[str, SignatureAlgorithmSpec] = {
    "RS256": SignatureAlgorithmSpec(
        name="RS256", key_type="RSA", hash_algorithm="sha256", padding="pkcs1v15"
    ),
    "RS384": SignatureAlgorithmSpec(
        name="RS384", key_type="RSA", hash_algorithm="sha384", padding="pkcs1v15"
    ),
    "RS512": SignatureAlgorithmSpec(
        name="RS512", key_type="RSA", hash_algorithm="sha512", padding="pkcs1v15"
    ),
    "PS256": SignatureAlgorithmSpec(
        name="PS256", key_type="RSA", hash_algorithm="sha256", padding="pss"
    ),
    "PS384": SignatureAlgorithmSpec(
        name="PS384", key_type="RSA", hash_algorithm="sha384", padding="pss"
    ),
    "PS512": SignatureAlgorithmSpec(
        name="PS512", key_type="RSA", hash_algorithm="sha512", padding="pss"
    ),
    "ES256": SignatureAlgorithmSpec(
        name="ES256", key_type="EC", hash_algorithm="sha256", ec_curve="secp256r1"
    ),
    "ES384": SignatureAlgorithmSpec(
        name="ES384", key_type="EC", hash_algorithm="sha384", ec_curve="secp384r1"
    ),
    "ES512": SignatureAlgorithmSpec(
        name="ES512", key_type="EC", hash_algorithm="sha512", ec_curve="secp521r1"
    ),
}

# Notation key specs; RSA keys always sign with PSS.
KEY_SPEC_ALGORITHMS: dict[str, str] = {
    "RSA-2048": "PS256",
    "RSA-3072": "PS384",
    "RSA-4096": "PS512",
    "EC-256": "ES256",
    "EC-384": "ES384",
    "EC-521": "ES512",
}


def normalize_algorithm_name(algorithm: str) -> str:
    return algorithm.strip().upper().replace("_", "-")


def list_signature_algorithms() -> tuple[str, ...]:
    return tuple(sorted(SIGNATURE_ALGORITHM_SPECS.keys()))


def get_signature_algorithm(algorithm: str) -> SignatureAlgorithmSpec:
    normalized = normalize_algorithm_name(algorithm)
    try:
        return SIGNATURE_ALGORITHM_SPECS[normalized]
    except KeyError as exc:
        available = ", ".join(list_signature_algorithms())
        raise ValidationError(
            f"Unsupported signature algorithm '{algorithm}'. Available: {available}"
        ) from exc


def algorithm_for_key_spec(key_spec: str) -> SignatureAlgorithmSpec:
    normalized = normalize_algorithm_name(key_spec)
    name = KEY_SPEC_ALGORITHMS.get(normalized)
    if name is None:
        available = ", ".join(sorted(KEY_SPEC_ALGORITHMS.keys()))
        raise ValidationError(
            f"Unsupported key spec '{key_spec}'. Available: {available}"
        )
    return SIGNATURE_ALGORITHM_SPECS[name]
