from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .exceptions import (
    InvalidArgumentError,
    ResponseMismatchError,
    VersionMismatchError,
)
from .key_reference import KeyReference

_logger = logging.getLogger("kv_sign_plugin.response_validation")


@dataclass(frozen=True)
class SigningRequest:
    algorithm: str
    payload: bytes


@dataclass(frozen=True)
class SigningResponse:
    """Signing result as reported by the key vault."""

    asserted_key_id: str
    asserted_algorithm: str
    signature: bytes

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SigningResponse":
        required = {"kid", "alg", "value"}
        missing = [field for field in sorted(required) if field not in payload]
        if missing:
            raise InvalidArgumentError(
                f"Signing response payload missing fields: {', '.join(missing)}"
            )
        raw = payload["value"]
        if not isinstance(raw, str):
            raise InvalidArgumentError("value must be a base64url string.")
        try:
            padded = raw + "=" * (-len(raw) % 4)
            signature = base64.urlsafe_b64decode(padded.encode("ascii"))
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise InvalidArgumentError("Invalid base64url for value.") from exc
        return cls(
            asserted_key_id=str(payload["kid"]),
            asserted_algorithm=str(payload["alg"]),
            signature=signature,
        )


def validate_signature(
    key_reference: KeyReference,
    request: SigningRequest,
    response: SigningResponse,
) -> bytes:
    """
    Check that the vault signed with the requested key and algorithm.

    Returns the signature bytes when the response is consistent.
    """
    # Vault algorithm names are case-insensitive tokens such as "PS256".
    if response.asserted_algorithm.upper() != request.algorithm.upper():
        _logger.warning(
            "Signing algorithm mismatch requested=%s returned=%s",
            request.algorithm,
            response.asserted_algorithm,
        )
        raise ResponseMismatchError(
            "Invalid signing response: algorithm mismatch. "
            f"Requested '{request.algorithm}', got '{response.asserted_algorithm}'."
        )

    if not key_reference.matches_key_id(response.asserted_key_id):
        _logger.warning(
            "Signing key mismatch requested=%s returned=%s",
            key_reference.key_id,
            response.asserted_key_id,
        )
        raise ResponseMismatchError(
            "Invalid signing response: key mismatch. "
            f"Requested '{key_reference.key_id}', got '{response.asserted_key_id}'."
        )

    if not response.signature:
        _logger.warning(
            "Signing response has an empty signature key_id=%s", key_reference.key_id
        )
        raise ResponseMismatchError("Invalid signing response: signature is empty.")

    _logger.info(
        "Signing response validated key_id=%s algorithm=%s signature_bytes=%d",
        key_reference.key_id,
        request.algorithm,
        len(response.signature),
    )
    return response.signature


def validate_certificate_version(requested_version: str, returned_version: str) -> None:
    if requested_version != returned_version:
        _logger.warning(
            "Certificate version mismatch requested=%s returned=%s",
            requested_version,
            returned_version,
        )
        raise VersionMismatchError(
            "The version specified in the request is "
            f"{requested_version} but the version retrieved from the vault is "
            f"{returned_version}."
        )
