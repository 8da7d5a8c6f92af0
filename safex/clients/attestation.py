"""Report attestation resource client."""

import re
from typing import TYPE_CHECKING, Any

from safex.clients.wire import get_message, get_str, require_success
from safex.exceptions import IntegrityError, ProtocolError, ValidationError
from safex.types.attestation import (
    AttestationRecord,
    AttestationResult,
    compute_content_hash,
)

if TYPE_CHECKING:
    from safex.transport import HTTPTransport

LOG_REPORT_PATH = "/api/log-report"

_HEX_DIGEST = re.compile(r"^[0-9a-f]{64}$")


def validate_report_content(report_content: str) -> None:
    if not isinstance(report_content, str):
        raise ValidationError(
            "Report content must be a string", field="report_content"
        )
    if not report_content:
        raise ValidationError("Report content is empty", field="report_content")


def parse_attestation_response(
    data: dict[str, Any], report_content: str
) -> AttestationResult:
    """
    Parse a report logging response and check the returned digest.

    Raises:
        ProtocolError: If a successful response lacks a signature or a
            well-formed lowercase hex digest
        IntegrityError: If the digest differs from the local SHA-256
    """
    success = require_success(data)
    message = get_message(data)

    if not success:
        return AttestationResult(
            success=False, message=message, report_content=report_content
        )

    signature = get_str(data, "transaction_signature")
    if not signature:
        raise ProtocolError(
            "MISSING_FIELD", "Response has no 'transaction_signature'"
        )

    hash_hex = get_str(data, "hash")
    if hash_hex is None or not _HEX_DIGEST.match(hash_hex):
        raise ProtocolError(
            "INVALID_HASH", "Response 'hash' is not a lowercase hex SHA-256 digest"
        )

    local_digest = compute_content_hash(report_content)
    if local_digest.hex() != hash_hex:
        raise IntegrityError(expected=local_digest.hex(), actual=hash_hex)

    return AttestationResult(
        success=True,
        message=message,
        record=AttestationRecord(content_hash=local_digest, transaction_ref=signature),
        report_content=report_content,
    )


class AttestationClient:
    """Client for logging report hashes to the ledger."""

    def __init__(self, transport: "HTTPTransport") -> None:
        self.transport = transport

    def log_report(self, report_content: str) -> AttestationResult:
        """
        Attest a report by storing its hash on the ledger.

        The request is never retried, a retry could store the hash twice.

        Args:
            report_content: Exact report text; hashed as UTF-8 bytes

        Returns:
            AttestationResult; record is None unless the service succeeded

        Raises:
            ValidationError: If the content is empty (nothing is sent)
            TransportError: On non-2xx status or network failure
            ProtocolError: On an empty, malformed or mismatching body
        """
        validate_report_content(report_content)
        response = self.transport.post(
            LOG_REPORT_PATH, {"report_content": report_content}, retry=False
        )
        return parse_attestation_response(response, report_content)
