"""Async report attestation resource client."""

from typing import TYPE_CHECKING

from safex.clients.attestation import (
    LOG_REPORT_PATH,
    parse_attestation_response,
    validate_report_content,
)
from safex.types.attestation import AttestationResult

if TYPE_CHECKING:
    from safex.async_transport import AsyncHTTPTransport


class AsyncAttestationClient:
    """Async client for logging report hashes to the ledger."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        self.transport = transport

    async def log_report(self, report_content: str) -> AttestationResult:
        """Attest a report by storing its hash on the ledger. Never retried."""
        validate_report_content(report_content)
        response = await self.transport.post(
            LOG_REPORT_PATH, {"report_content": report_content}, retry=False
        )
        return parse_attestation_response(response, report_content)
