"""Report attestation data models."""

import hashlib
import hmac
from dataclasses import dataclass
from urllib.parse import quote

EXPLORER_BASE_URL = "https://explorer.solana.com"
DEFAULT_CLUSTER = "devnet"


def compute_content_hash(content: str) -> bytes:
    """SHA-256 over the exact UTF-8 bytes of a report, without normalization."""
    return hashlib.sha256(content.encode("utf-8")).digest()


@dataclass(frozen=True)
class AttestationRecord:
    """A content hash bound to the ledger transaction that stores it."""

    content_hash: bytes  # 32-byte SHA-256 digest
    transaction_ref: str

    @property
    def hex_digest(self) -> str:
        return self.content_hash.hex()

    def verify(self, content: str) -> bool:
        """Check that content hashes to the attested digest."""
        return hmac.compare_digest(compute_content_hash(content), self.content_hash)

    def explorer_url(
        self,
        cluster: str | None = DEFAULT_CLUSTER,
        base_url: str = EXPLORER_BASE_URL,
    ) -> str:
        """
        Link to the transaction on the public ledger explorer.

        Args:
            cluster: Ledger cluster name, None for mainnet
            base_url: Explorer base URL
        """
        url = f"{base_url.rstrip('/')}/tx/{quote(self.transaction_ref, safe='')}"
        if cluster:
            url += f"?cluster={quote(cluster, safe='')}"
        return url


@dataclass(frozen=True)
class AttestationResult:
    """Outcome of a report logging request."""

    success: bool
    message: str
    record: AttestationRecord | None = None
    report_content: str | None = None  # exact text that was submitted

    def verify(self) -> bool:
        """Re-hash the submitted text against the attested digest."""
        if self.record is None or self.report_content is None:
            return False
        return self.record.verify(self.report_content)
