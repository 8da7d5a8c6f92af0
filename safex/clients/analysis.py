"""Static analysis resource client."""

from typing import TYPE_CHECKING, Any

from safex.clients.wire import (
    expect_list,
    expect_object,
    get_int,
    get_message,
    get_str,
    require_success,
)
from safex.exceptions import ProtocolError
from safex.types.analysis import AnalysisResult, Finding, Severity
from safex.types.repos import RepositoryReference

if TYPE_CHECKING:
    from safex.transport import HTTPTransport

ANALYZE_PATH = "/api/analyze-code"


def parse_finding(data: Any) -> Finding:
    """Parse one reported bug, e.g. {"bug", "line", "severity", "fix"}."""
    data = expect_object(data, "bug")

    severity_value = get_str(data, "severity", required=True)
    try:
        severity = Severity(severity_value)
    except ValueError as e:
        raise ProtocolError(
            "UNEXPECTED_SHAPE", f"Unknown severity: {severity_value}"
        ) from e

    line = get_int(data, "line")
    if line is None:
        raise ProtocolError("MISSING_FIELD", "Missing field 'line'")

    return Finding(
        description=get_str(data, "bug", "description", required=True),
        line=line,
        severity=severity,
        suggested_fix=get_str(data, "fix", "suggested_fix") or "",
    )


def parse_analysis_response(data: dict[str, Any]) -> AnalysisResult:
    success = require_success(data)
    bugs = data.get("bugs")
    findings: tuple[Finding, ...] = ()
    if bugs is not None:
        findings = tuple(parse_finding(bug) for bug in expect_list(bugs, "bugs"))

    return AnalysisResult(success=success, message=get_message(data), findings=findings)


class AnalysisClient:
    """Client for the static analysis service."""

    def __init__(self, transport: "HTTPTransport") -> None:
        self.transport = transport

    def analyze(self, ref: RepositoryReference) -> AnalysisResult:
        """
        Scan a repository for security findings.

        Safe to call repeatedly; every call returns a fresh result.

        Returns:
            AnalysisResult with findings in detection order. A successful scan
            with no findings has success=True; a failed scan has success=False.

        Raises:
            TransportError: On non-2xx status or network failure
            ProtocolError: On an empty or malformed body
        """
        response = self.transport.post(ANALYZE_PATH, {"repo_url": ref.url})
        return parse_analysis_response(response)
