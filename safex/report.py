"""
Audit report serialization.

The report is the text that gets attested, so its bytes must be stable:
keys are sorted, separators are compact and the output carries no trailing
newline. Anyone holding the same report text can recompute its digest.
"""

import json
import uuid
from typing import Any

from safex.exceptions import ValidationError
from safex.state import SessionState
from safex.types.analysis import AnalysisResult
from safex.types.fuzzing import FuzzOutcome


def _analysis_section(result: AnalysisResult | None) -> dict[str, Any] | None:
    if result is None:
        return None
    return {
        "success": result.success,
        "message": result.message,
        "findings": [
            {
                "severity": finding.severity.value,
                "description": finding.description,
                "line": finding.line,
                "fix": finding.suggested_fix,
            }
            for finding in result.findings
        ],
    }


def _fuzz_section(outcome: FuzzOutcome | None) -> dict[str, Any] | None:
    if outcome is None:
        return None
    return {
        "instruction": outcome.instruction_name,
        "passed": outcome.passed,
        "message": outcome.message,
        "issues": list(outcome.issues),
        "elapsed_ms": outcome.elapsed_ms,
    }


def report_dict(state: SessionState, scan_id: str | None = None) -> dict[str, Any]:
    """
    Collect the session's results into a plain dict.

    Sections for operations that have not completed are None.

    Raises:
        ValidationError: If the session has no repository
    """
    if state.reference is None:
        raise ValidationError("Session has no repository to report on")

    ref = state.reference
    return {
        "scan_id": scan_id or uuid.uuid4().hex,
        "repo": {"url": ref.url, "owner": ref.owner, "name": ref.name},
        "analysis": _analysis_section(state.analysis_result),
        "fuzz": _fuzz_section(state.fuzz_outcome),
    }


def build_report(state: SessionState, scan_id: str | None = None) -> str:
    """
    Serialize the session's results as canonical JSON text.

    Args:
        state: Session to report on
        scan_id: Identifier for this report; a random one is generated if omitted

    Returns:
        Report text, ready to be attested

    Raises:
        ValidationError: If the session has no repository
    """
    return json.dumps(
        report_dict(state, scan_id),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
