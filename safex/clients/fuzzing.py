"""Fuzz testing resource client."""

import re
from typing import TYPE_CHECKING, Any

from safex.clients.wire import (
    expect_list,
    get_int,
    get_message,
    get_str,
    require_success,
)
from safex.exceptions import ProtocolError, ValidationError
from safex.types.fuzzing import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_TIMEOUT_SECONDS,
    MIN_TIMEOUT_SECONDS,
    FuzzOutcome,
)
from safex.types.repos import RepositoryReference

if TYPE_CHECKING:
    from safex.transport import HTTPTransport

FUZZ_PATH = "/api/fuzz-test"

# Program instructions are Rust function names
_INSTRUCTION_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_fuzz_request(instruction_name: str, timeout_seconds: int) -> str:
    """
    Check fuzz parameters before anything is sent.

    Returns:
        The instruction name with surrounding whitespace removed

    Raises:
        ValidationError: If the name is blank or not an identifier, or the
            timeout is not an integer in [1, 120]
    """
    if not isinstance(instruction_name, str) or not instruction_name.strip():
        raise ValidationError(
            "Instruction name is required", field="instruction_name"
        )
    name = instruction_name.strip()
    if not _INSTRUCTION_NAME.match(name):
        raise ValidationError(
            f"Invalid instruction name: {name!r}", field="instruction_name"
        )

    if isinstance(timeout_seconds, bool) or not isinstance(timeout_seconds, int):
        raise ValidationError(
            "Timeout must be a whole number of seconds", field="timeout_seconds"
        )
    if not MIN_TIMEOUT_SECONDS <= timeout_seconds <= MAX_TIMEOUT_SECONDS:
        raise ValidationError(
            f"Timeout must be between {MIN_TIMEOUT_SECONDS} and "
            f"{MAX_TIMEOUT_SECONDS} seconds, got {timeout_seconds}",
            field="timeout_seconds",
        )
    return name


def parse_fuzz_response(data: dict[str, Any], instruction_name: str) -> FuzzOutcome:
    """
    Parse a completed fuzz run.

    The run passed only when the service reports success and no issues.
    """
    success = require_success(data)

    issues: tuple[str, ...] = ()
    errors = data.get("errors")
    if errors is not None:
        errors = expect_list(errors, "errors")
        if not all(isinstance(issue, str) for issue in errors):
            raise ProtocolError("UNEXPECTED_SHAPE", "Expected 'errors' to hold strings")
        issues = tuple(errors)

    return FuzzOutcome(
        passed=success and not issues,
        message=get_message(data),
        instruction_name=instruction_name,
        issues=issues,
        generated_artifact=get_str(data, "test_file"),
        elapsed_ms=get_int(data, "execution_time_ms", default=0),
    )


class FuzzingClient:
    """Client for the bounded fuzz runner."""

    def __init__(self, transport: "HTTPTransport") -> None:
        self.transport = transport

    def run(
        self,
        ref: RepositoryReference,
        instruction_name: str,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    ) -> FuzzOutcome:
        """
        Fuzz one program instruction for a bounded time.

        Args:
            ref: Repository reference
            instruction_name: Instruction to fuzz (e.g. "withdraw")
            timeout_seconds: Sandbox time budget, 1 to 120 seconds

        Returns:
            FuzzOutcome; passed=False with issues is a completed run that
            found problems, not an error

        Raises:
            ValidationError: On bad parameters (nothing is sent)
            TransportError: On sandbox crash, timeout or bad repository layout
            ProtocolError: On an empty or malformed body
        """
        name = validate_fuzz_request(instruction_name, timeout_seconds)
        response = self.transport.post(
            FUZZ_PATH,
            {
                "repo_url": ref.url,
                "instruction_name": name,
                "timeout_seconds": timeout_seconds,
            },
            retry=False,
        )
        return parse_fuzz_response(response, name)
