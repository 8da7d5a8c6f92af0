"""Fuzz testing data models."""

from dataclasses import dataclass, field

MIN_TIMEOUT_SECONDS = 1
MAX_TIMEOUT_SECONDS = 120
DEFAULT_TIMEOUT_SECONDS = 60


@dataclass(frozen=True)
class FuzzOutcome:
    """Result of one bounded fuzz run."""

    passed: bool
    message: str
    instruction_name: str
    issues: tuple[str, ...] = field(default_factory=tuple)
    generated_artifact: str | None = None  # source of the generated test
    elapsed_ms: int = 0
