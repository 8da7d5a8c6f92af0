"""
Session state for the Safex workflow.

A session tracks one repository through ingestion and the operations that
ingestion unlocks. Each operation kind has exactly one sub-state, which is one
of four variants: Idle, Running, Succeeded(payload) or Failed(error). Every
variant carries the sequence number of the request that produced it, which is
how late responses are recognised and dropped.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar, Union

from safex.clients.ingestion import parse_rejected_ingestion
from safex.exceptions import SafexError
from safex.types.analysis import AnalysisResult
from safex.types.attestation import AttestationResult
from safex.types.contents import ContentsResult, normalize_path, parent_path
from safex.types.fuzzing import FuzzOutcome
from safex.types.repos import IngestionResult, RepositoryReference

T = TypeVar("T")


class OperationKind(str, Enum):
    """Operations a session can run, each with its own sub-state."""

    INGEST = "ingest"
    BROWSE = "browse"
    ANALYZE = "analyze"
    FUZZ = "fuzz"
    ATTEST = "attest"


class SessionStage(str, Enum):
    """Where the session is in the ingestion gate."""

    IDLE = "idle"
    INGESTING = "ingesting"
    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"
    FAILED = "failed"


@dataclass(frozen=True)
class Idle:
    phase: ClassVar[str] = "idle"

    sequence: int = 0


@dataclass(frozen=True)
class Running:
    phase: ClassVar[str] = "running"

    sequence: int


@dataclass(frozen=True)
class Succeeded(Generic[T]):
    """The request completed; payload may still report a domain failure."""

    phase: ClassVar[str] = "succeeded"

    sequence: int
    payload: T


@dataclass(frozen=True)
class Failed:
    phase: ClassVar[str] = "failed"

    sequence: int
    error: SafexError


OperationState = Union[Idle, Running, Succeeded[Any], Failed]


@dataclass(frozen=True)
class PathState:
    """Current location in the repository tree; "" is the root."""

    current_path: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "current_path", normalize_path(self.current_path))

    @property
    def at_root(self) -> bool:
        return self.current_path == ""

    @property
    def parent(self) -> str:
        return parent_path(self.current_path)


def _initial_operations() -> dict[OperationKind, OperationState]:
    return {kind: Idle() for kind in OperationKind}


@dataclass
class SessionState:
    """
    Everything known about the repository under review.

    A new SessionState is created for every submission; nothing carries over.
    Only SessionOrchestrator mutates it.
    """

    reference: RepositoryReference | None = None
    path: PathState = field(default_factory=PathState)
    operations: dict[OperationKind, OperationState] = field(
        default_factory=_initial_operations
    )
    # Kinds currently in Failed, oldest failure first
    _failures: list[OperationKind] = field(default_factory=list, repr=False)

    def apply(self, kind: OperationKind, state: OperationState) -> None:
        """Replace the sub-state of one operation kind."""
        self.operations[kind] = state
        if kind in self._failures:
            self._failures.remove(kind)
        if isinstance(state, Failed):
            self._failures.append(kind)

    # Sub-states

    @property
    def ingestion(self) -> OperationState:
        return self.operations[OperationKind.INGEST]

    @property
    def browsing(self) -> OperationState:
        return self.operations[OperationKind.BROWSE]

    @property
    def analysis(self) -> OperationState:
        return self.operations[OperationKind.ANALYZE]

    @property
    def fuzzing(self) -> OperationState:
        return self.operations[OperationKind.FUZZ]

    @property
    def attestation(self) -> OperationState:
        return self.operations[OperationKind.ATTEST]

    def is_running(self, kind: OperationKind) -> bool:
        return isinstance(self.operations[kind], Running)

    def payload(self, kind: OperationKind) -> Any:
        """Payload of the last completed request of a kind, or None."""
        state = self.operations[kind]
        return state.payload if isinstance(state, Succeeded) else None

    # Gate

    @property
    def stage(self) -> SessionStage:
        state = self.ingestion
        if isinstance(state, Running):
            return SessionStage.INGESTING
        if isinstance(state, Failed):
            if self.ingestion_result is not None:
                return SessionStage.INELIGIBLE
            return SessionStage.FAILED
        if isinstance(state, Succeeded):
            return SessionStage.ELIGIBLE if state.payload.eligible else SessionStage.INELIGIBLE
        return SessionStage.IDLE

    @property
    def eligible(self) -> bool:
        return self.stage is SessionStage.ELIGIBLE

    # Results

    @property
    def ingestion_result(self) -> IngestionResult | None:
        """
        The ingestion classification, if the service gave one.

        A rejected ingestion request that still classified the repository
        leaves its error in the slot and its classification here.
        """
        state = self.ingestion
        if isinstance(state, Failed):
            return parse_rejected_ingestion(state.error)
        return self.payload(OperationKind.INGEST)

    @property
    def contents(self) -> ContentsResult | None:
        return self.payload(OperationKind.BROWSE)

    @property
    def analysis_result(self) -> AnalysisResult | None:
        return self.payload(OperationKind.ANALYZE)

    @property
    def fuzz_outcome(self) -> FuzzOutcome | None:
        return self.payload(OperationKind.FUZZ)

    @property
    def attestation_result(self) -> AttestationResult | None:
        return self.payload(OperationKind.ATTEST)

    # Errors

    def error_for(self, kind: OperationKind) -> SafexError | None:
        state = self.operations[kind]
        return state.error if isinstance(state, Failed) else None

    @property
    def errors(self) -> dict[OperationKind, SafexError]:
        """Unresolved errors by kind, oldest failure first."""
        return {kind: self.operations[kind].error for kind in self._failures}

    @property
    def error(self) -> SafexError | None:
        """The most recent unresolved failure, for a single error banner."""
        if not self._failures:
            return None
        return self.error_for(self._failures[-1])
