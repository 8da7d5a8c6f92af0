"""
Safex session orchestration.

SessionOrchestrator drives one repository through the workflow: submit a URL,
pass the ingestion gate, then browse, analyze, fuzz and attest. Requests run
concurrently on one event loop. Each request is tagged with a sequence number
and its response is committed only if it is still the latest request of its
kind in the current session, so late responses never overwrite newer state.
"""

import asyncio
import itertools
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any

from safex.exceptions import GatingError, SafexError, ValidationError
from safex.logging import get_logger, log_transition, mask_sensitive_data
from safex.report import build_report
from safex.state import (
    Failed,
    Idle,
    OperationKind,
    OperationState,
    PathState,
    Running,
    SessionState,
    Succeeded,
)
from safex.types.attestation import AttestationResult
from safex.types.contents import ContentEntry, normalize_path
from safex.types.fuzzing import DEFAULT_TIMEOUT_SECONDS
from safex.types.repos import RepositoryReference

if TYPE_CHECKING:
    from safex.async_client import AsyncSafexClient

logger = get_logger("session")


class SessionOrchestrator:
    """
    State machine for one review session at a time.

    Every operation method returns the sub-state it committed, or None when
    the request was ignored (already running) or its response arrived too
    late to be applied.

    Example:
        ```python
        async with AsyncSafexClient.from_env() as client:
            session = SessionOrchestrator(client)
            await session.submit("https://github.com/acme/vault")
            if session.state.eligible:
                await asyncio.gather(
                    session.analyze(),
                    session.fuzz("withdraw", timeout_seconds=30),
                )
                await session.attest()
        ```
    """

    def __init__(
        self, client: "AsyncSafexClient", browse_on_eligible: bool = True
    ) -> None:
        """
        Args:
            client: Async Safex client (or a compatible mock)
            browse_on_eligible: Load the repository root once ingestion passes
        """
        self.client = client
        self.browse_on_eligible = browse_on_eligible
        self._sequence = itertools.count(1)
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        """The current session. Replaced wholesale on every submission."""
        return self._state

    def reset(self) -> SessionState:
        """Discard the current session; in-flight responses become stale."""
        self._state = SessionState()
        logger.debug("Session reset")
        return self._state

    # Internal helpers

    def _start(
        self, session: SessionState, kind: OperationKind, detail: str | None = None
    ) -> int:
        sequence = next(self._sequence)
        session.apply(kind, Running(sequence=sequence))
        log_transition(kind.value, Running.phase, sequence, detail)
        return sequence

    def _commit(
        self,
        session: SessionState,
        kind: OperationKind,
        sequence: int,
        new_state: OperationState,
    ) -> OperationState | None:
        if self._state is not session or session.operations[kind].sequence != sequence:
            logger.debug("Dropping stale %s response (seq=%d)", kind.value, sequence)
            return None

        session.apply(kind, new_state)
        detail = new_state.error.code if isinstance(new_state, Failed) else None
        log_transition(kind.value, new_state.phase, sequence, detail)
        return new_state

    async def _execute(
        self,
        session: SessionState,
        kind: OperationKind,
        sequence: int,
        request: Awaitable[Any],
    ) -> OperationState | None:
        try:
            payload = await request
        except SafexError as e:
            return self._commit(session, kind, sequence, Failed(sequence=sequence, error=e))
        except asyncio.CancelledError:
            self._commit(session, kind, sequence, Idle(sequence=sequence))
            raise
        except Exception as e:
            error = SafexError("UNEXPECTED_ERROR", f"{type(e).__name__}: {e}")
            self._commit(session, kind, sequence, Failed(sequence=sequence, error=error))
            raise
        return self._commit(session, kind, sequence, Succeeded(sequence=sequence, payload=payload))

    def _require_eligible(self, action: str) -> tuple[SessionState, RepositoryReference]:
        session = self._state
        if not session.eligible or session.reference is None:
            raise GatingError(
                f"Cannot {action}: no repository has passed ingestion "
                f"(stage: {session.stage.value})"
            )
        return session, session.reference

    def _ignore_if_running(self, session: SessionState, kind: OperationKind) -> bool:
        if session.is_running(kind):
            logger.info("%s already running, ignoring request", kind.value)
            return True
        return False

    # Operations

    async def submit(self, repo_url: str) -> OperationState | None:
        """
        Start a new session for a repository URL.

        Any previous session is discarded, including its results, errors and
        in-flight requests. A malformed URL fails ingestion without a request.
        When the repository is eligible and browse_on_eligible is set, the
        root listing is loaded before this returns.

        Returns:
            The committed ingestion sub-state, or None if another submission
            replaced this session before the service answered
        """
        session = SessionState()
        self._state = session
        logger.info("New session for %s", mask_sensitive_data(str(repo_url)))

        try:
            ref = RepositoryReference.from_url(repo_url)
        except ValidationError as e:
            failed = Failed(sequence=next(self._sequence), error=e)
            session.apply(OperationKind.INGEST, failed)
            log_transition(OperationKind.INGEST.value, failed.phase, failed.sequence, e.code)
            return failed

        session.reference = ref
        sequence = self._start(session, OperationKind.INGEST, ref.full_name)
        committed = await self._execute(
            session, OperationKind.INGEST, sequence, self.client.ingestion.ingest(ref)
        )

        if committed is None:
            return None

        result = session.ingestion_result
        if session.eligible:
            logger.info("%s passed ingestion", ref.full_name)
            if self.browse_on_eligible:
                await self.browse("")
        elif result is not None:
            logger.info("%s is not eligible: %s", ref.full_name, result.reason)
        return committed

    async def browse(self, path: str = "") -> OperationState | None:
        """
        Show the directory listing or file at a path.

        A newer browse supersedes any older one still in flight. The current
        path moves only when the listing succeeds.

        Raises:
            GatingError: If the session is not eligible
        """
        session, ref = self._require_eligible("browse")
        path = normalize_path(path)

        sequence = self._start(session, OperationKind.BROWSE, path or "/")
        committed = await self._execute(
            session, OperationKind.BROWSE, sequence, self.client.contents.list(ref, path)
        )

        if isinstance(committed, Succeeded) and committed.payload.success:
            session.path = PathState(committed.payload.path)
        return committed

    async def open(self, entry: ContentEntry) -> OperationState | None:
        """
        Open an entry from the current listing.

        Directories are listed; files are fetched and shown in place, with
        their external reference available when no preview is embedded.
        """
        return await self.browse(entry.path)

    async def navigate_up(self) -> OperationState | None:
        """Browse the parent directory. Does nothing at the root."""
        session, _ = self._require_eligible("browse")
        if session.path.at_root:
            return None
        return await self.browse(session.path.parent)

    async def analyze(self) -> OperationState | None:
        """
        Run static analysis on the repository.

        Ignored while an analysis is already running.

        Raises:
            GatingError: If the session is not eligible
        """
        session, ref = self._require_eligible("analyze")
        if self._ignore_if_running(session, OperationKind.ANALYZE):
            return None

        sequence = self._start(session, OperationKind.ANALYZE, ref.full_name)
        return await self._execute(
            session, OperationKind.ANALYZE, sequence, self.client.analysis.analyze(ref)
        )

    async def fuzz(
        self, instruction_name: str, timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    ) -> OperationState | None:
        """
        Fuzz one instruction for a bounded time.

        Invalid parameters fail the fuzz sub-state without a request.
        Ignored while a fuzz run is already running.

        Raises:
            GatingError: If the session is not eligible
        """
        session, ref = self._require_eligible("fuzz")
        if self._ignore_if_running(session, OperationKind.FUZZ):
            return None

        sequence = self._start(
            session, OperationKind.FUZZ, f"{instruction_name} timeout={timeout_seconds}s"
        )
        return await self._execute(
            session,
            OperationKind.FUZZ,
            sequence,
            self.client.fuzzing.run(ref, instruction_name, timeout_seconds),
        )

    async def attest(
        self, report_content: str | None = None, scan_id: str | None = None
    ) -> OperationState | None:
        """
        Attest a report on the ledger.

        Args:
            report_content: Exact report text; when omitted, a report is built
                from the session's current results (see safex.report)
            scan_id: Identifier for a built report

        Ignored while an attestation is already running.
        """
        session = self._state
        if self._ignore_if_running(session, OperationKind.ATTEST):
            return None

        async def log_report() -> AttestationResult:
            content = report_content
            if content is None:
                content = build_report(session, scan_id=scan_id)
            return await self.client.attestation.log_report(content)

        sequence = self._start(session, OperationKind.ATTEST)
        return await self._execute(session, OperationKind.ATTEST, sequence, log_report())

    def clear_error(self, kind: OperationKind) -> bool:
        """
        Dismiss the error of one operation kind; other kinds keep theirs.

        Returns:
            True if there was an error to clear
        """
        session = self._state
        state = session.operations[kind]
        if not isinstance(state, Failed):
            return False
        session.apply(kind, Idle(sequence=state.sequence))
        log_transition(kind.value, Idle.phase, state.sequence, "error cleared")
        return True
