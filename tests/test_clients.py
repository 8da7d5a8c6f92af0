"""
Tests for the resource clients against a mocked service.

Each test wires a SafexClient to an httpx.MockTransport that answers the way
the Safex service does.
"""

import asyncio
import json
from collections.abc import Callable
from datetime import timedelta
from typing import Any

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from safex import AsyncSafexClient, SafexClient
from safex.clients.ingestion import parse_rejected_ingestion
from safex.exceptions import (
    IntegrityError,
    NotFoundError,
    ProtocolError,
    RequestRejectedError,
    ServerError,
    TransportError,
    ValidationError,
)
from safex.types import (
    ContentKind,
    DirectoryListing,
    FileContent,
    RepositoryReference,
    Severity,
    compute_content_hash,
)

VAULT = RepositoryReference.from_url("https://github.com/acme/vault")
REPORT = '{"scan_id":"abc","findings":[]}'
REPORT_HASH = compute_content_hash(REPORT).hex()
SIGNATURE = "2id1qvFo4cmfjAsRAsXtRkYBrV4KXmBWZSH9NK58kLfUX3hP8NjvZs6jUAW3rqgdN9vN8cSb8gtVbV27iKXmqKe"


class Spy:
    """Records requests and answers from a route table."""

    def __init__(self, routes: dict[str, Callable[[dict[str, Any]], httpx.Response]]) -> None:
        self.routes = routes
        self.requests: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request.url.path, body))
        return self.routes[request.url.path](body)


def ok(payload: dict[str, Any]) -> Callable[[dict[str, Any]], httpx.Response]:
    return lambda body: httpx.Response(200, json=payload)


def make_client(spy: Spy) -> SafexClient:
    return SafexClient(transport=httpx.MockTransport(spy))


# ============================================================================
# Scenario
# ============================================================================


def test_vault_audit_scenario() -> None:
    spy = Spy({
        "/api/ingest-repo": ok({
            "success": True,
            "is_anchor_project": True,
            "message": "Repository ingested successfully",
            "repo": {"name": "vault", "full_name": "acme/vault", "stargazers_count": 42},
        }),
        "/api/analyze-code": ok({
            "success": True,
            "bugs": [{
                "bug": "Missing owner check",
                "line": 57,
                "severity": "high",
                "fix": "Add has_one constraint",
            }],
        }),
        "/api/fuzz-test": ok({
            "success": True,
            "errors": ["integer overflow at line 57"],
            "execution_time_ms": 4200,
        }),
        "/api/log-report": ok({
            "success": True,
            "hash": REPORT_HASH,
            "transaction_signature": SIGNATURE,
        }),
    })

    with make_client(spy) as client:
        ingestion = client.ingestion.ingest(VAULT)
        analysis = client.analysis.analyze(VAULT)
        outcome = client.fuzzing.run(VAULT, "withdraw", timeout_seconds=30)
        attestation = client.attestation.log_report(REPORT)

    assert ingestion.eligible
    assert ingestion.repo is not None
    assert ingestion.repo.stargazers_count == 42

    assert len(analysis.findings) == 1
    finding = analysis.findings[0]
    assert finding.severity is Severity.HIGH
    assert finding.line == 57
    assert finding.suggested_fix == "Add has_one constraint"

    assert not outcome.passed
    assert outcome.issues == ("integer overflow at line 57",)
    assert outcome.elapsed_ms == 4200

    assert attestation.record is not None
    assert attestation.record.hex_digest == REPORT_HASH
    assert attestation.record.transaction_ref == SIGNATURE

    assert [path for path, _ in spy.requests] == [
        "/api/ingest-repo",
        "/api/analyze-code",
        "/api/fuzz-test",
        "/api/log-report",
    ]
    assert spy.requests[2][1] == {
        "repo_url": "https://github.com/acme/vault",
        "instruction_name": "withdraw",
        "timeout_seconds": 30,
    }


# ============================================================================
# Ingestion
# ============================================================================


class TestIngestionClient:
    """Tests for IngestionClient."""

    def test_sends_canonical_url(self) -> None:
        spy = Spy({"/api/ingest-repo": ok({"success": True, "is_anchor_project": True})})

        make_client(spy).ingestion.ingest("github.com/acme/vault.git/")

        assert spy.requests == [("/api/ingest-repo", {"repo_url": "https://github.com/acme/vault"})]

    def test_not_anchor_project_is_ineligible(self) -> None:
        spy = Spy({"/api/ingest-repo": ok({
            "success": True,
            "is_anchor_project": False,
            "message": "Not an Anchor project",
        })})

        result = make_client(spy).ingestion.ingest(VAULT)

        assert not result.eligible
        assert result.reason == "Not an Anchor project"

    def test_missing_flag_is_ineligible(self) -> None:
        spy = Spy({"/api/ingest-repo": ok({"success": True})})

        result = make_client(spy).ingestion.ingest(VAULT)

        assert not result.eligible
        assert result.reason == "Repository is not an Anchor project"

    def test_rejected_status_is_transport_error(self) -> None:
        spy = Spy({"/api/ingest-repo": lambda body: httpx.Response(
            400, json={"success": False, "is_anchor_project": False, "message": "Not an Anchor project"}
        )})

        with pytest.raises(RequestRejectedError) as exc_info:
            make_client(spy).ingestion.ingest(VAULT)

        assert exc_info.value.payload["is_anchor_project"] is False

        result = parse_rejected_ingestion(exc_info.value)
        assert result is not None
        assert not result.eligible
        assert result.reason == "Not an Anchor project"

    @pytest.mark.parametrize("status, body", [
        (400, {"success": False, "message": "Invalid repository URL"}),
        (400, {"success": False, "is_anchor_project": True}),
        (400, {"is_anchor_project": False}),
        (500, {"success": False, "is_anchor_project": False}),
        (404, {"success": False, "is_anchor_project": False}),
    ])
    def test_rejection_without_classification(self, status: int, body: dict[str, Any]) -> None:
        spy = Spy({"/api/ingest-repo": lambda request_body: httpx.Response(status, json=body)})

        with pytest.raises(TransportError) as exc_info:
            make_client(spy).ingestion.ingest(VAULT)

        assert parse_rejected_ingestion(exc_info.value) is None

    def test_malformed_url_sends_nothing(self) -> None:
        spy = Spy({})

        with pytest.raises(ValidationError):
            make_client(spy).ingestion.ingest("not a url")

        assert spy.requests == []

    def test_missing_success_flag_is_protocol_error(self) -> None:
        spy = Spy({"/api/ingest-repo": ok({"is_anchor_project": True})})

        with pytest.raises(ProtocolError):
            make_client(spy).ingestion.ingest(VAULT)

    def test_parses_repository_summary(self) -> None:
        spy = Spy({"/api/ingest-repo": ok({
            "success": True,
            "is_anchor_project": True,
            "repo": {
                "id": 7,
                "name": "vault",
                "owner": {"login": "acme", "avatar_url": "https://avatars.example/acme"},
                "created_at": "2024-01-15T10:30:00Z",
                "language": "Rust",
            },
        })})

        repo = make_client(spy).ingestion.ingest(VAULT).repo

        assert repo is not None
        assert repo.id == 7
        assert repo.owner is not None and repo.owner.login == "acme"
        assert repo.created_at is not None and repo.created_at.year == 2024
        assert repo.created_at.utcoffset() == timedelta(0)
        assert repo.language == "Rust"


# ============================================================================
# Contents
# ============================================================================


class TestContentsClient:
    """Tests for ContentsClient."""

    def test_root_listing_omits_path(self) -> None:
        spy = Spy({"/api/repo-contents": ok({
            "success": True,
            "contents": [
                {"name": "programs", "path": "programs", "type": "dir", "size": 0},
                {"name": "Anchor.toml", "path": "Anchor.toml", "type": "file", "size": 312,
                 "download_url": "https://raw.example/Anchor.toml"},
            ],
        })})

        result = make_client(spy).contents.list(VAULT)

        assert spy.requests[0][1] == {"repo_url": "https://github.com/acme/vault"}
        assert result.is_directory
        assert isinstance(result.view, DirectoryListing)
        assert [entry.name for entry in result.view] == ["programs", "Anchor.toml"]
        assert result.view.entries[0].is_dir
        assert result.view.entries[1].external_ref == "https://raw.example/Anchor.toml"

    def test_normalizes_path(self) -> None:
        spy = Spy({"/api/repo-contents": ok({"success": True, "contents": []})})

        result = make_client(spy).contents.list(VAULT, "/programs//vault/")

        assert spy.requests[0][1]["path"] == "programs/vault"
        assert result.path == "programs/vault"

    def test_empty_directory_is_not_an_error(self) -> None:
        spy = Spy({"/api/repo-contents": ok({"success": True, "contents": []})})

        result = make_client(spy).contents.list(VAULT, "empty")

        assert result.success
        assert result.is_empty_directory

    def test_file_content_field(self) -> None:
        spy = Spy({"/api/repo-contents": ok({
            "success": True,
            "file_content": {"name": "lib.rs", "path": "src/lib.rs", "content": "use anchor_lang::prelude::*;"},
        })})

        result = make_client(spy).contents.list(VAULT, "src/lib.rs")

        assert result.is_file
        assert isinstance(result.view, FileContent)
        assert result.view.preview_available

    def test_single_entry_with_content_is_a_file(self) -> None:
        spy = Spy({"/api/repo-contents": ok({
            "success": True,
            "contents": [{"name": "lib.rs", "path": "src/lib.rs", "content_type": "file", "content": "fn main() {}"}],
        })})

        result = make_client(spy).contents.list(VAULT, "src/lib.rs")

        assert result.is_file

    def test_file_without_content_has_external_ref(self) -> None:
        spy = Spy({"/api/repo-contents": ok({
            "success": True,
            "file_content": {"name": "logo.png", "path": "logo.png", "html_url": "https://github.com/acme/vault/blob/main/logo.png"},
        })})

        result = make_client(spy).contents.list(VAULT, "logo.png")

        assert isinstance(result.view, FileContent)
        assert not result.view.preview_available
        assert result.view.external_ref.endswith("logo.png")

    def test_unknown_kind_is_protocol_error(self) -> None:
        spy = Spy({"/api/repo-contents": ok({
            "success": True,
            "contents": [{"name": "x", "path": "x", "type": "socket"}],
        })})

        with pytest.raises(ProtocolError):
            make_client(spy).contents.list(VAULT)

    def test_domain_failure_has_no_view(self) -> None:
        spy = Spy({"/api/repo-contents": ok({"success": False, "message": "Path not found"})})

        result = make_client(spy).contents.list(VAULT, "missing")

        assert not result.success
        assert result.view is None
        assert result.message == "Path not found"

    def test_not_found_status(self) -> None:
        spy = Spy({"/api/repo-contents": lambda body: httpx.Response(404, text="Not Found")})

        with pytest.raises(NotFoundError):
            make_client(spy).contents.list(VAULT, "missing")

    def test_submodule_kind(self) -> None:
        spy = Spy({"/api/repo-contents": ok({
            "success": True,
            "contents": [{"name": "deps", "path": "deps", "type": "submodule"}],
        })})

        result = make_client(spy).contents.list(VAULT)

        assert result.view.entries[0].kind is ContentKind.SUBMODULE


# ============================================================================
# Analysis
# ============================================================================


class TestAnalysisClient:
    """Tests for AnalysisClient."""

    def test_no_findings(self) -> None:
        spy = Spy({"/api/analyze-code": ok({"success": True, "bugs": [], "message": "Analysis completed"})})

        result = make_client(spy).analysis.analyze(VAULT)

        assert result.success
        assert result.findings == ()
        assert result.highest_severity is None

    def test_failed_scan_is_distinct_from_empty(self) -> None:
        spy = Spy({"/api/analyze-code": ok({"success": False, "message": "Analysis failed"})})

        result = make_client(spy).analysis.analyze(VAULT)

        assert not result.success
        assert result.findings == ()

    def test_findings_keep_detection_order(self) -> None:
        spy = Spy({"/api/analyze-code": ok({"success": True, "bugs": [
            {"bug": "a", "line": 10, "severity": "low", "fix": ""},
            {"bug": "b", "line": 3, "severity": "high", "fix": ""},
            {"bug": "c", "line": 7, "severity": "medium", "fix": ""},
        ]})})

        result = make_client(spy).analysis.analyze(VAULT)

        assert [f.description for f in result.findings] == ["a", "b", "c"]
        assert result.highest_severity is Severity.HIGH
        assert result.count_by_severity() == {Severity.LOW: 1, Severity.MEDIUM: 1, Severity.HIGH: 1}

    def test_unknown_severity_is_protocol_error(self) -> None:
        spy = Spy({"/api/analyze-code": ok({"success": True, "bugs": [
            {"bug": "a", "line": 1, "severity": "critical", "fix": ""},
        ]})})

        with pytest.raises(ProtocolError):
            make_client(spy).analysis.analyze(VAULT)

    def test_repeated_analysis_returns_equal_findings(self) -> None:
        spy = Spy({"/api/analyze-code": ok({"success": True, "bugs": [
            {"bug": "Missing owner check", "line": 57, "severity": "high", "fix": "Add has_one constraint"},
            {"bug": "Unchecked arithmetic", "line": 12, "severity": "medium", "fix": "Use checked_add"},
        ]})})
        client = make_client(spy)

        first = client.analysis.analyze(VAULT)
        second = client.analysis.analyze(VAULT)

        assert len(spy.requests) == 2
        assert len(first.findings) == 2
        assert first.findings == second.findings

    def test_retried_on_bad_gateway(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("safex.transport.time.sleep", lambda seconds: None)
        responses = iter([httpx.Response(502), httpx.Response(200, json={"success": True})])
        spy = Spy({"/api/analyze-code": lambda body: next(responses)})

        result = make_client(spy).analysis.analyze(VAULT)

        assert result.success
        assert len(spy.requests) == 2


# ============================================================================
# Fuzzing
# ============================================================================


class TestFuzzingClient:
    """Tests for FuzzingClient."""

    @pytest.mark.parametrize("timeout", [0, -5, 121, 1000])
    def test_timeout_out_of_range_sends_nothing(self, timeout: int) -> None:
        spy = Spy({})

        with pytest.raises(ValidationError) as exc_info:
            make_client(spy).fuzzing.run(VAULT, "withdraw", timeout_seconds=timeout)

        assert exc_info.value.field == "timeout_seconds"
        assert spy.requests == []

    @pytest.mark.parametrize("name", ["", "   ", "../etc", "with space", "1abc", "fn;rm"])
    def test_bad_instruction_name_sends_nothing(self, name: str) -> None:
        spy = Spy({})

        with pytest.raises(ValidationError) as exc_info:
            make_client(spy).fuzzing.run(VAULT, name)

        assert exc_info.value.field == "instruction_name"
        assert spy.requests == []

    def test_bool_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            make_client(Spy({})).fuzzing.run(VAULT, "withdraw", timeout_seconds=True)

    @given(timeout=st.integers(min_value=1, max_value=120))
    @settings(max_examples=25)
    def test_timeout_in_range_is_sent(self, timeout: int) -> None:
        spy = Spy({"/api/fuzz-test": ok({"success": True, "errors": []})})

        outcome = make_client(spy).fuzzing.run(VAULT, " deposit ", timeout_seconds=timeout)

        assert outcome.passed
        assert outcome.instruction_name == "deposit"
        assert spy.requests[0][1]["timeout_seconds"] == timeout

    def test_default_timeout(self) -> None:
        spy = Spy({"/api/fuzz-test": ok({"success": True})})

        make_client(spy).fuzzing.run(VAULT, "withdraw")

        assert spy.requests[0][1]["timeout_seconds"] == 60

    def test_keeps_generated_artifact(self) -> None:
        spy = Spy({"/api/fuzz-test": ok({"success": True, "errors": [], "test_file": "#[test] fn fuzz() {}"})})

        outcome = make_client(spy).fuzzing.run(VAULT, "withdraw")

        assert outcome.generated_artifact == "#[test] fn fuzz() {}"

    def test_crash_is_not_retried(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("safex.transport.time.sleep", lambda seconds: None)
        spy = Spy({"/api/fuzz-test": lambda body: httpx.Response(503, text="Fuzz test execution failed")})

        with pytest.raises(ServerError):
            make_client(spy).fuzzing.run(VAULT, "withdraw")

        assert len(spy.requests) == 1

    def test_errors_must_be_strings(self) -> None:
        spy = Spy({"/api/fuzz-test": ok({"success": True, "errors": [{"line": 1}]})})

        with pytest.raises(ProtocolError):
            make_client(spy).fuzzing.run(VAULT, "withdraw")


# ============================================================================
# Attestation
# ============================================================================


class TestAttestationClient:
    """Tests for AttestationClient."""

    def test_empty_report_sends_nothing(self) -> None:
        spy = Spy({})

        with pytest.raises(ValidationError):
            make_client(spy).attestation.log_report("")

        assert spy.requests == []

    def test_hash_mismatch(self) -> None:
        spy = Spy({"/api/log-report": ok({
            "success": True,
            "hash": "0" * 64,
            "transaction_signature": SIGNATURE,
        })})

        with pytest.raises(IntegrityError) as exc_info:
            make_client(spy).attestation.log_report(REPORT)

        assert exc_info.value.expected == REPORT_HASH
        assert exc_info.value.actual == "0" * 64

    def test_uppercase_hash_is_protocol_error(self) -> None:
        spy = Spy({"/api/log-report": ok({
            "success": True,
            "hash": REPORT_HASH.upper(),
            "transaction_signature": SIGNATURE,
        })})

        with pytest.raises(ProtocolError) as exc_info:
            make_client(spy).attestation.log_report(REPORT)

        assert exc_info.value.code == "INVALID_HASH"

    def test_missing_signature(self) -> None:
        spy = Spy({"/api/log-report": ok({"success": True, "hash": REPORT_HASH})})

        with pytest.raises(ProtocolError):
            make_client(spy).attestation.log_report(REPORT)

    def test_domain_failure_has_no_record(self) -> None:
        spy = Spy({"/api/log-report": ok({"success": False, "message": "Ledger unavailable"})})

        result = make_client(spy).attestation.log_report(REPORT)

        assert not result.success
        assert result.record is None

    def test_sends_exact_content(self) -> None:
        content = "report\r\nwith  spacing é"
        spy = Spy({"/api/log-report": ok({
            "success": True,
            "hash": compute_content_hash(content).hex(),
            "transaction_signature": SIGNATURE,
        })})

        result = make_client(spy).attestation.log_report(content)

        assert spy.requests[0][1] == {"report_content": content}
        assert result.record.verify(content)

    @given(content=st.text(min_size=1, max_size=200))
    @settings(max_examples=50)
    def test_hash_round_trip(self, content: str) -> None:
        """A service that hashes the exact bytes always yields a verifying record."""
        def handler(body: dict[str, Any]) -> httpx.Response:
            digest = compute_content_hash(body["report_content"]).hex()
            return httpx.Response(200, json={"success": True, "hash": digest, "transaction_signature": SIGNATURE})

        result = make_client(Spy({"/api/log-report": handler})).attestation.log_report(content)

        assert result.record.content_hash == compute_content_hash(content)
        assert result.record.verify(content)

    def test_explorer_url(self) -> None:
        spy = Spy({"/api/log-report": ok({
            "success": True,
            "hash": REPORT_HASH,
            "transaction_signature": SIGNATURE,
        })})

        record = make_client(spy).attestation.log_report(REPORT).record

        assert record.explorer_url() == f"https://explorer.solana.com/tx/{SIGNATURE}?cluster=devnet"
        assert record.explorer_url(cluster=None) == f"https://explorer.solana.com/tx/{SIGNATURE}"


# ============================================================================
# Async clients
# ============================================================================


class TestAsyncClients:
    """The async clients share request bodies and parsing with the sync ones."""

    def test_concurrent_analysis_and_fuzz(self) -> None:
        spy = Spy({
            "/api/analyze-code": ok({"success": True, "bugs": []}),
            "/api/fuzz-test": ok({"success": True, "errors": []}),
        })

        async def run():
            async with AsyncSafexClient(transport=httpx.MockTransport(spy)) as client:
                return await asyncio.gather(
                    client.analysis.analyze(VAULT),
                    client.fuzzing.run(VAULT, "withdraw", timeout_seconds=30),
                )

        analysis, outcome = asyncio.run(run())

        assert analysis.success
        assert outcome.passed
        assert sorted(path for path, _ in spy.requests) == ["/api/analyze-code", "/api/fuzz-test"]

    def test_async_validation_sends_nothing(self) -> None:
        spy = Spy({})

        async def run() -> None:
            async with AsyncSafexClient(transport=httpx.MockTransport(spy)) as client:
                await client.fuzzing.run(VAULT, "withdraw", timeout_seconds=0)

        with pytest.raises(ValidationError):
            asyncio.run(run())
        assert spy.requests == []

    def test_async_contents_and_attestation(self) -> None:
        spy = Spy({
            "/api/repo-contents": ok({"success": True, "contents": []}),
            "/api/log-report": ok({"success": True, "hash": REPORT_HASH, "transaction_signature": SIGNATURE}),
            "/api/ingest-repo": ok({"success": True, "is_anchor_project": True}),
        })

        async def run():
            async with AsyncSafexClient(transport=httpx.MockTransport(spy)) as client:
                ingestion = await client.ingestion.ingest(VAULT)
                listing = await client.contents.list(VAULT, "programs")
                attestation = await client.attestation.log_report(REPORT)
                return ingestion, listing, attestation

        ingestion, listing, attestation = asyncio.run(run())

        assert ingestion.eligible
        assert listing.is_empty_directory
        assert attestation.record.hex_digest == REPORT_HASH
