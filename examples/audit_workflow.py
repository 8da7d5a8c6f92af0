#!/usr/bin/env python3
"""
Safex Python SDK - Complete Audit Workflow Example

This example walks one repository through the full session:
1. Submit the repository and pass the ingestion gate
2. Browse the root and one directory
3. Run static analysis and a fuzz run concurrently
4. Attest the resulting report on the ledger

Run with: python examples/audit_workflow.py https://github.com/acme/vault withdraw
"""

import asyncio
import logging
import sys

from safex import (
    AsyncSafexClient,
    Failed,
    SessionOrchestrator,
    SessionStage,
    configure_logging,
)
from safex.exceptions import SafexError


async def run(repo_url: str, instruction: str) -> int:
    """Run the audit workflow; returns a process exit code."""
    print("=== Safex Python SDK Example ===\n")

    async with AsyncSafexClient.from_env() as client:
        session = SessionOrchestrator(client)

        # Step 1: Ingest
        print(f"1. Submitting {repo_url}...")
        await session.submit(repo_url)
        state = session.state

        if state.stage is SessionStage.FAILED:
            print(f"   Error: {state.error}")
            return 1
        if state.stage is SessionStage.INELIGIBLE:
            print(f"   Not eligible: {state.ingestion_result.reason}")
            return 1

        repo = state.ingestion_result.repo
        if repo is not None:
            print(f"   Name: {repo.full_name or repo.name}")
            print(f"   Stars: {repo.stargazers_count}")

        # Step 2: Browse
        print("\n2. Browsing repository root...")
        listing = state.contents
        if listing is not None and listing.is_directory:
            for entry in listing.view:
                marker = "/" if entry.is_dir else ""
                print(f"   - {entry.name}{marker}")

            directories = [entry for entry in listing.view if entry.is_dir]
            if directories:
                await session.open(directories[0])
                if state.contents is not None and state.contents.is_empty_directory:
                    print(f"   {directories[0].path}/ is empty")
                await session.navigate_up()

        # Step 3: Analyze and fuzz
        print(f"\n3. Running analysis and fuzzing '{instruction}'...")
        await asyncio.gather(
            session.analyze(),
            session.fuzz(instruction, timeout_seconds=60),
        )

        analysis = state.analysis_result
        if analysis is not None:
            print(f"   Findings: {len(analysis.findings)}")
            for finding in analysis.findings:
                print(
                    f"   - [{finding.severity.value}] line {finding.line}: "
                    f"{finding.description} (fix: {finding.suggested_fix})"
                )

        outcome = state.fuzz_outcome
        if outcome is not None:
            status = "passed" if outcome.passed else "found issues"
            print(f"   Fuzz {status} in {outcome.elapsed_ms} ms")
            for issue in outcome.issues:
                print(f"   - {issue}")

        for kind, error in state.errors.items():
            print(f"   {kind.value} failed: [{error.code}] {error.message}")

        # Step 4: Attest
        print("\n4. Attesting report...")
        committed = await session.attest()
        if isinstance(committed, Failed):
            print(f"   Error: [{committed.error.code}] {committed.error.message}")
            return 1

        result = state.attestation_result
        if result is None or result.record is None:
            print(f"   Not attested: {result.message if result else 'no result'}")
            return 1

        print(f"   Hash: {result.record.hex_digest}")
        print(f"   Transaction: {result.record.transaction_ref}")
        print(f"   Verified locally: {result.verify()}")
        print(f"   Explorer: {result.record.explorer_url()}")

    print("\n=== Workflow Complete ===")
    return 0


def main() -> None:
    if len(sys.argv) < 2:
        print(f"Usage: {sys.argv[0]} REPO_URL [INSTRUCTION]")
        sys.exit(2)

    configure_logging(level=logging.WARNING)
    repo_url = sys.argv[1]
    instruction = sys.argv[2] if len(sys.argv) > 2 else "initialize"

    try:
        sys.exit(asyncio.run(run(repo_url, instruction)))
    except SafexError as e:
        print(f"\nError: [{e.code}] {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
