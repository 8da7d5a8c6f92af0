"""Async fuzz testing resource client."""

from typing import TYPE_CHECKING

from safex.clients.fuzzing import FUZZ_PATH, parse_fuzz_response, validate_fuzz_request
from safex.types.fuzzing import DEFAULT_TIMEOUT_SECONDS, FuzzOutcome
from safex.types.repos import RepositoryReference

if TYPE_CHECKING:
    from safex.async_transport import AsyncHTTPTransport


class AsyncFuzzingClient:
    """Async client for the bounded fuzz runner."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        self.transport = transport

    async def run(
        self,
        ref: RepositoryReference,
        instruction_name: str,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    ) -> FuzzOutcome:
        """
        Fuzz one program instruction for a bounded time.

        Parameters are validated before dispatch; an out-of-range timeout
        raises ValidationError and sends nothing.
        """
        name = validate_fuzz_request(instruction_name, timeout_seconds)
        response = await self.transport.post(
            FUZZ_PATH,
            {
                "repo_url": ref.url,
                "instruction_name": name,
                "timeout_seconds": timeout_seconds,
            },
            retry=False,
        )
        return parse_fuzz_response(response, name)
