"""Async repository contents resource client."""

from typing import TYPE_CHECKING

from safex.clients.contents import (
    CONTENTS_PATH,
    build_contents_body,
    parse_contents_response,
)
from safex.types.contents import ContentsResult, normalize_path
from safex.types.repos import RepositoryReference

if TYPE_CHECKING:
    from safex.async_transport import AsyncHTTPTransport


class AsyncContentsClient:
    """Async client for browsing repository contents."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        self.transport = transport

    async def list(self, ref: RepositoryReference, path: str = "") -> ContentsResult:
        """
        Fetch the listing of a directory, or a single file.

        Args:
            ref: Repository reference
            path: Path inside the repository, "" for the root

        Returns:
            ContentsResult holding a DirectoryListing or a FileContent
        """
        path = normalize_path(path)
        response = await self.transport.post(
            CONTENTS_PATH, build_contents_body(ref, path)
        )
        return parse_contents_response(response, path)
