"""Repository contents resource client."""

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
from safex.types.contents import (
    ContentEntry,
    ContentKind,
    ContentsResult,
    DirectoryListing,
    FileContent,
    normalize_path,
)
from safex.types.repos import RepositoryReference

if TYPE_CHECKING:
    from safex.transport import HTTPTransport

CONTENTS_PATH = "/api/repo-contents"


def _parse_kind(data: dict[str, Any]) -> ContentKind:
    # The service serializes the kind as "type"; older builds used "content_type"
    value = get_str(data, "type", "content_type", required=True)
    try:
        return ContentKind(value)
    except ValueError as e:
        raise ProtocolError(
            "UNEXPECTED_SHAPE", f"Unknown content kind: {value}"
        ) from e


def parse_content_entry(data: Any) -> ContentEntry:
    data = expect_object(data, "contents entry")
    return ContentEntry(
        name=get_str(data, "name", required=True),
        path=get_str(data, "path", required=True),
        kind=_parse_kind(data),
        size=get_int(data, "size"),
        download_ref=get_str(data, "download_url"),
        html_url=get_str(data, "html_url"),
        sha=get_str(data, "sha"),
    )


def parse_file_content(data: Any) -> FileContent:
    data = expect_object(data, "file_content")
    return FileContent(
        name=get_str(data, "name", required=True),
        path=get_str(data, "path", required=True),
        size=get_int(data, "size"),
        content=get_str(data, "content"),
        download_ref=get_str(data, "download_url"),
        html_url=get_str(data, "html_url"),
    )


def _is_embedded_file(contents: list[Any]) -> bool:
    """A single file entry carrying its own content is a file view, not a listing."""
    if len(contents) != 1 or not isinstance(contents[0], dict):
        return False
    entry = contents[0]
    kind = entry.get("type", entry.get("content_type"))
    return kind == ContentKind.FILE.value and entry.get("content") is not None


def parse_contents_response(data: dict[str, Any], path: str) -> ContentsResult:
    """
    Parse a contents response into a directory listing or a single file.

    Args:
        data: Decoded response body
        path: The normalized path that was requested
    """
    success = require_success(data)
    message = get_message(data)

    if not success:
        return ContentsResult(success=False, message=message, path=path)

    view: DirectoryListing | FileContent
    file_data = data.get("file_content")
    if file_data is not None:
        view = parse_file_content(file_data)
    else:
        if data.get("contents") is None:
            raise ProtocolError(
                "MISSING_FIELD",
                "Response carries neither 'contents' nor 'file_content'",
            )
        contents = expect_list(data["contents"], "contents")
        if _is_embedded_file(contents):
            view = parse_file_content(contents[0])
        else:
            view = DirectoryListing(
                path=path,
                entries=tuple(parse_content_entry(entry) for entry in contents),
            )

    return ContentsResult(success=True, message=message, path=path, view=view)


def build_contents_body(ref: RepositoryReference, path: str) -> dict[str, Any]:
    body: dict[str, Any] = {"repo_url": ref.url}
    if path:
        body["path"] = path
    return body


class ContentsClient:
    """Client for browsing repository contents."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the contents client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def list(self, ref: RepositoryReference, path: str = "") -> ContentsResult:
        """
        Fetch the listing of a directory, or a single file.

        Nothing is cached: each call asks the service again.

        Args:
            ref: Repository reference
            path: Path inside the repository, "" for the root

        Returns:
            ContentsResult holding a DirectoryListing or a FileContent

        Raises:
            TransportError: On non-2xx status or network failure
            ProtocolError: On an empty or malformed body
        """
        path = normalize_path(path)
        response = self.transport.post(CONTENTS_PATH, build_contents_body(ref, path))
        return parse_contents_response(response, path)
