"""Ingestion gate resource client."""

from typing import TYPE_CHECKING, Any

from safex.clients.wire import (
    expect_object,
    get_int,
    get_message,
    get_str,
    get_timestamp,
    require_success,
)
from safex.exceptions import ProtocolError, RequestRejectedError, SafexError
from safex.types.repos import (
    IngestionResult,
    RepositoryOwner,
    RepositoryReference,
    RepositorySummary,
)

if TYPE_CHECKING:
    from safex.transport import HTTPTransport

INGEST_PATH = "/api/ingest-repo"


def parse_repository_summary(data: Any) -> RepositorySummary:
    """Parse the source host's repository metadata."""
    data = expect_object(data, "repo")
    owner_data = data.get("owner")
    owner = None
    if owner_data is not None:
        owner_data = expect_object(owner_data, "repo.owner")
        owner = RepositoryOwner(
            login=get_str(owner_data, "login", required=True),
            avatar_url=get_str(owner_data, "avatar_url"),
        )

    return RepositorySummary(
        name=get_str(data, "name", required=True),
        id=get_int(data, "id"),
        full_name=get_str(data, "full_name"),
        description=get_str(data, "description"),
        html_url=get_str(data, "html_url"),
        stargazers_count=get_int(data, "stargazers_count", default=0),
        forks_count=get_int(data, "forks_count", default=0),
        open_issues_count=get_int(data, "open_issues_count", default=0),
        owner=owner,
        language=get_str(data, "language"),
        created_at=get_timestamp(data, "created_at"),
        updated_at=get_timestamp(data, "updated_at"),
    )


def parse_ingestion_response(data: dict[str, Any]) -> IngestionResult:
    """
    Classify an ingestion response.

    A repository is eligible only when the service reports success and
    explicitly flags it as an Anchor project.
    """
    success = require_success(data)
    message = get_message(data)

    repo_data = data.get("repo")
    repo = parse_repository_summary(repo_data) if repo_data is not None else None

    eligible = success and data.get("is_anchor_project") is True
    reason = None
    if not eligible:
        reason = message or "Repository is not an Anchor project"

    return IngestionResult(eligible=eligible, message=message, repo=repo, reason=reason)


def parse_rejected_ingestion(error: SafexError) -> IngestionResult | None:
    """
    Recover the classification carried by a rejected ingestion request.

    The service answers a repository that is not an Anchor project with a
    4xx status and the usual ingestion body. The request still failed; this
    only exposes what the service said about the repository.

    Returns:
        IngestionResult with eligible=False, or None if the error carries no
        classification
    """
    if not isinstance(error, RequestRejectedError):
        return None
    payload = error.payload
    if not payload or payload.get("is_anchor_project") is not False:
        return None
    try:
        return parse_ingestion_response(payload)
    except ProtocolError:
        return None


class IngestionClient:
    """Client for the repository ingestion gate."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the ingestion client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def ingest(self, ref: RepositoryReference | str) -> IngestionResult:
        """
        Submit a repository and classify it.

        Args:
            ref: Repository reference, or a URL to build one from

        Returns:
            IngestionResult; eligible=False is a classification, not an error

        Raises:
            ValidationError: If a URL string is malformed (nothing is sent)
            TransportError: On non-2xx status or network failure
            ProtocolError: On an empty or malformed body
        """
        if isinstance(ref, str):
            ref = RepositoryReference.from_url(ref)

        response = self.transport.post(INGEST_PATH, {"repo_url": ref.url})
        return parse_ingestion_response(response)
