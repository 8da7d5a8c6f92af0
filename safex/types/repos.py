"""Repository identity and ingestion data models."""

import re
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlsplit

from safex.exceptions import ValidationError

GITHUB_HOST = "github.com"

_SEGMENT = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class RepositoryReference:
    """Normalized identity of a target repository."""

    owner: str
    name: str
    url: str  # canonical https://<host>/<owner>/<name>

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_url(cls, url: str) -> "RepositoryReference":
        """
        Build a reference from a user-supplied repository URL.

        Accepts "https://github.com/owner/repo", the http form, and the bare
        "github.com/owner/repo" form. Trailing slashes, a ".git" suffix and
        extra path segments (e.g. "/tree/main") are dropped.

        Raises:
            ValidationError: If the URL is empty or does not name a repository
        """
        if not isinstance(url, str) or not url.strip():
            raise ValidationError("Repository URL is required", field="repo_url")

        raw = url.strip()
        if "://" not in raw:
            raw = f"https://{raw}"

        parsed = urlsplit(raw)
        host = (parsed.hostname or "").lower()
        is_github = host == GITHUB_HOST or host.endswith(f".{GITHUB_HOST}")
        if parsed.scheme not in ("http", "https") or not is_github:
            raise ValidationError(
                f"Invalid GitHub repository URL: {url}", field="repo_url"
            )

        parts = [part for part in parsed.path.split("/") if part]
        if len(parts) < 2:
            raise ValidationError(
                f"Invalid GitHub repository URL: {url}", field="repo_url"
            )

        owner, name = parts[0], parts[1]
        if name.endswith(".git"):
            name = name[: -len(".git")]

        if not _SEGMENT.match(owner) or not _SEGMENT.match(name) or name in (".", ".."):
            raise ValidationError(
                f"Invalid GitHub repository URL: {url}", field="repo_url"
            )

        return cls(owner=owner, name=name, url=f"https://{host}/{owner}/{name}")


@dataclass(frozen=True)
class RepositoryOwner:
    """Owner of a hosted repository."""

    login: str
    avatar_url: str | None = None


@dataclass(frozen=True)
class RepositorySummary:
    """Repository metadata reported by the source host."""

    name: str
    id: int | None = None
    full_name: str | None = None
    description: str | None = None
    html_url: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    owner: RepositoryOwner | None = None
    language: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of submitting a repository to the ingestion gate."""

    eligible: bool
    message: str
    repo: RepositorySummary | None = None
    reason: str | None = None  # set when eligible is False
