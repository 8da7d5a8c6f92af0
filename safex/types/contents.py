"""Repository content browsing data models."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


class ContentKind(str, Enum):
    """Kind of a repository content entry."""

    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"
    SUBMODULE = "submodule"


@dataclass(frozen=True)
class ContentEntry:
    """One entry of a directory listing."""

    name: str
    path: str
    kind: ContentKind
    size: int | None = None
    download_ref: str | None = None
    html_url: str | None = None
    sha: str | None = None

    @property
    def is_dir(self) -> bool:
        return self.kind is ContentKind.DIR

    @property
    def external_ref(self) -> str | None:
        """Where the entry can be opened outside the session."""
        return self.html_url or self.download_ref


@dataclass(frozen=True)
class DirectoryListing:
    """Ordered entries of one directory, fetched fresh for each navigation."""

    path: str
    entries: tuple[ContentEntry, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ContentEntry]:
        return iter(self.entries)


@dataclass(frozen=True)
class FileContent:
    """A single file, with its text when the service embedded it."""

    name: str
    path: str
    size: int | None = None
    content: str | None = None
    download_ref: str | None = None
    html_url: str | None = None

    @property
    def preview_available(self) -> bool:
        return self.content is not None

    @property
    def external_ref(self) -> str | None:
        return self.html_url or self.download_ref


@dataclass(frozen=True)
class ContentsResult:
    """Response of a contents request: a listing, a file, or a domain failure."""

    success: bool
    message: str
    path: str
    view: DirectoryListing | FileContent | None = None

    @property
    def is_directory(self) -> bool:
        return isinstance(self.view, DirectoryListing)

    @property
    def is_file(self) -> bool:
        return isinstance(self.view, FileContent)

    @property
    def is_empty_directory(self) -> bool:
        return isinstance(self.view, DirectoryListing) and self.view.is_empty


def normalize_path(path: str | None) -> str:
    """Strip surrounding and doubled slashes; None and "/" become the root ""."""
    if not path:
        return ""
    return "/".join(segment for segment in path.split("/") if segment)


def parent_path(path: str) -> str:
    """
    Return the path one level up.

    The root is the empty path and is its own parent.
    """
    segments = normalize_path(path).split("/")
    return "/".join(segments[:-1])
