"""Data models for gitlab-search."""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from gitlab_search.errors import MalformedResponseError


def _require(payload: Any, kind: str, **fields: type | tuple[type, ...]) -> Mapping[str, Any]:
    """Check that an API payload entry carries the given fields with the given types."""
    if not isinstance(payload, Mapping):
        raise MalformedResponseError(f"Expected a {kind} object, got {type(payload).__name__}")
    for name, expected in fields.items():
        value = payload.get(name)
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, expected):
            raise MalformedResponseError(f"{kind} field '{name}' is missing or invalid: {value!r}")
    return payload


@dataclass(frozen=True)
class Group:
    """A GitLab group (namespace holding projects)."""

    id: str
    name: str

    @classmethod
    def from_api(cls, payload: Any) -> "Group":
        data = _require(payload, "group", id=(int, str))
        name = data.get("full_path") or data.get("name") or str(data["id"])
        return cls(id=str(data["id"]), name=str(name))


@dataclass(frozen=True)
class Project:
    """A single repository with searchable file contents."""

    id: int
    name: str
    url: str
    archived: bool = False

    @classmethod
    def from_api(cls, payload: Any) -> "Project":
        data = _require(payload, "project", id=int, name=str, web_url=str)
        return cls(
            id=data["id"],
            name=data["name"],
            url=data["web_url"],
            archived=bool(data.get("archived", False)),
        )


class ArchiveMode(Enum):
    """Which projects survive enumeration, by archived flag."""

    ALL = "all"
    ONLY = "only"
    EXCLUDE = "exclude"

    @classmethod
    def parse(cls, value: "ArchiveMode | str | bool | None") -> "ArchiveMode":
        """Translate user or legacy input into an archive mode.

        Legacy boolean input maps ``True`` to ONLY and ``False`` to EXCLUDE;
        ``None`` means no filtering.
        """
        if isinstance(value, ArchiveMode):
            return value
        if value is None:
            return cls.ALL
        if isinstance(value, bool):
            return cls.ONLY if value else cls.EXCLUDE
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"Invalid archive mode '{value}' (expected one of: {choices})") from None

    @property
    def archived_param(self) -> bool | None:
        """Value of the ``archived`` listing parameter, None to omit it."""
        if self is ArchiveMode.ONLY:
            return True
        if self is ArchiveMode.EXCLUDE:
            return False
        return None

    def accepts(self, project: Project) -> bool:
        wanted = self.archived_param
        return wanted is None or project.archived is wanted


class FilterType(Enum):
    FILENAME = "filename"
    EXTENSION = "extension"
    PATH = "path"


@dataclass(frozen=True)
class SearchFilter:
    """A structural constraint layered onto the search term."""

    type: FilterType
    value: str | None = None

    def to_token(self) -> str | None:
        """Render as a ``key:value`` search token, None when there is no value."""
        if not self.value:
            return None
        return f"{self.type.value}:{self.value}"


@dataclass(frozen=True)
class SearchCriteria:
    """Free-text term plus filters, fixed for one run."""

    term: str
    filters: tuple[SearchFilter, ...] = ()
    ref: str | None = None  # branch or tag, None for each project's default branch

    @classmethod
    def build(
        cls,
        term: str,
        filename: str | None = None,
        extension: str | None = None,
        path: str | None = None,
        ref: str | None = None,
    ) -> "SearchCriteria":
        """Build criteria from optional filter values, in filename/extension/path order."""
        filters = [
            SearchFilter(FilterType.FILENAME, filename),
            SearchFilter(FilterType.EXTENSION, extension),
            SearchFilter(FilterType.PATH, path),
        ]
        return cls(term=term, filters=tuple(f for f in filters if f.value), ref=ref or None)


@dataclass(frozen=True)
class SearchResult:
    """One matching location within one project."""

    data: str
    filename: str
    ref: str
    startline: int

    @classmethod
    def from_api(cls, payload: Any) -> "SearchResult":
        data = _require(payload, "search result", data=str, filename=str, ref=str, startline=int)
        return cls(
            data=data["data"],
            filename=data["filename"],
            ref=data["ref"],
            startline=data["startline"],
        )


@dataclass(frozen=True)
class ProjectSearchResults:
    """A project together with its (non-empty) matches."""

    project: Project
    results: tuple[SearchResult, ...]

    def __post_init__(self) -> None:
        if not self.results:
            raise ValueError(f"No search results for project {self.project.name}")
        object.__setattr__(self, "results", tuple(self.results))

    def __iter__(self) -> Iterator[Any]:
        # Allows `project, results = entry`
        yield self.project
        yield self.results

    def __len__(self) -> int:
        return len(self.results)


def total_results(results: Sequence[ProjectSearchResults]) -> int:
    return sum(len(entry) for entry in results)
