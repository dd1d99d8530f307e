"""Concurrent search dispatch over a list of projects."""

import asyncio
import logging
from collections.abc import Iterator, Sequence
from typing import Any, Protocol

from gitlab_search.errors import GitLabAPIError
from gitlab_search.models import Project, ProjectSearchResults, SearchCriteria, SearchResult

logger = logging.getLogger(__name__)


class BlobSearcher(Protocol):
    async def search_blobs(self, project_id: int, query: str, ref: str | None = None) -> list[Any]: ...


def build_search_query(criteria: SearchCriteria) -> str:
    """Append filters to the term as ``key:value`` tokens.

    Example: term "foo" with a filename filter "bar.go" gives
    "foo filename:bar.go". Filters without a value are ignored.
    """
    tokens = [criteria.term]
    for search_filter in criteria.filters:
        token = search_filter.to_token()
        if token:
            tokens.append(token)
    return " ".join(tokens)


def batched(projects: Sequence[Project], size: int) -> Iterator[Sequence[Project]]:
    """Yield consecutive slices of ``size`` projects, the last may be shorter."""
    for start in range(0, len(projects), size):
        yield projects[start : start + size]


class SearchDispatcher:
    """Run one blob search per project, ``concurrency`` requests at a time.

    Projects are searched in batches: every request of a batch runs
    concurrently and the whole batch is awaited before the next one starts.
    A failing search counts as "no matches" and never affects other projects.
    """

    def __init__(self, client: BlobSearcher, logger: logging.Logger = logger):
        self.client = client
        self.logger = logger

    async def dispatch(
        self,
        projects: Sequence[Project],
        criteria: SearchCriteria,
        concurrency: int,
    ) -> list[ProjectSearchResults]:
        """Search all projects, keeping only those with matches, in input order."""
        if concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, got {concurrency}")

        query = build_search_query(criteria)
        collected: list[ProjectSearchResults] = []
        for number, batch in enumerate(batched(projects, concurrency), 1):
            self.logger.debug(f"Searching batch {number} ({len(batch)} project(s))")
            # gather keeps submission order
            batch_results = await asyncio.gather(
                *(self.search_project(project, query, criteria.ref) for project in batch)
            )
            for project, results in zip(batch, batch_results):
                if results:
                    collected.append(ProjectSearchResults(project, tuple(results)))
        return collected

    async def search_project(
        self, project: Project, query: str, ref: str | None = None
    ) -> list[SearchResult]:
        """Search one project; any failure yields an empty list."""
        try:
            items = await self.client.search_blobs(project.id, query, ref)
            return [SearchResult.from_api(item) for item in items]
        except GitLabAPIError as e:
            self.logger.debug(f"Search failed for project {project.name}: {e}")
        except Exception as e:
            self.logger.warning(
                f"Unexpected error searching project {project.name}: {type(e).__name__}: {e}"
            )
        return []
