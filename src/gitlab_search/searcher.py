"""Search pipeline: resolve groups, enumerate projects, dispatch searches."""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

import httpx
from rich.console import Console
from rich.markup import escape

from gitlab_search.client import GitLabClient
from gitlab_search.config import Config, validate_config
from gitlab_search.dispatcher import BlobSearcher, SearchDispatcher
from gitlab_search.enumerator import ProjectEnumerator, ProjectLister
from gitlab_search.models import ArchiveMode, ProjectSearchResults, SearchCriteria
from gitlab_search.printer import print_json_results, print_search_results
from gitlab_search.resolver import GroupLister, GroupResolver

logger = logging.getLogger(__name__)

# Progress goes to stderr so stdout only carries results
status_console = Console(stderr=True)


class GitLabAPI(GroupLister, ProjectLister, BlobSearcher, Protocol):
    """Everything the pipeline needs from a client; GitLabClient satisfies it."""


def _print_status(message: str) -> None:
    status_console.print(f"[dim]{escape(message)}[/dim]")


async def run_search(
    client: GitLabAPI,
    criteria: SearchCriteria,
    groups: str | None = None,
    archive_mode: ArchiveMode = ArchiveMode.EXCLUDE,
    concurrency: int = 10,
    on_status: Callable[[str], None] = _print_status,
    log: logging.Logger = logger,
) -> list[ProjectSearchResults]:
    """Run one search across the projects of the selected groups.

    Archived projects are left out unless ``archive_mode`` says otherwise.
    Returns an empty list without searching when no group or no project is
    found.
    """
    on_status("Fetching groups...")
    resolved = await GroupResolver(client, logger=log).resolve(groups)
    if not resolved:
        on_status("No groups found")
        return []
    on_status(f"Found {len(resolved)} group(s)")

    on_status("Fetching projects...")
    projects = await ProjectEnumerator(client, logger=log).enumerate(resolved, archive_mode)
    if not projects:
        on_status("No projects found")
        return []
    on_status(f"Found {len(projects)} project(s)")

    on_status(f'Searching for "{criteria.term}"...')
    return await SearchDispatcher(client, logger=log).dispatch(projects, criteria, concurrency)


async def _search(
    config: Config,
    criteria: SearchCriteria,
    groups: str | None,
    archive_mode: ArchiveMode,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ProjectSearchResults]:
    async with GitLabClient(config, transport=transport) as client:
        return await run_search(
            client,
            criteria,
            groups=groups,
            archive_mode=archive_mode,
            concurrency=config.concurrency,
        )


def perform_search(
    config: Config,
    criteria: SearchCriteria,
    groups: str | None = None,
    archive_mode: ArchiveMode = ArchiveMode.EXCLUDE,
    json_output: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ProjectSearchResults]:
    """Validate config, run the search and print the results.

    Raises:
        ConfigError: If token or domain is missing
        GitLabAPIError: If the group listing fails
    """
    validate_config(config)
    logger.debug(f"Searching {config.base_url} with concurrency {config.concurrency}")

    results = asyncio.run(_search(config, criteria, groups, archive_mode, transport))

    if json_output:
        print_json_results(criteria.term, results)
    else:
        print_search_results(criteria.term, results)
    return results
