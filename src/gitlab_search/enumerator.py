"""Project enumeration across groups with paginated listing."""

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from gitlab_search.errors import GitLabAPIError
from gitlab_search.models import ArchiveMode, Group, Project

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
MAX_PAGES = 1000


class ProjectLister(Protocol):
    async def list_group_projects(
        self, group_id: str, page: int, per_page: int, archived: bool | None = None
    ) -> list[Any]: ...


class ProjectEnumerator:
    """Turns groups into a flat list of projects.

    Pages of each group are fetched one after the other. A failing first page
    means the group is unreachable (permissions, bad id) and is skipped. A
    failing later page is skipped and the following pages are still tried, up
    to MAX_PAGES per group. That recovery is lossy: projects on the skipped
    page are silently missing from the result.
    """

    def __init__(
        self,
        client: ProjectLister,
        logger: logging.Logger = logger,
        page_size: int = PAGE_SIZE,
        max_pages: int = MAX_PAGES,
    ):
        self.client = client
        self.logger = logger
        self.page_size = page_size
        self.max_pages = max_pages

    async def enumerate(
        self, groups: Sequence[Group], archive_mode: ArchiveMode = ArchiveMode.ALL
    ) -> list[Project]:
        """Return projects in group order, then page order, then in-page order."""
        projects: list[Project] = []
        for group in groups:
            try:
                await self._enumerate_group(group, archive_mode, projects)
            except Exception as e:
                self.logger.warning(f"Failed to fetch projects for group {group.name}: {e}")
        return projects

    async def _enumerate_group(
        self, group: Group, archive_mode: ArchiveMode, projects: list[Project]
    ) -> None:
        page = 1
        while True:
            try:
                items = await self.client.list_group_projects(
                    group.id, page, self.page_size, archive_mode.archived_param
                )
            except GitLabAPIError as e:
                self.logger.debug(f"Failed to fetch page {page} for group {group.name}: {e}")
                if page == 1:
                    self.logger.warning(
                        f"Failed to fetch first page for group {group.name}, skipping this group"
                    )
                    return
                self.logger.warning(
                    f"Failed to fetch page {page} for group {group.name}, "
                    "results for this group may be incomplete"
                )
                page += 1
                if page > self.max_pages:
                    self.logger.warning(f"Reached maximum page limit for group {group.name}")
                    return
                continue

            for item in items:
                project = Project.from_api(item)
                # The server may not honour the archived filter
                if archive_mode.accepts(project):
                    projects.append(project)

            if len(items) < self.page_size:
                return
            page += 1
            if page > self.max_pages:
                self.logger.warning(f"Reached maximum page limit for group {group.name}")
                return
