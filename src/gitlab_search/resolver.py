"""Group resolution from a group selector."""

import logging
from typing import Any, Protocol

from gitlab_search.enumerator import MAX_PAGES, PAGE_SIZE
from gitlab_search.models import Group

logger = logging.getLogger(__name__)


class GroupLister(Protocol):
    async def list_groups(self, page: int, per_page: int) -> list[Any]: ...


def parse_group_ids(selector: str) -> list[str]:
    """Split a comma-separated selector into ids, dropping blanks and repeats."""
    ids: list[str] = []
    for part in selector.split(","):
        group_id = part.strip()
        if group_id and group_id not in ids:
            ids.append(group_id)
    return ids


class GroupResolver:
    """Resolve a group selector into groups.

    Explicit ids are trusted as-is (no lookup round trip) and named after
    themselves. Without a selector every group visible to the token is
    listed; listing errors propagate.
    """

    def __init__(self, client: GroupLister, logger: logging.Logger = logger, page_size: int = PAGE_SIZE):
        self.client = client
        self.logger = logger
        self.page_size = page_size

    async def resolve(self, selector: str | None = None) -> list[Group]:
        if selector and selector.strip():
            groups = [Group(id=group_id, name=group_id) for group_id in parse_group_ids(selector)]
            self.logger.debug(f"Using {len(groups)} group(s) from selector: {selector}")
            return groups
        return await self._list_all()

    async def _list_all(self) -> list[Group]:
        groups: list[Group] = []
        for page in range(1, MAX_PAGES + 1):
            items = await self.client.list_groups(page, self.page_size)
            groups.extend(Group.from_api(item) for item in items)
            if len(items) < self.page_size:
                break
        else:
            self.logger.warning("Reached maximum page limit while listing groups")
        self.logger.debug(f"Listed {len(groups)} visible group(s)")
        return groups
