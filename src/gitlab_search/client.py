"""Async GitLab REST API client.

Thin transport over ``httpx.AsyncClient``: authentication header, TLS
settings, timeouts, and translation of every transport or HTTP failure into
``GitLabAPIError`` so callers only have one exception family to handle.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from gitlab_search.config import Config
from gitlab_search.errors import GitLabAPIError, MalformedResponseError

logger = logging.getLogger(__name__)


class GitLabClient:
    """Authenticated client bound to ``{protocol}://{domain}/api/v4``."""

    def __init__(self, config: Config, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the client.

        Args:
            config: Connection settings (domain, token, protocol, TLS, timeout)
            transport: Optional httpx transport, used by tests to mock the server
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "PRIVATE-TOKEN": config.token,
                "Content-Type": "application/json",
            },
            verify=not config.ignore_ssl,
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "GitLabClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        """GET an endpoint returning a JSON list.

        Raises:
            GitLabAPIError: On connection errors, timeouts and non-2xx responses
            MalformedResponseError: If the body is not JSON or not a list
        """
        params = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug(f"Starting request: GET {path} {params}")
        try:
            response = await self._client.get(path, params=params)
            logger.debug(f"Response: {response.status_code} {response.request.url}")
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GitLabAPIError(
                f"GET {path} failed with HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise GitLabAPIError(f"GET {path} failed: {type(e).__name__}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"GET {path} returned invalid JSON", status_code=response.status_code
            ) from e
        if not isinstance(data, list):
            raise MalformedResponseError(
                f"GET {path} returned {type(data).__name__}, expected a list",
                status_code=response.status_code,
            )
        return data

    async def list_groups(self, page: int, per_page: int) -> list[Any]:
        return await self.get_json("/groups", {"page": page, "per_page": per_page})

    async def list_group_projects(
        self,
        group_id: str,
        page: int,
        per_page: int,
        archived: bool | None = None,
    ) -> list[Any]:
        """List one page of projects in a group; ``archived=None`` lists both kinds."""
        params: dict[str, Any] = {"page": page, "per_page": per_page}
        if archived is not None:
            params["archived"] = "true" if archived else "false"
        return await self.get_json(f"/groups/{quote(str(group_id), safe='')}/projects", params)

    async def search_blobs(self, project_id: int, query: str, ref: str | None = None) -> list[Any]:
        """Search file contents of one project."""
        return await self.get_json(
            f"/projects/{project_id}/search",
            {"scope": "blobs", "search": query, "ref": ref},
        )
