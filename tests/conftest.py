"""Pytest fixtures for gitlab-search tests."""

import asyncio
from typing import Any

import pytest

from gitlab_search.errors import GitLabAPIError


def project_payload(project_id: int, archived: bool = False, group: str = "group") -> dict[str, Any]:
    """API payload for one project."""
    return {
        "id": project_id,
        "name": f"project-{project_id}",
        "web_url": f"https://gitlab.example.com/{group}/project-{project_id}",
        "archived": archived,
        "default_branch": "main",
    }


def match_payload(filename: str = "src/main.go", startline: int = 1, data: str = "// TODO fix") -> dict[str, Any]:
    """API payload for one blob search match."""
    return {
        "basename": filename.rsplit(".", 1)[0],
        "data": data,
        "path": filename,
        "filename": filename,
        "id": None,
        "ref": "main",
        "startline": startline,
        "project_id": 1,
    }


class FakeGitLab:
    """In-memory stand-in for GitLabClient with real pagination behaviour.

    ``projects`` maps group id to the full project payload list;
    ``failing_pages`` holds (group_id, page) pairs that raise;
    ``searches`` maps project id to a match list or an exception to raise.
    """

    def __init__(
        self,
        groups: list[dict[str, Any]] | None = None,
        projects: dict[str, list[dict[str, Any]]] | None = None,
        failing_pages: set[tuple[str, int]] | None = None,
        searches: dict[int, Any] | None = None,
        search_delays: dict[int, float] | None = None,
    ):
        self.groups = groups or []
        self.projects = projects or {}
        self.failing_pages = failing_pages or set()
        self.searches = searches or {}
        self.search_delays = search_delays or {}
        self.group_calls: list[int] = []
        self.project_calls: list[tuple[str, int, bool | None]] = []
        self.search_calls: list[tuple[int, str, str | None]] = []
        self.events: list[tuple[str, int]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def list_groups(self, page: int, per_page: int) -> list[Any]:
        self.group_calls.append(page)
        return self.groups[(page - 1) * per_page : page * per_page]

    async def list_group_projects(
        self, group_id: str, page: int, per_page: int, archived: bool | None = None
    ) -> list[Any]:
        self.project_calls.append((group_id, page, archived))
        if (group_id, page) in self.failing_pages:
            raise GitLabAPIError(f"page {page} of group {group_id} failed", status_code=500)
        if group_id not in self.projects:
            raise GitLabAPIError("404 Group Not Found", status_code=404)
        items = self.projects[group_id]
        if archived is not None:
            items = [p for p in items if p["archived"] is archived]
        return items[(page - 1) * per_page : page * per_page]

    async def search_blobs(self, project_id: int, query: str, ref: str | None = None) -> list[Any]:
        self.search_calls.append((project_id, query, ref))
        self.events.append(("start", project_id))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.search_delays.get(project_id, 0))
            outcome = self.searches.get(project_id, [])
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1
            self.events.append(("end", project_id))


@pytest.fixture
def fake_gitlab():
    """A backend with two groups of 150 and 3 projects."""
    return FakeGitLab(
        groups=[{"id": 1, "name": "alpha", "full_path": "alpha"}, {"id": 2, "name": "beta", "full_path": "beta"}],
        projects={
            "1": [project_payload(i, archived=i % 10 == 0, group="alpha") for i in range(1, 151)],
            "2": [project_payload(i, group="beta") for i in range(1001, 1004)],
        },
    )


@pytest.fixture
def rc_home(tmp_path, monkeypatch):
    """Point the home rc file into a temporary directory."""
    from gitlab_search import config

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(config, "CONFIG_DIR", home)
    monkeypatch.setattr(config, "CONFIG_PATH", home / config.RC_NAME)
    return home


@pytest.fixture
def make_project():
    """Factory for project payloads."""
    return project_payload


@pytest.fixture
def make_match():
    """Factory for blob search match payloads."""
    return match_payload


@pytest.fixture
def gitlab_backend():
    """The FakeGitLab class, to build or subclass custom backends."""
    return FakeGitLab
