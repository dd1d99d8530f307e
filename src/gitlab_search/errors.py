"""Exceptions raised by gitlab-search."""


class ConfigError(Exception):
    """Configuration is missing, unreadable or invalid."""


class GitLabAPIError(Exception):
    """A request to the GitLab API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(GitLabAPIError):
    """The API answered with a body of an unexpected shape."""
