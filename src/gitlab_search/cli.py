"""CLI for gitlab-search."""

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from gitlab_search import __version__

app = typer.Typer(
    name="gitlab-search",
    help="Search for contents across all your GitLab repositories.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


class ArchiveChoice(str, Enum):
    all = "all"
    only = "only"
    exclude = "exclude"


class ProtocolChoice(str, Enum):
    http = "http"
    https = "https"


def setup_logging(debug: bool = False) -> None:
    """Send package logs to stderr through rich."""
    package_logger = logging.getLogger("gitlab_search")
    package_logger.handlers = [
        h for h in package_logger.handlers if not isinstance(h, RichHandler)
    ]
    handler = RichHandler(console=err_console, show_time=False, show_path=debug)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if debug else logging.WARNING)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"gitlab-search {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Search for contents across all your GitLab repositories."""
    pass


@app.command()
def search(
    term: Annotated[str, typer.Argument(help="The term to search for")],
    groups: Annotated[
        str | None, typer.Option("--groups", "-g", help="Comma-separated list of group IDs to search in")
    ] = None,
    filename: Annotated[
        str | None, typer.Option("--filename", "-f", help="Filter by filename")
    ] = None,
    extension: Annotated[
        str | None, typer.Option("--extension", "-e", help="Filter by file extension")
    ] = None,
    path: Annotated[str | None, typer.Option("--path", "-p", help="Filter by file path")] = None,
    ref: Annotated[
        str | None, typer.Option("--ref", "-r", help="Branch or tag to search (default branch if omitted)")
    ] = None,
    archive: Annotated[
        ArchiveChoice,
        typer.Option("--archive", "-a", help="Archived projects: include all, only archived, or exclude them"),
    ] = ArchiveChoice.exclude,
    token: Annotated[str | None, typer.Option("--token", "-t", help="GitLab access token")] = None,
    domain: Annotated[
        str | None, typer.Option("--domain", "-d", help="GitLab domain (default: gitlab.com)")
    ] = None,
    ignore_ssl: Annotated[
        bool | None, typer.Option("--ignore-ssl", help="Ignore SSL certificate errors")
    ] = None,
    concurrency: Annotated[
        int | None, typer.Option("--concurrency", "-c", min=1, help="Number of concurrent requests [default: 10]")
    ] = None,
    protocol: Annotated[
        ProtocolChoice | None, typer.Option("--protocol", help="Protocol to use [default: https]")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    debug: Annotated[
        bool, typer.Option("--debug", envvar="GITLAB_SEARCH_DEBUG", help="Log every request and failure")
    ] = False,
) -> None:
    """Search file contents in every project of the selected groups."""
    if not term.strip():
        err_console.print("[red]Error: Search term required[/red]")
        raise typer.Exit(1)

    setup_logging(debug)

    from gitlab_search.config import load_config
    from gitlab_search.errors import ConfigError, GitLabAPIError
    from gitlab_search.models import ArchiveMode, SearchCriteria
    from gitlab_search.searcher import perform_search

    try:
        config = load_config().with_overrides(
            token=token,
            domain=domain,
            ignore_ssl=ignore_ssl,
            concurrency=concurrency,
            protocol=protocol.value if protocol else None,
        )
        criteria = SearchCriteria.build(term, filename=filename, extension=extension, path=path, ref=ref)
        perform_search(
            config,
            criteria,
            groups=groups,
            archive_mode=ArchiveMode.parse(archive.value),
            json_output=json_output,
        )
    except (ConfigError, GitLabAPIError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        logging.getLogger("gitlab_search").debug("Unhandled error", exc_info=True)
        err_console.print(f"[red]Error: {type(e).__name__}: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command()
def setup(
    token: Annotated[
        str, typer.Option("--token", "-t", prompt=True, hide_input=True, help="GitLab access token")
    ],
    domain: Annotated[str, typer.Option("--domain", "-d", help="GitLab domain")] = "gitlab.com",
    ignore_ssl: Annotated[
        bool, typer.Option("--ignore-ssl", help="Ignore SSL certificate errors")
    ] = False,
    protocol: Annotated[
        ProtocolChoice, typer.Option("--protocol", help="Protocol to use")
    ] = ProtocolChoice.https,
    concurrency: Annotated[
        int, typer.Option("--concurrency", "-c", min=1, help="Number of concurrent requests")
    ] = 10,
    directory: Annotated[
        Path | None, typer.Option("--dir", help="Directory to write .gitlab-searchrc to [default: home]")
    ] = None,
) -> None:
    """Store connection settings in a .gitlab-searchrc file."""
    from gitlab_search.config import Config, Protocol, save_config

    config = Config(
        domain=domain,
        token=token,
        ignore_ssl=ignore_ssl,
        protocol=Protocol.parse(protocol.value),
        concurrency=concurrency,
    )
    try:
        path = save_config(config, directory)
    except OSError as e:
        err_console.print(f"[red]Error: Could not write config: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Saved configuration to {path}[/green]")


if __name__ == "__main__":
    app()
