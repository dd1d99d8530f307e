"""Terminal output for search results."""

import re
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.text import Text

from gitlab_search.models import Project, ProjectSearchResults, SearchResult, total_results

console = Console()


def url_to_line_in_file(project: Project, result: SearchResult) -> str:
    return f"{project.url}/blob/{result.ref}/{result.filename}#L{result.startline}"


def indent_preview(preview: str) -> str:
    return preview.replace("\n", "\n\t\t")


def highlight_term(text: Text, term: str) -> Text:
    """Highlight every case-insensitive occurrence of term in text."""
    if term:
        text.highlight_regex(f"(?i){re.escape(term)}", style="red")
    return text


def summarize(term: str, results: Sequence[ProjectSearchResults]) -> str:
    """One-line summary of a run."""
    if not results:
        return f'No results found for "{term}"'
    return f"Found {total_results(results)} results in {len(results)} project(s)"


def print_search_results(
    term: str, results: Sequence[ProjectSearchResults], out: Console | None = None
) -> None:
    """Print matches grouped by project, followed by the summary line."""
    out = out or console
    for project, matches in results:
        header = Text(project.name, style="bold green")
        if project.archived:
            header.append(" (archived)", style="bold red")
        header.append(":", style="bold green")
        out.print(header, soft_wrap=True)

        for match in matches:
            out.print(Text("\t") + Text(url_to_line_in_file(project, match), style="underline"), soft_wrap=True)
            out.print()
            preview = Text("\t\t" + indent_preview(match.data.rstrip("\n")))
            out.print(highlight_term(preview, term), soft_wrap=True)
        out.print()

    if not results:
        out.print(Text(summarize(term, results), style="yellow"))
    else:
        out.print(Text(summarize(term, results), style="blue"))


def results_to_dict(term: str, results: Sequence[ProjectSearchResults]) -> dict[str, Any]:
    return {
        "term": term,
        "total_results": total_results(results),
        "projects": [
            {
                "id": project.id,
                "name": project.name,
                "url": project.url,
                "archived": project.archived,
                "results": [
                    {
                        "filename": match.filename,
                        "ref": match.ref,
                        "startline": match.startline,
                        "url": url_to_line_in_file(project, match),
                        "data": match.data,
                    }
                    for match in matches
                ],
            }
            for project, matches in results
        ],
    }


def print_json_results(
    term: str, results: Sequence[ProjectSearchResults], out: Console | None = None
) -> None:
    """Print results as JSON for programmatic use."""
    (out or console).print_json(data=results_to_dict(term, results))
