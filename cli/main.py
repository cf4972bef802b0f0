"""Link checker CLI — entry-point for checking a generated HTML tree.

Usage:
    python cli/main.py --help

Commands:
    check     → build the link graph, validate it, write Report.htm
    resolve   → show the canonical path an href resolves to
    version   → print the package version
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that
# `from linkcheck.xxx import ...` works when the CLI is invoked as
# `python cli/main.py` from any working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
from typing import List, Optional

import typer

from linkcheck import __version__
from linkcheck.config import settings
from linkcheck.errors import ConfigError, ResolutionError
from linkcheck.graph.builder import LinkGraph
from linkcheck.graph.paths import resolve as resolve_href
from linkcheck.options import CheckOptions, load_options

from cli.rendering import render_broken_links, render_summary

app = typer.Typer(
    name="linkcheck",
    help="Check links and fragments in a generated HTML document tree.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------
@app.command("check")
def check(
    html_dirpath: Path = typer.Argument(..., help="Root directory of the HTML tree."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file."),
    onsite_only: bool = typer.Option(False, "--onsite-only", help="Skip off-site links."),
    no_toc: bool = typer.Option(False, "--no-toc", help="Skip links on the table-of-contents page."),
    omit: Optional[List[str]] = typer.Option(None, "--omit", help="Regex of source paths to omit (repeatable)."),
    include: Optional[List[str]] = typer.Option(None, "--include", help="Regex of source paths to include (repeatable)."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", min=1, help="Parallel off-site fetches."),
    strict_status: bool = typer.Option(False, "--strict-status", help="Treat HTTP 4xx/5xx targets as broken."),
    no_report: bool = typer.Option(False, "--no-report", help="Do not write the HTML report."),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON."),
) -> None:
    """Check every link in HTML_DIRPATH; exit 1 if any link is broken."""
    if not html_dirpath.is_dir():
        typer.echo(f"❌ Not a directory: {html_dirpath}")
        raise typer.Exit(code=1)

    try:
        base = load_options(config) if config else CheckOptions()
        options = base.merged(onsite_only=onsite_only, no_toc=no_toc, includes=include, omits=omit)
    except ConfigError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1)

    if strict_status:
        settings.strict_status = True
    if as_json:
        settings.progress = False

    graph = LinkGraph(html_dirpath, options, max_concurrent_fetches=concurrency)
    try:
        counts = graph.check()
    except ResolutionError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1)

    if not no_report:
        from linkcheck.report import write_report

        report_path = write_report(graph, counts, html_dirpath / settings.report_filename)
        if not as_json:
            typer.echo(f"[check] Report written to {report_path}")

    if as_json:
        from linkcheck.report import summarize

        typer.echo(json.dumps(summarize(graph, counts), indent=2))
    else:
        typer.echo("")
        typer.echo(render_summary(counts))
        broken = render_broken_links(graph)
        if broken:
            typer.echo("")
            typer.echo(broken)

    if counts.links_broken:
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------
@app.command("resolve")
def resolve(
    origin_dir: str = typer.Argument(..., help="Directory of the linking page ('' for the root)."),
    href: str = typer.Argument(..., help="The href as written in the page."),
) -> None:
    """Print the canonical path HREF resolves to from ORIGIN_DIR."""
    try:
        typer.echo(resolve_href(origin_dir, href))
    except ResolutionError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1)


@app.command("version")
def version() -> None:
    """Print the package version."""
    typer.echo(__version__)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
