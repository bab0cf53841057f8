"""repo-explainer CLI - AI explanations for code and whole repositories.

Usage:
    explainer analyze https://github.com/pallets/flask
    explainer analyze ./my-project.zip --name my-project
    explainer explain snippet.py --detail advanced
    explainer generate "parse a CSV into dicts" --language python
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from urllib.parse import urlsplit

import click
import httpx
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .cache import TTLCache
from .config import DEFAULT_LLM_BASE_URL, DEFAULT_MODEL, Settings
from .errors import ExplainerError, is_rate_limited
from .generator import AnalysisResult
from .logging import configure_logging
from .prompts import DETAIL_LEVELS
from .service import AnalysisService

console = Console()

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."


def _run(ctx: click.Context, command):
    """Run ``command(service)`` on a fresh event loop, mapping errors for the user."""
    settings: Settings = ctx.obj["settings"]
    cache: TTLCache = ctx.obj["cache"]

    async def runner():
        async with AnalysisService.from_settings(settings, cache) as service:
            return await command(service)

    try:
        return asyncio.run(runner())
    except ExplainerError as e:
        if is_rate_limited(e):
            raise click.ClickException(f"{RATE_LIMIT_MESSAGE} ({e})")
        raise click.ClickException(str(e))
    except httpx.HTTPError as e:
        raise click.ClickException(f"Network error: {e}")


def _classify_target(target: str) -> str:
    """One of "github", "archive-url", "archive"."""
    if "github.com/" in target and not target.lower().endswith(".zip"):
        return "github"
    if urlsplit(target).scheme in ("http", "https"):
        return "archive-url"
    path = Path(target)
    if path.is_file():
        return "archive"
    raise click.ClickException(f"Not a GitHub URL or ZIP archive: {target}")


async def _download(url: str, timeout: float) -> bytes:
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        resp = await client.get(url)
        resp.raise_for_status()
        return resp.content


@click.group()
@click.version_option(version=__version__)
@click.option("--api-key", envvar="OPENAI_API_KEY", default=None, help="Model API key")
@click.option("--model", "-m", envvar="EXPLAINER_MODEL", default=DEFAULT_MODEL, show_default=True, help="Model name")
@click.option("--base-url", envvar="EXPLAINER_LLM_BASE_URL", default=DEFAULT_LLM_BASE_URL, show_default=True, help="OpenAI-compatible API base URL")
@click.option("--github-token", envvar="GITHUB_TOKEN", default=None, help="GitHub token (raises rate limits, enables private repos)")
@click.option("--home", envvar="EXPLAINER_HOME", type=click.Path(path_type=Path), default=None, help="Directory for history and staged uploads")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs")
@click.pass_context
def cli(ctx, api_key, model, base_url, github_token, home, verbose):
    """repo-explainer - explain code and analyze repositories with an LLM."""
    configure_logging(verbose=verbose)
    settings = Settings(
        openai_api_key=api_key,
        model=model,
        llm_base_url=base_url,
        github_token=github_token,
    )
    if home is not None:
        settings.home = home
    ctx.obj = {"settings": settings, "cache": TTLCache()}


@cli.command()
@click.argument("targets", nargs=-1, required=True)
@click.option("--name", "-n", default=None, help="Repository name used in prompts")
@click.option("--user", "-u", default=None, help="History owner")
@click.option("--output", "-O", type=click.Path(path_type=Path), default=None, help="Write markdown + JSON here")
@click.option("--json-only", is_flag=True, help="Output raw JSON to stdout (for piping)")
@click.pass_context
def analyze(ctx, targets: tuple[str, ...], name: str | None, user: str | None, output: Path | None, json_only: bool):
    """Analyze repositories and write a technical analysis + user manual.

    Each TARGET is a GitHub URL, a URL of a ZIP archive, or a local ZIP file.
    Repeated GitHub URLs are served from the in-process cache.

    Examples:

        explainer analyze https://github.com/pallets/flask

        explainer analyze ./project.zip --name project
    """
    settings: Settings = ctx.obj["settings"]
    kinds = [(t, _classify_target(t)) for t in targets]

    async def command(service: AnalysisService) -> list[AnalysisResult]:
        results = []
        for target, kind in kinds:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console if not json_only else Console(file=sys.stderr, quiet=True),
                transient=True,
            ) as progress:
                task = progress.add_task(f"Analyzing {target}...", total=None)

                def on_progress(status, current, total):
                    progress.update(task, description=status)

                if kind == "github":
                    result = await service.analyze_github(target, name, user, on_progress)
                elif kind == "archive-url":
                    on_progress(f"Downloading {target}...", 0, 2)
                    data = await _download(target, settings.http_timeout)
                    filename = Path(urlsplit(target).path).name or "repository.zip"
                    result = await service.analyze_upload(data, filename, name, user, on_progress)
                else:
                    path = Path(target)
                    result = await service.analyze_archive(path.read_bytes(), name or path.stem, user, on_progress)
            results.append(result)
        return results

    results = _run(ctx, command)

    if json_only:
        payload = [r.to_dict() for r in results]
        click.echo(json.dumps(payload[0] if len(payload) == 1 else payload, indent=2))
        return

    for result in results:
        _print_analysis(result)
        if output:
            out_dir = output / result.repository_name if len(results) > 1 else output
            _write_output(result, out_dir)
            console.print(f"\n[green]Output written to {out_dir}/[/]")


@cli.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--language", "-l", default="auto", show_default=True, help="Language, or 'auto' to detect")
@click.option("--detail", "-d", type=click.Choice(DETAIL_LEVELS), default="standard", show_default=True)
@click.pass_context
def explain(ctx, source, language: str, detail: str):
    """Explain a code snippet read from SOURCE (default: stdin)."""
    code = source.read()
    if not code.strip():
        raise click.ClickException("Code is required")
    text = _run(ctx, lambda service: service.explain(code, language, detail))
    console.print(Markdown(text))


@cli.command()
@click.argument("description")
@click.option("--language", "-l", required=True, help="Target programming language")
@click.pass_context
def generate(ctx, description: str, language: str):
    """Write LANGUAGE code implementing DESCRIPTION."""
    code = _run(ctx, lambda service: service.generate(description, language))
    click.echo(code)


@cli.command()
@click.option("--user", "-u", default="me", help="Cache key owner")
@click.pass_context
def repos(ctx, user: str):
    """List repositories visible to the GitHub token."""
    items = _run(ctx, lambda service: service.list_repositories(user))

    table = Table(title="GitHub Repositories", show_header=True)
    table.add_column("Repository", style="bold")
    table.add_column("Description")
    table.add_column("URL", style="dim")
    for repo in items:
        table.add_row(repo.get("full_name", ""), (repo.get("description") or "")[:60], repo.get("html_url", ""))
    console.print(table)


@cli.command()
@click.option("--user", "-u", default=None, help="History owner")
@click.option("--limit", default=10, show_default=True)
@click.pass_context
def history(ctx, user: str | None, limit: int):
    """Show the most recent analyses."""
    async def command(service: AnalysisService):
        return service.list_history(user, limit=limit)

    results = _run(ctx, command)
    if not results:
        console.print("[yellow]No analyses yet. Run: explainer analyze <repo>[/]")
        return

    table = Table(title="Recent Analyses", show_header=True)
    table.add_column("ID", style="bold")
    table.add_column("Repository")
    table.add_column("Files", justify="right")
    table.add_column("Created", style="dim")
    for r in results:
        table.add_row(r.id or "", r.repository_name, f"{r.analyzed_files}/{r.total_files}", r.created_at or "")
    console.print(table)


@cli.command()
@click.argument("analysis_id")
@click.option("--user", "-u", default=None, help="History owner")
@click.pass_context
def show(ctx, analysis_id: str, user: str | None):
    """Print a stored analysis."""
    async def command(service: AnalysisService):
        return service.get_analysis(analysis_id, user)

    result = _run(ctx, command)
    if result is None:
        raise click.ClickException(f"Analysis not found: {analysis_id}")
    _print_analysis(result)


@cli.command()
@click.argument("language")
@click.pass_context
def sample(ctx, language: str):
    """Print a built-in code sample for LANGUAGE."""
    async def command(service: AnalysisService):
        return service.get_sample(language)

    code = _run(ctx, command)
    if not code:
        raise click.ClickException(f"No sample available for {language}")
    click.echo(code)


def _print_analysis(result: AnalysisResult) -> None:
    console.print()
    console.print(Panel.fit(
        f"[bold green]{result.repository_name}[/]\n"
        f"Analyzed {result.analyzed_files} of {result.total_files} files"
        + (f" | id {result.id}" if result.id else ""),
        border_style="green",
        title="Repository Analysis",
    ))
    console.print(Markdown(result.technical_analysis))
    console.print()
    console.print(Panel.fit("[bold cyan]User Manual[/]", border_style="cyan"))
    console.print(Markdown(result.user_manual))


def _write_output(result: AnalysisResult, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    (out_dir / "technical-analysis.md").write_text(result.technical_analysis)
    (out_dir / "user-manual.md").write_text(result.user_manual)
    (out_dir / "analysis.json").write_text(json.dumps(result.to_dict(), indent=2))


if __name__ == "__main__":
    cli()
