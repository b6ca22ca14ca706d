"""CLI interface for stack-discovery."""

import asyncio
import json
import logging
from collections.abc import Sequence

import typer
from rich.console import Console
from rich.table import Table

from stack_discovery.categorization.category_rules import DEFAULT_CATEGORY_RULES
from stack_discovery.engine import DiscoveryEngine
from stack_discovery.exceptions import DiscoveryError
from stack_discovery.models.model_dto import DiscoveryToolDto, SourceStatus

app = typer.Typer(
    name="stack-discovery",
    help="Stack Discovery - Find trending tools across npm, PyPI, GitHub and Docker Hub",
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _split(value: str | None) -> list[str]:
    """Parse a comma-separated option."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _get_score_color(score: float) -> str:
    """Get color for score display."""
    if score >= 70:
        return "green"
    elif score >= 40:
        return "yellow"
    else:
        return "red"


def _truncate(text: str | None, max_len: int = 50) -> str:
    """Truncate text with ellipsis."""
    text = text or ""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def create_engine(sources: Sequence[str] | None = None) -> DiscoveryEngine:
    """Build the engine used by the commands."""
    config = {"enabled_sources": list(sources)} if sources else None
    return DiscoveryEngine(config=config)


def _print_json(tools: list[DiscoveryToolDto]) -> None:
    typer.echo(json.dumps([tool.model_dump(mode="json") for tool in tools], indent=2))


def _print_tools(title: str, tools: list[DiscoveryToolDto], show_relevance: bool = False) -> None:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Source", style="magenta")
    table.add_column("Category")
    if show_relevance:
        table.add_column("Relevance", justify="right")
    table.add_column("Popularity", justify="right")
    table.add_column("Quality", justify="right")
    table.add_column("Pricing")
    table.add_column("Description")

    for i, tool in enumerate(tools, 1):
        popularity = tool.metrics.popularity
        quality = tool.metrics.quality
        row = [str(i), tool.name, tool.provenance.source_type, tool.category]
        if show_relevance:
            row.append(f"{tool.metrics.relevance or 0:.0f}")
        row += [
            f"[{_get_score_color(popularity)}]{popularity:.1f}[/{_get_score_color(popularity)}]",
            f"[{_get_score_color(quality)}]{quality:.1f}[/{_get_score_color(quality)}]",
            tool.badges.pricing,
            _truncate(tool.description),
        ]
        table.add_row(*row)

    console.print(table)


def _print_statuses(statuses: list[SourceStatus]) -> None:
    failed = [s for s in statuses if not s.ok]
    for status in failed:
        console.print(f"[yellow]Warning:[/yellow] {status.source} unavailable: {status.error}")


@app.command()
def trending(
    category: str = typer.Option(None, "--category", "-c", help="Comma-separated categories"),
    sources: str = typer.Option(None, "--sources", "-s", help="Comma-separated sources"),
    limit: int = typer.Option(20, "--limit", "-l", help="Number of results"),
    min_popularity: float = typer.Option(0.0, "--min-popularity", help="Popularity floor (0-100)"),
    include_prerelease: bool = typer.Option(
        False, "--include-prerelease", help="Keep pre-release versions"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print DTOs as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Show trending tools across the enabled sources."""
    _configure_logging(verbose)

    async def _run() -> tuple[list[DiscoveryToolDto], list[SourceStatus]]:
        async with create_engine(_split(sources)) as engine:
            tools = await engine.discover_trending_tools(
                config={
                    "max_tools_per_source": limit,
                    "min_popularity_threshold": min_popularity,
                    "include_prerelease": include_prerelease,
                },
                categories=_split(category) or None,
            )
            return tools, engine.last_source_statuses

    try:
        tools, statuses = asyncio.run(_run())
    except DiscoveryError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        _print_json(tools)
        return

    _print_statuses(statuses)
    if not tools:
        console.print("[yellow]No trending tools found.[/yellow]")
        return
    _print_tools(f"Trending Tools ({len(tools)})", tools)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    sources: str = typer.Option(None, "--sources", "-s", help="Comma-separated sources"),
    limit: int = typer.Option(20, "--limit", "-l", help="Number of results"),
    as_json: bool = typer.Option(False, "--json", help="Print DTOs as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Search tools by name, description and keywords."""
    _configure_logging(verbose)

    async def _run() -> tuple[list[DiscoveryToolDto], list[SourceStatus]]:
        async with create_engine() as engine:
            tools = await engine.search_tools(
                query,
                source_types=_split(sources) or None,
                config={"max_tools_per_source": limit},
            )
            return tools, engine.last_source_statuses

    try:
        tools, statuses = asyncio.run(_run())
    except DiscoveryError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        _print_json(tools)
        return

    _print_statuses(statuses)
    if not tools:
        console.print(f"[yellow]No results found for '{query}'[/yellow]")
        return
    _print_tools(f"Search Results for '{query}'", tools, show_relevance=True)


@app.command()
def recommend(
    stack: str = typer.Option("", "--stack", help="Comma-separated tools you already use"),
    categories: str = typer.Option("", "--categories", help="Comma-separated preferred categories"),
    languages: str = typer.Option("", "--languages", help="Comma-separated languages"),
    team_size: str = typer.Option(
        None, "--team-size", help="solo, small, medium, large or enterprise"
    ),
    industry: str = typer.Option(None, "--industry", help="e.g. fintech, healthcare"),
    as_json: bool = typer.Option(False, "--json", help="Print the response as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Recommend tools for your stack."""
    _configure_logging(verbose)

    async def _run():
        async with create_engine() as engine:
            return await engine.generate_recommendations(
                _split(stack),
                _split(categories),
                _split(languages),
                team_size=team_size,
                industry=industry,
            )

    try:
        response = asyncio.run(_run())
    except DiscoveryError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(response.model_dump_json(indent=2))
        return

    if not response.recommendations:
        console.print("[yellow]No recommendations found.[/yellow]")
        return

    _print_tools("Recommendations", response.recommendations)
    console.print(f"\n[bold]Confidence:[/bold] {response.confidence_score:.0f}/100")
    for reason in response.reasoning:
        console.print(f"  - {reason}")


@app.command()
def rules() -> None:
    """List the category rules used for classification."""
    table = Table(title="Category Rules")
    table.add_column("Category", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Priority", justify="right")
    table.add_column("Keywords")
    table.add_column("Languages")

    for rule in DEFAULT_CATEGORY_RULES:
        table.add_row(
            rule.name,
            f"{rule.weight:.1f}",
            str(rule.priority),
            _truncate(", ".join(rule.keywords), 60),
            ", ".join(rule.languages) or "-",
        )

    console.print(table)


if __name__ == "__main__":
    app()
