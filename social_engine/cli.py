"""Command-line interface for operating the social engine against a live backend."""

import asyncio
import json
from typing import Optional

import typer
from typing_extensions import Annotated

from social_engine.backend import RestBackend
from social_engine.config import get_settings
from social_engine.core.formatting import format_count
from social_engine.core.health_check import generate_migration_script, run_health_check
from social_engine.core.social_client import SocialMutationClient
from social_engine.models.dtos import HealthReport, HealthStatus, SocialStats
from social_engine.utils.logging import setup_logging

app = typer.Typer(help="Social Engine - inspect interaction stats and backend schema health")

STATUS_MARKERS = {
    HealthStatus.HEALTHY: "OK  ",
    HealthStatus.WARNING: "WARN",
    HealthStatus.ERROR: "FAIL",
}


async def collect_health_report() -> HealthReport:
    async with RestBackend() as backend:
        return await run_health_check(backend)


async def fetch_stats(item_id: str, actor_id: Optional[str]) -> Optional[SocialStats]:
    async with RestBackend() as backend:
        client = SocialMutationClient(backend)
        return await client.get_stats(item_id, actor_id)


def render_report(report: HealthReport) -> str:
    lines = []
    for result in report.results:
        lines.append(f"[{STATUS_MARKERS[result.status]}] {result.table}: {result.status.value}")
        if result.issue:
            lines.append(f"       Issue: {result.issue}")
        if result.recommendation:
            lines.append(f"       Fix: {result.recommendation}")
    counts = report.counts
    lines.append(
        f"{counts['healthy']} healthy, {counts['warning']} warning, {counts['error']} error"
    )
    return "\n".join(lines)


def render_stats(stats: SocialStats) -> str:
    return "\n".join([
        f"likes:     {format_count(stats.likes)}{' (liked)' if stats.user_liked else ''}",
        f"comments:  {format_count(stats.comments)}",
        f"reposts:   {format_count(stats.reposts)}{' (reposted)' if stats.user_reposted else ''}",
        f"bookmarks: {format_count(stats.bookmarks)}{' (bookmarked)' if stats.user_bookmarked else ''}",
    ])


@app.command()
def health_check(
    migration: Annotated[bool, typer.Option("--migration", "-m", help="Print a SQL migration for fixable issues")] = False,
    loglevel: Annotated[str, typer.Option("--loglevel", "-l", help="Logging level")] = "WARNING",
) -> None:
    """
    Probe every table the engine reads and report its schema health.

    Exits with status 1 when any table is in error.
    """
    setup_logging(loglevel)
    report = asyncio.run(collect_health_report())
    typer.echo(render_report(report))

    if migration:
        typer.echo("")
        typer.echo(generate_migration_script(report))

    if not report.healthy:
        raise typer.Exit(code=1)


@app.command()
def stats(
    item_id: Annotated[str, typer.Argument(help="Content item identifier")],
    actor: Annotated[Optional[str], typer.Option("--actor", "-a", help="Actor identifier for the user_* flags")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print raw stats as JSON")] = False,
    loglevel: Annotated[str, typer.Option("--loglevel", "-l", help="Logging level")] = "WARNING",
) -> None:
    """Print the social counters of one content item."""
    setup_logging(loglevel)
    result = asyncio.run(fetch_stats(item_id, actor))

    if result is None:
        typer.echo(f"No stats available for {item_id}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.model_dump(), indent=2))
    else:
        typer.echo(render_stats(result))


@app.command()
def config() -> None:
    """Show the effective configuration (API key masked)."""
    settings = get_settings()
    data = settings.model_dump()
    if data.get("backend_api_key"):
        data["backend_api_key"] = "***"
    typer.echo(json.dumps(data, indent=2, default=str))


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
