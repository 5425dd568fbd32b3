"""Command-line interface for SocialScope."""

import asyncio

import typer
from rich.console import Console

from socialscope.client.status_client import ScrapeStatusClient, ScrapeStatusClientError
from socialscope.client.status_poller import ProgressUpdate, StatusPoller
from socialscope.config import settings
from socialscope.domain.enums.scrape_status import ScrapeStatus
from socialscope.infrastructure.logging.setup import configure_logging

app = typer.Typer(
    name="socialscope",
    help="Launch and follow social profile scrapes",
    add_completion=False,
)
console = Console()


def render_update(update: ProgressUpdate) -> str:
    if update.timed_out:
        return f"[yellow]⏱ {update.stage}[/yellow] ({update.error})"
    if update.status is ScrapeStatus.FAILED:
        return f"[red]✗ {update.stage}[/red]: {update.error or 'unknown error'}"
    if update.status is ScrapeStatus.COMPLETED:
        return f"[green]✓ {update.stage}[/green] {update.progress}%"
    return f"[cyan]… {update.stage}[/cyan] {update.progress}%"


async def _watch(client: ScrapeStatusClient, profile_id: str, interval: float, timeout: float) -> ProgressUpdate | None:
    poller = StatusPoller(client.fetcher(profile_id), interval=interval, timeout=timeout)
    return await poller.run(lambda update: console.print(render_update(update)))


def _exit_code(update: ProgressUpdate | None) -> int:
    if update is not None and update.status is ScrapeStatus.COMPLETED:
        return 0
    return 1


@app.callback()
def main() -> None:
    """socialscope - social profile scrape orchestration."""
    configure_logging()


@app.command()
def launch(
    platform: str = typer.Argument(..., help="instagram or linkedin"),
    handle: str = typer.Argument(..., help="Instagram username or LinkedIn profile URL"),
    profile_id: str = typer.Option(..., "--profile", "-p", help="Profile id to scrape into"),
    user_id: str = typer.Option(..., "--user", "-u", help="Owning user id"),
    watch: bool = typer.Option(True, "--watch/--no-watch", help="Follow progress after launch"),
    interval: float = typer.Option(settings.status_poll_interval_seconds, "--interval", "-i"),
    timeout: float = typer.Option(settings.status_poll_timeout_seconds, "--timeout", "-t"),
):
    """Start a scrape for an existing profile."""
    client = ScrapeStatusClient(user_id)
    try:
        result = asyncio.run(client.launch(platform=platform, handle=handle, profile_id=profile_id))
    except ScrapeStatusClientError as exc:
        console.print(f"[red]✗ Launch failed:[/red] {exc}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Run [bold]{result['runId']}[/bold] started for {result['handle']}")
    if watch:
        last = asyncio.run(_watch(client, profile_id, interval, timeout))
        raise typer.Exit(_exit_code(last))


@app.command()
def watch(
    profile_id: str = typer.Argument(..., help="Profile id to follow"),
    user_id: str = typer.Option(..., "--user", "-u", help="Owning user id"),
    interval: float = typer.Option(settings.status_poll_interval_seconds, "--interval", "-i"),
    timeout: float = typer.Option(settings.status_poll_timeout_seconds, "--timeout", "-t"),
):
    """Poll a profile's scrape status until it finishes or the timeout passes."""
    client = ScrapeStatusClient(user_id)
    last = asyncio.run(_watch(client, profile_id, interval, timeout))
    raise typer.Exit(_exit_code(last))


if __name__ == "__main__":
    app()
