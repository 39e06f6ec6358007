"""Command-line interface using Typer."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from audio_clipper import __version__
from audio_clipper.logging import setup_logging

# Setup logging
setup_logging()

app = typer.Typer(
    name="audio-clipper",
    help="Audio Clipper - cut named clips out of long audio",
    add_completion=False,
)

console = Console()

STATUS_STYLES = {
    "pending": "dim",
    "processing": "yellow",
    "completed": "green",
    "error": "red",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Audio Clipper v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Audio Clipper - extract many named clips from one source."""
    pass


def parse_selection_option(value: str) -> tuple[str, str, str]:
    """Parse ``START-END=Title`` into its three parts.

    Raises:
        typer.BadParameter: If the value is not in that form.
    """
    time_range, sep, title = value.partition("=")
    start, dash, end = time_range.partition("-")
    if not sep or not dash or not title.strip():
        raise typer.BadParameter(f"Expected START-END=Title, got {value!r}")
    return start.strip(), end.strip(), title.strip()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Run the HTTP API server."""
    import uvicorn

    from audio_clipper.config import settings

    uvicorn.run(
        "audio_clipper.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload or settings.api_reload,
    )


@app.command()
def probe(reference: str = typer.Argument(..., help="Remote media URL")) -> None:
    """Check a remote reference and show what it contains."""
    from audio_clipper.services.container import build_services
    from audio_clipper.utils.async_utils import run_async

    services = build_services()

    async def _probe():
        if not await services.orchestrator.validate_source_reference(reference):
            return None
        return await services.orchestrator.describe_source(reference)

    try:
        info = run_async(_probe())
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1)

    if info is None:
        console.print(f"[bold red]✗ Invalid or inaccessible reference: {reference}[/bold red]")
        raise typer.Exit(code=1)

    console.print(
        Panel(
            f"[bold]{info.title}[/bold]\n"
            f"Duration: {info.duration}s\n"
            f"Channel: {info.channel or '-'}",
            title="✓ Source",
            border_style="green",
        )
    )


@app.command()
def clip(
    reference: str = typer.Argument(..., help="Remote media URL"),
    selection: list[str] = typer.Option(
        ...,
        "--selection",
        "-s",
        help='Clip to cut, as START-END=Title (e.g. "0:10-0:45=Intro"). Repeatable.',
    ),
    poll_interval: float = typer.Option(0.5, "--poll-interval", help="Seconds between status checks"),
) -> None:
    """Cut clips out of a remote source and wait for them to finish."""
    from audio_clipper.domain.enums import SourceOrigin
    from audio_clipper.domain.models import ProcessingRequest, SelectionSpec
    from audio_clipper.domain.timecodes import format_timecode
    from audio_clipper.services.container import build_services
    from audio_clipper.utils.async_utils import run_async

    specs = [SelectionSpec(*parse_selection_option(value)) for value in selection]
    services = build_services()

    async def _clip():
        result = await services.orchestrator.submit_processing_request(
            ProcessingRequest(
                origin=SourceOrigin.REMOTE_URL,
                remote_reference=reference,
                selections=specs,
            )
        )
        console.print(f"[green]Job created: {result.job_id}[/green]")

        last_progress = -1
        while True:
            view = await services.orchestrator.get_job_status(result.job_id)
            if view.job.progress != last_progress:
                last_progress = view.job.progress
                console.print(f"[dim]{view.job.status}: {view.job.progress}%[/dim]")
            if view.job.status.is_terminal:
                break
            await asyncio.sleep(poll_interval)

        await services.wait_for_idle()
        return view

    try:
        view = run_async(_clip())
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1)

    if view.job.error:
        console.print(f"[bold red]✗ Job failed: {view.job.error}[/bold red]")
        raise typer.Exit(code=1)

    table = Table(title=view.source.title)
    table.add_column("Title", style="cyan")
    table.add_column("Range")
    table.add_column("Status")
    table.add_column("File")

    for item in view.selections:
        style = STATUS_STYLES.get(str(item.status), "")
        table.add_row(
            item.title,
            f"{format_timecode(item.start_time)}-{format_timecode(item.end_time)}",
            f"[{style}]{item.status}[/{style}]" if style else str(item.status),
            item.file_path or "-",
        )

    console.print(table)


if __name__ == "__main__":
    app()
