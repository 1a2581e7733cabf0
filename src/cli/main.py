"""CLI principal (Typer).

Comandos:
- `serve`: levanta la API HTTP con uvicorn.
- `build`: ejecuta el pipeline completo para un zip local.
- `doctor`: diagnósticos de entorno (ver `cli.doctor`).
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx
import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from adapters.github_actions import GitHubActionsClient
from api.app import APK_FILENAME, create_app
from cli import doctor
from cli.ui_components import build_result_table, print_banner
from core.config import AppSettings
from core.domain.errors import BuildError, WorkflowFailedError
from core.domain.models import WorkflowRun
from core.logging_config import configure_logging
from core.services.build_pipeline import PipelineHooks, build_apk

app = typer.Typer(no_args_is_help=True, help="Build Android APKs through GitHub Actions.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
logger = logging.getLogger(__name__)

_STAGE_LABELS = {
    "publish": "Uploading source archive",
    "dispatch": "Triggering workflow",
    "poll": "Waiting for workflow run",
    "fetch": "Downloading artifact",
}


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Interface to bind (default from settings)."),
    port: int | None = typer.Option(None, help="Port to listen on (default PORT or 4000)."),
) -> None:
    """Run the HTTP API."""

    settings = AppSettings()
    configure_logging(settings.log_level, console=_console)

    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Backend listening on port %d", bind_port)
    uvicorn.run(create_app(settings), host=bind_host, port=bind_port, log_config=None)


@app.command()
def build(
    archive: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Zipped Android project."),
    output: Path = typer.Option(Path(APK_FILENAME), "--output", "-o", help="Where to write the APK."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide the banner and progress."),
) -> None:
    """Build a local project archive remotely and save the resulting APK."""

    settings = AppSettings()
    configure_logging("WARNING" if quiet else settings.log_level, console=_console)
    if not quiet:
        print_banner(_console)

    if not settings.github_token:
        _console.print("[yellow]GITHUB_TOKEN is not set; GitHub will reject the upload.[/yellow]")

    with _console.status("Starting", spinner="dots") as status:

        def on_stage(name: str) -> None:
            status.update(_STAGE_LABELS.get(name, name))

        def on_poll(attempt: int, total: int, run: WorkflowRun | None) -> None:
            state = "no run yet" if run is None else run.status
            status.update(f"{_STAGE_LABELS['poll']} ({attempt}/{total}, {state})")

        hooks = PipelineHooks(stage=on_stage, poll=on_poll) if not quiet else None

        async def _run():
            async with GitHubActionsClient(settings) as host:
                return await build_apk(host=host, settings=settings, archive=archive.read_bytes(), hooks=hooks)

        try:
            result = asyncio.run(_run())
        except WorkflowFailedError as exc:
            _console.print(f"[red]{exc}[/red] conclusion={exc.run.conclusion} {escape(exc.run.html_url or '')}")
            raise typer.Exit(code=1) from exc
        except (BuildError, httpx.HTTPError, ValidationError) as exc:
            _console.print(f"[red]Build failed:[/red] {escape(str(exc))}")
            raise typer.Exit(code=1) from exc

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.apk.content)

    if not quiet:
        _console.print(build_result_table(result, output))
    else:
        _console.print(str(output))


def run() -> None:
    app()
