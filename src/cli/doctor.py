"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_get(client: httpx.AsyncClient, url: str) -> tuple[bool, str]:
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        return False, str(exc)
    return response.is_success, f"HTTP {response.status_code}"


async def _run_checks(
    settings: AppSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[tuple[str, bool, str]]:
    """Best-effort connectivity checks against GitHub."""

    repo_url = settings.repo_api_url
    async with build_async_client(settings, transport=transport) as client:
        api_ok, api_detail = await _check_get(client, settings.github_api_base)
        repo_ok, repo_detail = await _check_get(client, repo_url)
        wf_ok, wf_detail = await _check_get(client, f"{repo_url}/actions/workflows/{settings.workflow_file}")

    return [
        ("GitHub API", api_ok, api_detail),
        (f"Repository {settings.github_owner}/{settings.github_repo}", repo_ok, repo_detail),
        (f"Workflow {settings.workflow_file}", wf_ok, wf_detail),
    ]


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="DroidBuilder Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.github_token:
        table.add_row("GitHub token", "OK", "Bearer token configured")
    else:
        table.add_row("GitHub token", "MISSING", "Set GITHUB_TOKEN or run `doctor setup-token`")
    table.add_row("Branch", "OK", settings.github_branch)
    table.add_row("Artifact", "OK", f"{settings.artifact_name} (*{settings.apk_suffix})")

    checks = asyncio.run(_run_checks(settings))
    for name, ok, detail in checks:
        table.add_row(name, "OK" if ok else "FAIL", detail)

    _console.print(table)

    if not all(ok for _, ok, _ in checks):
        _console.print(
            "\n[yellow]Note:[/yellow] 401/404 on the repository usually means the token lacks "
            "`contents` and `actions` permissions."
        )


@app.command(name="setup-token")
def setup_token() -> None:
    """Store the GitHub token in the user config .env."""

    token = typer.prompt("GitHub token", hide_input=True, confirmation_prompt=False).strip()
    if not token:
        raise typer.BadParameter("token is required")

    env_path = write_user_env_vars({"DROIDBUILDER_GITHUB_TOKEN": token})
    _console.print(f"[green]Saved GitHub token to:[/green] {env_path}")
