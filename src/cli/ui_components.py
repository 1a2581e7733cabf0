"""Componentes de UI para CLI (Rich).

Separa los detalles visuales de la lógica de comandos.
"""

from __future__ import annotations

from pathlib import Path

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import BuildResult


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("DroidBuilder", style="bold cyan")
    subtitle = Text("Remote APK builds • GitHub Actions", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_result_table(result: BuildResult, output: Path) -> Table:
    table = Table(title="Build result")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Run", str(result.run.id))
    table.add_row("Conclusion", result.run.conclusion or "-")
    table.add_row("Run URL", result.run.html_url or "-")
    table.add_row("Source commit", result.commit_sha or "-")
    table.add_row("APK entry", result.apk.entry_name)
    table.add_row("Size", f"{len(result.apk.content):,} bytes")
    table.add_row("Saved to", str(output))
    return table
