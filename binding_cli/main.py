#!/usr/bin/env python3
"""
Binding CLI

Main entrypoint for the binding command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from binding_cli.commands import classify, resolve

app = typer.Typer(
    name="binding",
    help="Service binding resolution CLI",
    add_completion=False,
)

console = Console()

app.command(name="resolve")(resolve.resolve_command)
app.command(name="classify")(classify.classify_command)


@app.command()
def version():
    """Show version information."""
    from binding_cli import __version__
    from binding_engine import __version__ as engine_version

    table = Table(show_header=False, box=None)
    table.add_row("[bold]Binding CLI[/bold]", f"v{__version__}")
    table.add_row("Engine", f"v{engine_version}")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
