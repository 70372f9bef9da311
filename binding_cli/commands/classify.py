"""
Classify command: show how binding annotations are understood
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from binding_engine.annotations.binding import classify
from binding_engine.cluster.memory import load_manifests
from binding_engine.config import BindingSettings
from binding_engine.core.errors import ClassificationError

console = Console()


def classify_command(
    manifest: Path = typer.Argument(..., help="YAML file with annotated objects"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Classify every annotation of every object in a manifest.

    Examples:
        binding classify database.yaml
        binding classify database.yaml --json
    """
    try:
        docs = load_manifests([manifest])
    except FileNotFoundError:
        if json_output:
            print(json.dumps({"error": "File not found", "path": str(manifest)}))
        else:
            console.print(f"[red]Error: File not found:[/red] {manifest}")
        raise typer.Exit(2)

    prefix = BindingSettings.from_env().annotation_prefix
    rows = []
    for doc in docs:
        meta = doc.get("metadata") or {}
        obj = f"{doc.get('kind')}/{meta.get('name')}"
        for key, value in sorted((meta.get("annotations") or {}).items()):
            try:
                spec = classify(key, value, prefix)
                rows.append({
                    "object": obj,
                    "key": key,
                    "outcome": spec.kind.value,
                    "reference": spec.reference_path,
                    "source": spec.source,
                })
            except ClassificationError as e:
                rows.append({
                    "object": obj,
                    "key": key,
                    "outcome": e.kind.value,
                    "reference": "",
                    "source": "",
                })

    if json_output:
        print(json.dumps({"annotations": rows, "count": len(rows)}, indent=2))
        return

    table = Table(title=f"Annotations: {manifest}")
    table.add_column("Object", style="cyan")
    table.add_column("Key", style="green")
    table.add_column("Outcome", style="yellow")
    table.add_column("Reference")
    table.add_column("Source", style="dim")
    for row in rows:
        table.add_row(row["object"], row["key"], row["outcome"], row["reference"], row["source"])
    console.print(table)
