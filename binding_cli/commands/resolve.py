"""
Resolve command: binding request -> env vars and volume keys
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from binding_engine.cluster.memory import ManifestClusterReader, load_manifests
from binding_engine.config import BindingSettings
from binding_engine.core.errors import BindingError
from binding_engine.logging_config import setup_logging
from binding_engine.metrics import start_metrics_server
from binding_engine.pipeline import resolve_binding
from binding_engine.request import BindingRequest

console = Console()

REQUEST_KIND = "ServiceBindingRequest"


def load_request(path: Path) -> BindingRequest:
    """
    Read the first ServiceBindingRequest document of ``path``.

    Raises:
        BindingError: If the file has no binding request
    """
    docs = load_manifests([path])
    for doc in docs:
        if doc.get("kind") == REQUEST_KIND:
            return BindingRequest.from_object(doc)
    raise BindingError(f"no {REQUEST_KIND} found in {path}")


def _mask(value: str) -> str:
    return "*" * min(len(value), 8) if value else ""


def resolve_command(
    request_file: Path = typer.Argument(..., help="YAML file holding a ServiceBindingRequest"),
    manifests: List[Path] = typer.Option(
        [], "--manifests", "-m", help="YAML files with the cluster objects (offline mode)"
    ),
    live: bool = typer.Option(False, "--live", help="Read objects from the current cluster"),
    kubeconfig: Optional[str] = typer.Option(None, "--kubeconfig", help="Path to kubeconfig (live mode)"),
    context: Optional[str] = typer.Option(None, "--context", help="Kubeconfig context (live mode)"),
    show_values: bool = typer.Option(False, "--show-values", help="Print env var values unmasked"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
    log_format: str = typer.Option("text", "--log-format", help="Log format (json, text)"),
    metrics_port: Optional[int] = typer.Option(None, "--metrics-port", help="Expose Prometheus metrics"),
):
    """
    Resolve a binding request into environment variables and volume keys.

    Examples:
        binding resolve sbr.yaml -m cluster.yaml
        binding resolve sbr.yaml -m cluster.yaml --json --show-values
        binding resolve sbr.yaml --live --context staging
    """
    setup_logging(level=log_level, fmt=log_format)
    if metrics_port:
        start_metrics_server(enabled=True, port=metrics_port)

    try:
        request = load_request(request_file)
        if live:
            from binding_engine.cluster.kube import KubernetesClusterReader

            reader = KubernetesClusterReader.from_config(kubeconfig=kubeconfig, context=context)
        else:
            # the request file may carry the cluster objects too
            reader = ManifestClusterReader.from_files([request_file, *manifests])
        payload = resolve_binding(reader, request, BindingSettings.from_env())
    except FileNotFoundError as e:
        if json_output:
            print(json.dumps({"error": "File not found", "path": e.filename}))
        else:
            console.print(f"[red]Error: File not found:[/red] {e.filename}")
        raise typer.Exit(2)
    except (BindingError, ValueError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    env_vars = {k: v.decode("utf-8") for k, v in sorted(payload.env_vars.items())}

    if json_output:
        output = {
            "envVars": env_vars if show_values else {k: _mask(v) for k, v in env_vars.items()},
            "volumeKeys": payload.volume_keys,
        }
        print(json.dumps(output, indent=2))
        return

    table = Table(title=f"Binding: {request.trace_id}")
    table.add_column("Env Var", style="green")
    table.add_column("Value", style="yellow")
    for key, value in env_vars.items():
        table.add_row(key, value if show_values else _mask(value))
    console.print(table)

    if payload.volume_keys:
        console.print("\n[bold]Volume keys:[/bold]")
        for key in payload.volume_keys:
            console.print(f"  {key}")
    console.print(f"\n[bold]Total env vars:[/bold] {len(env_vars)}")
