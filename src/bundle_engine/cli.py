"""Typer CLI for Bundle-Engine."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="bundle-engine", help="Bundle-Engine: bundle entitlement and progress tracking")
console = Console()


def _load_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Error:[/bold red] cannot read {path}: {e}")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        console.print(f"[bold red]Error:[/bold red] {path} must contain a JSON object")
        raise typer.Exit(1)
    return data


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the Bundle-Engine API server."""
    import uvicorn
    from bundle_engine.app import create_app
    from bundle_engine.common.config import get_settings
    from bundle_engine.common.logging import setup_logging

    setup_logging(get_settings().log_level)
    console.print(f"[bold green]Starting Bundle-Engine on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command()
def progress(
    path: Path = typer.Argument(..., help="JSON file with subscription, bundle and deliveries"),
):
    """Compute a progress snapshot offline from a JSON file."""
    from bundle_engine.deps import get_progress_service
    from bundle_engine.progress.schemas import ProgressRequest

    data = _load_json(path)
    try:
        request = ProgressRequest.model_validate(data)
    except ValueError as e:
        console.print(f"[bold red]Invalid input:[/bold red] {e}")
        raise typer.Exit(1)

    snapshot = get_progress_service().snapshot(
        request.subscription, request.bundle, request.deliveries,
    )

    table = Table(title=snapshot.bundle_title)
    table.add_column("")
    table.add_column("Used", justify="right")
    table.add_column("Included", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Progress", justify="right")
    table.add_row(
        "Sessions", str(snapshot.sessions_used), str(snapshot.sessions_included),
        str(snapshot.sessions_remaining), f"{snapshot.sessions_progress_pct}%",
    )
    table.add_row(
        "Products", str(snapshot.products_used), str(snapshot.products_included),
        str(snapshot.products_remaining), f"{snapshot.products_progress_pct}%",
    )
    console.print(table)
    for alert in snapshot.alerts:
        console.print(f"[bold yellow]![/bold yellow] {alert}")


@app.command()
def parse(
    path: Path = typer.Argument(..., help="JSON file with a bundle record"),
):
    """Show the products, services and goals parsed from a bundle."""
    from bundle_engine.deps import get_progress_service

    described = get_progress_service().describe_bundle(_load_json(path))

    console.print(f"[bold]Products[/bold] ({described['products_included']} included)")
    for product in described["products"]:
        console.print(f"  {product['quantity']} x {product['name']}")
    console.print(f"[bold]Services[/bold] ({described['sessions_included']} sessions)")
    for service in described["services"]:
        console.print(f"  {service['sessions']} x {service['name']}")
    console.print("[bold]Goals[/bold]")
    for goal in described["goals"]:
        console.print(f"  {goal}")


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Bundle-Engine server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] - v{data['version']}")
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
