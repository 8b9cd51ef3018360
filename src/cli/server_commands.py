"""Server CLI commands."""

import os
from pathlib import Path

import typer
import uvicorn
from rich.panel import Panel

from src.order_manager.runtime.context import get_config

from .utils import activate_config, console


def serve(
    host: str | None = typer.Option(None, help="Host to bind (default: app.host)"),
    port: int | None = typer.Option(None, help="Port to bind (default: app.port)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to config.yaml", exists=True, dir_okay=False
    ),
) -> None:
    """Run the orders API with uvicorn."""
    if config is not None:
        # Reload workers are fresh processes and find the file through the env
        os.environ["ORDER_MANAGER_CONFIG"] = str(config)
        activate_config(config)

    app_config = get_config().app
    host = host or app_config.host
    port = port or app_config.port

    console.print(
        Panel.fit(
            "[bold green]Starting Order Manager API[/bold green]",
            border_style="green",
        )
    )
    console.print(f"[blue]Server will be available at:[/blue] http://{host}:{port}")
    console.print("[dim]Press Ctrl+C to stop the server[/dim]")

    uvicorn.run(
        "src.order_manager.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=get_config().logging.level.lower(),
    )
