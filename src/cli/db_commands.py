"""Database CLI commands."""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from src.order_manager.core.services import OrderService
from src.order_manager.runtime.init_db import init_db

from .utils import activate_config, console, get_database_service

db_app = typer.Typer(help="Database commands")

ConfigPath = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config.yaml", exists=True, dir_okay=False),
]


@db_app.command("init")
def init(config: ConfigPath = None) -> None:
    """Create the tables and seed the product catalogue. Safe to re-run."""
    activate_config(config)
    try:
        database_service = init_db(get_database_service())
    except Exception as e:
        console.print(f"[red]Failed to initialize the database: {e}[/red]")
        raise typer.Exit(code=1) from e

    database_service.dispose()
    console.print("[green]Database initialized[/green]")


@db_app.command("products")
def products(config: ConfigPath = None) -> None:
    """Print the product catalogue."""
    activate_config(config)
    database_service = get_database_service()
    try:
        catalogue = OrderService(database_service).list_products()
    finally:
        database_service.dispose()

    if not catalogue:
        console.print("[yellow]No products found. Run 'db init' first.[/yellow]")
        return

    table = Table(title="Products", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Description")

    for product in catalogue:
        table.add_row(
            str(product.id), product.product_name, product.product_description or ""
        )

    console.print(table)


@db_app.command("orders")
def orders(config: ConfigPath = None) -> None:
    """Print every order with the names of its products."""
    activate_config(config)
    database_service = get_database_service()
    try:
        all_orders = OrderService(database_service).list_orders()
    finally:
        database_service.dispose()

    if not all_orders:
        console.print("[yellow]No orders found[/yellow]")
        return

    table = Table(title="Orders", show_header=True, header_style="bold blue")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Description", style="green")
    table.add_column("Created", style="magenta")
    table.add_column("Products")

    for order in all_orders:
        table.add_row(
            str(order.id),
            order.order_description,
            order.created_at.isoformat(timespec="seconds"),
            ", ".join(p.product_name for p in order.products) or "-",
        )

    console.print(table)
    console.print(f"\n[green]Found {len(all_orders)} orders[/green]")
