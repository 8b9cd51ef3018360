"""Shared utilities for CLI commands."""

from pathlib import Path

from rich.console import Console

from src.order_manager.core.services import DbSessionService
from src.order_manager.runtime.context import load_config, set_config

# Initialize Rich console for colored output
console = Console()


def activate_config(config_path: Path | None) -> None:
    """Load the configuration file given on the command line, if any."""
    if config_path is not None:
        set_config(load_config(config_path))


def get_database_service() -> DbSessionService:
    """Database service built from the active configuration."""
    return DbSessionService()
