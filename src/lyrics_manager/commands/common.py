"""Helpers shared by the lyrics-manager command groups."""

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import tomllib
import typer
from rich.console import Console

from lyrics_manager.config import LibraryConfig, ensure_config_exists, get_config_path
from lyrics_manager.logging_config import get_logger, setup_logging
from lyrics_manager.services.library import LibraryFile, LibraryFileError
from lyrics_manager.store.catalog import CatalogStore
from lyrics_manager.store.errors import CatalogError, NotFoundError

console = Console()
logger = get_logger(__name__)


def load_config(config_path: Optional[Path]) -> LibraryConfig:
    """Load configuration and start the session log.

    Without an explicit path the default config is used, created if needed.

    Args:
        config_path: Path to config file, or None for the default

    Returns:
        LibraryConfig instance
    """
    try:
        config = LibraryConfig.load(config_path) if config_path else ensure_config_exists()
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config_path}[/red]")
        raise typer.Exit(1)
    except (tomllib.TOMLDecodeError, ValueError, TypeError) as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(1)

    setup_logging(config.log_dir, config.log_level)
    logger.debug(f"Configuration loaded from {config_path or get_config_path()}")
    return config


@contextmanager
def open_library(config: LibraryConfig, save: bool = True) -> Iterator[CatalogStore]:
    """Load the library, yield its store, and write it back on success.

    Store and file errors are reported on the console and end the command
    with exit code 1; nothing is written in that case.

    Args:
        config: Library configuration
        save: Whether to write the library after the block completes
    """
    library = LibraryFile(config.library_path)
    try:
        store = library.load()
        yield store
        if save:
            library.save(store, config.display)
    except NotFoundError as e:
        logger.warning(str(e))
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except (CatalogError, LibraryFileError) as e:
        logger.error(f"Command failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def format_timestamp(nanoseconds: int) -> str:
    """Format a nanosecond timestamp for display."""
    if not nanoseconds:
        return "-"
    return datetime.fromtimestamp(nanoseconds / 1_000_000_000).strftime("%Y-%m-%d %H:%M")
