"""
Main CLI application
"""
import socket
from pathlib import Path
from typing import List, Optional

import typer

from ...core.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_TARGET_DIR,
    ENV_HOSTNAME,
    ENV_REPO_DIR,
    ENV_TAGS,
    ENV_TARGET_DIR,
)
from ...core.logging import setup_logging, get_logger
from ...core.utils import expand_path
from ...domain.package import Args
from .packages import register_package_commands

logger = get_logger(__name__)

# Create main app
app = typer.Typer(
    name="dotlayer",
    add_completion=False,
    help="Layered dotfile manager: link package files into a target directory",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_package_commands(app)


@app.callback()
def main(
    ctx: typer.Context,
    repo_dir: str = typer.Option(
        ".", "--dir", "-d", envvar=ENV_REPO_DIR, help="Repository directory holding the packages"
    ),
    target_dir: str = typer.Option(
        DEFAULT_TARGET_DIR, "--target", "-t", envvar=ENV_TARGET_DIR,
        help="Default target directory when no settings.toml selects one",
    ),
    hostname: Optional[str] = typer.Option(
        None, "--hostname", "-H", envvar=ENV_HOSTNAME,
        help="Host tier to use (defaults to this machine's hostname)",
    ),
    tags: Optional[List[str]] = typer.Option(
        None, "--tag", "-T", envvar=ENV_TAGS,
        help="Active tag; repeat for several, earlier tags take precedence for files",
    ),
    test: bool = typer.Option(
        False, "--test", help="Show what would happen without touching files or running hooks"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite/remove conflicting entries"
    ),
    no_confirm: bool = typer.Option(
        False, "--no-confirm", "-y", help="Do not ask before processing each package"
    ),
    log_level: str = typer.Option(
        DEFAULT_LOG_LEVEL,
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
):
    """
    dotlayer - layered dotfile manager

    Use subcommands to perform different operations:
    - install: Link package files (global, tag and host tiers) into the target
    - uninstall: Remove links that point into a package
    - add: Move a file into a package and link it back
    """
    setup_logging(level=log_level, log_file=log_file)

    ctx.obj = Args(
        repo_dir=expand_path(repo_dir),
        target_dir=expand_path(target_dir),
        hostname=hostname or socket.gethostname(),
        tags=list(tags or []),
        test=test,
        force=force,
        no_confirm=no_confirm,
    )
    logger.debug(f"Arguments: {ctx.obj}")


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
