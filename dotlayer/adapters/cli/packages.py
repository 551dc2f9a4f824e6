"""
Package CLI commands: install, uninstall, add
"""
import dataclasses
from pathlib import Path
from typing import Callable, List, Optional

import typer
from rich.markup import escape

from ...core.exceptions import ConfigError, DotlayerError
from ...core.logging import get_logger, get_stderr_console
from ...core.utils import expand_path
from ...domain.package import Args, PackageService
from ...adapters.cli.prompts import RichPromptProvider
from ...adapters.config.loader import SettingsLoader

logger = get_logger(__name__)
stderr_console = get_stderr_console()
prompt_provider = RichPromptProvider()


def register_package_commands(app: typer.Typer) -> None:
    """Register package commands directly on the main app"""
    app.command(name="install")(install_run)
    app.command(name="uninstall")(uninstall_run)
    app.command(name="add")(add_run)


def _announce(action: str, name: str, repo_path: Path, target_path: Path) -> None:
    if action == "install":
        prompt_provider.info(f"Installing package {name}")
        prompt_provider.info(f"Will install from {repo_path}")
        prompt_provider.info(f"                to {target_path}")
    elif action == "uninstall":
        prompt_provider.info(f"Removing package {name}")
        prompt_provider.info(f"Will remove all links in {target_path}")
        prompt_provider.info(f"   that point to files in {repo_path}")
    else:
        prompt_provider.info(f"Adding {target_path} to package {name}")
        prompt_provider.info(f"File will be moved to {repo_path}")
        prompt_provider.info("And link created in original location")


def build_service(args: Args) -> PackageService:
    """Create package service wired to rich output"""
    if args.test:
        prompt_provider.warning(
            "Test mode active. Hooks will not execute and files will not be modified."
        )
    if args.force:
        prompt_provider.warning(
            "Force mode active. Files will be overwritten/removed without question."
        )

    return PackageService(
        args=args,
        target_provider=SettingsLoader(),
        prompt_provider=prompt_provider,
        on_package=_announce,
        on_skip=lambda name: prompt_provider.warning(f"Skipping {name}"),
        on_stage=prompt_provider.info,
    )


def _finish(operation: Callable[[], bool]) -> None:
    """Run operation, report the outcome and exit with 0 or 1"""
    try:
        ok = operation()
    except ConfigError as e:
        stderr_console.print(f"[red]Config Error:[/red] {escape(str(e))}")
        ok = False
    except DotlayerError as e:
        stderr_console.print(f"[red]Error:[/red] {escape(str(e))}")
        ok = False

    if ok:
        prompt_provider.success("Complete with success!")
        raise typer.Exit(0)
    prompt_provider.error("Exited on error.")
    raise typer.Exit(1)


def install_run(
    ctx: typer.Context,
    packages: List[str] = typer.Argument(..., help="Packages to install"),
):
    """
    Link package files into the target directory

    Examples:
        dotlayer install vim zsh
        dotlayer --tag work --test install vim
    """
    args = dataclasses.replace(ctx.obj, packages=packages)
    _finish(build_service(args).install)


def uninstall_run(
    ctx: typer.Context,
    packages: List[str] = typer.Argument(..., help="Packages to remove"),
):
    """
    Remove links that point into the given packages

    Examples:
        dotlayer uninstall vim
        dotlayer --force uninstall vim  # also remove entries not owned by the package
    """
    args = dataclasses.replace(ctx.obj, packages=packages)
    _finish(build_service(args).uninstall)


def add_run(
    ctx: typer.Context,
    package: str = typer.Argument(..., help="Package receiving the file"),
    filename: str = typer.Argument(..., help="File inside the target directory"),
    host_specific: bool = typer.Option(
        False, "--host-specific", help="Store the file for this host only"
    ),
    tag: Optional[str] = typer.Option(
        None, "--tag-specific", help="Store the file under the given tag"
    ),
):
    """
    Move a file into a package and link it back

    Examples:
        dotlayer add vim ~/.vimrc
        dotlayer add vim ~/.vimrc --host-specific
    """
    args = dataclasses.replace(ctx.obj, packages=[package])
    service = build_service(args)
    path = expand_path(filename)
    _finish(lambda: service.add(package, path, host_specific=host_specific, tag=tag))
