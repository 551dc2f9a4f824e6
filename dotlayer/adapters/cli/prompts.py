"""
Rich-based user prompts
"""
from typing import Optional
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from ...core.interfaces import PromptProvider
from ...core.logging import get_stdout_console


class RichPromptProvider(PromptProvider):
    """Rich-based prompt provider"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_stdout_console()

    def confirm(self, message: str, default: bool = True) -> bool:
        """Prompt user for confirmation"""
        return Confirm.ask(f">>> {escape(message)}", default=default, console=self.console)

    def info(self, message: str) -> None:
        """Display info message"""
        self.console.print(f"[cyan]::[/cyan] {escape(message)}")

    def success(self, message: str) -> None:
        """Display success message"""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str) -> None:
        """Display warning message"""
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Display error message"""
        self.console.print(f"[red]✗[/red] {escape(message)}")
