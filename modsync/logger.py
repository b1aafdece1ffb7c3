"""Rich console output for sync operations."""

from typing import Optional

from rich.console import Console
from rich.markup import escape


class SyncLogger:
    """Rich console output for sync operations."""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """Initialize logger.

        Args:
            console: Rich Console instance
            verbose: Enable debug output
        """
        self.console = console or Console(stderr=True)
        self.verbose = verbose

    def debug(self, message: str) -> None:
        """Dim debug message, only shown when verbose."""
        if self.verbose:
            self.console.print(f"[dim]· {escape(message)}[/dim]")

    def info(self, message: str) -> None:
        """Blue info message."""
        self.console.print(f"[blue]ℹ[/blue] {escape(message)}")

    def success(self, message: str) -> None:
        """Green success message."""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str, **fields: object) -> None:
        """Yellow warning message, with optional key=value context."""
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}{self._format_fields(fields)}")

    def error(self, message: str) -> None:
        """Red error message."""
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def synced(self, branch: str, git_hash: str, identity: str, registry_commit: str) -> None:
        """One line per accepted commit: local branch:hash -> remote identity:commit."""
        self.console.print(f"{branch}:{git_hash} -> {identity}:{registry_commit}", highlight=False, markup=False, soft_wrap=True)

    @staticmethod
    def _format_fields(fields: dict[str, object]) -> str:
        if not fields:
            return ""
        return " [dim]" + " ".join(f"{key}={escape(str(value))}" for key, value in fields.items()) + "[/dim]"
