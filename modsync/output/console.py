# MODSYNC Console Output
# Rich-based console output for user-friendly display

from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.table import Table


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync operations.
    """

    def __init__(self, *, colored: bool = True, stderr: bool = False):
        """
        Initialize console.

        Args:
            colored: Enable colored output.
            stderr: Write to stderr instead of stdout.
        """
        self._console = RichConsole(no_color=not colored, stderr=stderr, highlight=False)

    @property
    def rich(self) -> RichConsole:
        """The underlying Rich console."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    def print_sync_points(self, rows: list[tuple[str, str, str, Optional[str]]]) -> None:
        """
        Print sync points as a table.

        Args:
            rows: (module, identity, branch, sync point or None) tuples.
        """
        if not rows:
            self._console.print("[dim]No modules to display[/dim]")
            return

        table = Table(title="Sync Points", show_header=True, header_style="bold")
        table.add_column("Module", style="cyan")
        table.add_column("Identity")
        table.add_column("Branch", style="magenta")
        table.add_column("Last Synced Commit")

        for module, identity, branch, sync_point in rows:
            synced = sync_point if sync_point else "[dim]never[/dim]"
            table.add_row(escape(module), escape(identity), escape(branch), synced)

        self._console.print()
        self._console.print(table)
        self._console.print()

    def print_config_errors(self, errors: list[str]) -> None:
        """Print configuration validation errors."""
        self._console.print("[red]Configuration is invalid:[/red]")
        for error in errors:
            self._console.print(f"  • {escape(error)}")


def create_console(*, colored: bool = True, stderr: bool = False) -> Console:
    """Create a console instance."""
    return Console(colored=colored, stderr=stderr)
