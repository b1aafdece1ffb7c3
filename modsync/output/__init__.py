# MODSYNC Output Module
# Rich console output

from modsync.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
