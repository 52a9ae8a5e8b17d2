"""CLI command implementations."""

from .init import cmd_init
from .migrate import cmd_migrate

__all__ = ["cmd_init", "cmd_migrate"]
