"""Command registry framework for proxycmd.

Provides the Leaf/SubTree handler variant, the CommandRegistry that maps
command names to handlers, and the BaseCommandHandler ABC for command
groups.
"""

from .base import (
    DEFAULT_KEY,
    NONE_KEY,
    BaseCommandHandler,
    CommandContext,
    CommandRegistry,
    Handler,
    Leaf,
    SubTree,
    build_handler,
)

__all__ = [
    "BaseCommandHandler",
    "CommandContext",
    "CommandRegistry",
    "Handler",
    "Leaf",
    "SubTree",
    "build_handler",
    "NONE_KEY",
    "DEFAULT_KEY",
]
