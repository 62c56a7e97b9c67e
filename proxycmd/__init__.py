"""Chat command parser and dispatcher for a message proxy."""

from .commands import BaseCommandHandler, CommandRegistry
from .dispatcher import CommandDispatcher, DispatchOutcome
from .exceptions import CommandSyntaxError, ProxyCommandError, RegistrationError
from .tokenizer import Tokenized, parse_args, strip_outer_html, tokenize

__version__ = "1.0.0"

__all__ = [
    "BaseCommandHandler",
    "CommandDispatcher",
    "CommandRegistry",
    "CommandSyntaxError",
    "DispatchOutcome",
    "ProxyCommandError",
    "RegistrationError",
    "Tokenized",
    "parse_args",
    "strip_outer_html",
    "tokenize",
]
