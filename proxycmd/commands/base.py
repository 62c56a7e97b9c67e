"""Base classes for the command registry.

Handlers are compiled at registration time into a small tagged variant:
a Leaf wraps a plain callable, a SubTree maps lower-cased sub-command
names to further handlers. The CommandRegistry maps top-level command
names to those compiled handlers and executes token sequences against
them.

Key classes:
    Leaf: Callable handler, optionally bound to a context.
    SubTree: Nested sub-command node with ``$none``/``$default`` fallbacks.
    CommandRegistry: Maps command names to handlers.
    BaseCommandHandler: ABC for groups of related commands.
    CommandContext: Dependency container shared by command groups.

Key functions:
    build_handler: Compile a callable or mapping into a Handler.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import partial
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    FrozenSet,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import structlog

from ..exceptions import RegistrationError
from ..tokenizer import parse_args

if TYPE_CHECKING:
    from ..config import Config

logger = structlog.get_logger("proxycmd.dispatch")

NONE_KEY = "$none"
DEFAULT_KEY = "$default"
RESERVED_KEYS = frozenset({NONE_KEY, DEFAULT_KEY})

UNBOUND = object()


@dataclass(frozen=True)
class Leaf:
    """A callable handler.

    Called with its argument list as positional arguments; the first
    argument is the name the handler was reached under.
    """

    func: Callable[..., Any]

    def __call__(self, *args: str) -> None:
        self.func(*args)


@dataclass(frozen=True)
class SubTree:
    """A sub-command node.

    Consumes the token after its own name to pick a child. With no
    further token the ``$none`` child is used; an unknown token (or a
    missing ``$none``) falls back to ``$default``. If neither applies
    nothing is invoked.
    """

    children: Dict[str, "Handler"] = field(default_factory=dict)

    def resolve(self, sub: Optional[str]) -> Optional["Handler"]:
        if sub is None:
            child = self.children.get(NONE_KEY)
        else:
            key = sub.lower()
            child = None if key in RESERVED_KEYS else self.children.get(key)
        return child or self.children.get(DEFAULT_KEY)

    def __call__(self, *args: str) -> None:
        rest = args[1:]
        child = self.resolve(rest[0] if rest else None)
        if child is None:
            logger.debug(
                "subcommand_unresolved",
                command=args[0] if args else None,
                sub=rest[0] if rest else None,
            )
            return
        child(*rest)


Handler = Union[Leaf, SubTree]

HandlerSpec = Union[Callable[..., Any], Mapping]
Names = Union[str, Sequence[str]]


def normalize_name(name: str) -> str:
    """Lookup key for a command or sub-command name."""
    return name.lower()


def build_handler(handler: HandlerSpec, context: Any = UNBOUND) -> Handler:
    """Compile a callable or mapping into a Handler.

    If ``context`` is given, every callable (at any depth) is bound to
    it as its leading argument. An already compiled Leaf or SubTree is
    returned as is and cannot take a context.

    Raises:
        RegistrationError: ``handler`` (or any nested value) is neither
            callable nor a mapping, a mapping key is invalid, or a
            context was given with a compiled handler.
    """
    if isinstance(handler, (Leaf, SubTree)):
        if context is not UNBOUND:
            raise RegistrationError("Cannot bind a context to a compiled handler")
        return handler
    if callable(handler):
        if context is not UNBOUND:
            handler = partial(handler, context)
        return Leaf(handler)
    if isinstance(handler, Mapping):
        children: Dict[str, Handler] = {}
        for sub, child in handler.items():
            if not isinstance(sub, str) or sub == "":
                raise RegistrationError(
                    "Sub-command must be a non-empty string", command=repr(sub)
                )
            key = normalize_name(sub)
            if key in children:
                raise RegistrationError(
                    "Sub-command already registered", command=key
                )
            if not (callable(child) or isinstance(child, Mapping)):
                raise RegistrationError(
                    "Sub-command callback must be a function or mapping",
                    command=key,
                )
            children[key] = build_handler(child, context)
        return SubTree(children)
    raise RegistrationError("Callback must be a function or mapping")


def _iter_names(names: Names) -> Tuple[str, ...]:
    if isinstance(names, str):
        names = (names,)
    elif not isinstance(names, (list, tuple)):
        raise RegistrationError("Command must be a string or list of strings")
    for name in names:
        if not isinstance(name, str):
            raise RegistrationError(
                "Command must be a string or list of strings", command=repr(name)
            )
        if name == "":
            raise RegistrationError("Command must not be an empty string")
    return tuple(names)


class CommandRegistry:
    """Maps lower-cased command names to compiled handlers.

    A name is bound to at most one handler; registering it again is an
    error until it has been removed.
    """

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}

    def add(self, names: Names, handler: HandlerSpec, context: Any = UNBOUND) -> None:
        """Register one or more command names against a handler.

        Args:
            names: A command name or a list of aliases sharing the handler.
            handler: A callable, or a mapping of sub-command names to
                callables/mappings.
            context: Optional value bound as the first argument of
                every callable in ``handler``.

        Raises:
            RegistrationError: Invalid handler or name, or a name that
                is already registered. Nothing is registered in that case.
        """
        compiled = build_handler(handler, context)
        keys = [normalize_name(name) for name in _iter_names(names)]

        seen = set()
        for key in keys:
            if key in self._handlers or key in seen:
                raise RegistrationError("Command already registered", command=key)
            seen.add(key)

        for key in keys:
            self._handlers[key] = compiled
        logger.debug(
            "command_registered",
            commands=keys,
            kind="subtree" if isinstance(compiled, SubTree) else "leaf",
        )

    def remove(self, names: Names) -> None:
        """Unregister one or more names. Unknown names are ignored."""
        for name in _iter_names(names):
            if self._handlers.pop(normalize_name(name), None) is not None:
                logger.debug("command_removed", command=normalize_name(name))

    def register(self, group: "BaseCommandHandler") -> None:
        """Register every command of a BaseCommandHandler group."""
        for names, handler in group.get_commands().items():
            self.add(list(names) if isinstance(names, tuple) else names, handler)

    def get(self, name: str) -> Optional[Handler]:
        """Look up the handler for a command name (case-insensitive)."""
        return self._handlers.get(normalize_name(name))

    def execute(self, command: Union[str, Sequence[str]]) -> bool:
        """Run a command against the registry.

        Args:
            command: A raw command string or an already tokenized sequence.

        Returns:
            True if a handler was found and invoked, False for an empty
            sequence or an unknown command.

        Raises:
            CommandSyntaxError: ``command`` is a malformed raw string.
            Exception: Whatever the handler raises.
        """
        args = parse_args(command) if isinstance(command, str) else list(command)
        if not args:
            return False

        handler = self.get(args[0])
        if handler is None:
            return False

        handler(*args)
        return True

    @property
    def command_names(self) -> FrozenSet[str]:
        """All registered command names."""
        return frozenset(self._handlers.keys())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


@dataclass
class CommandContext:
    """Dependency container for command groups.

    Gives handlers access to the registry and the reply helper without
    coupling them to the dispatcher or the host bus.
    """

    config: "Config"
    registry: CommandRegistry
    message: Callable[[str], None]
    protocol_version: Optional[int] = None


class BaseCommandHandler(ABC):
    """Abstract base class for command groups.

    Subclasses implement get_commands() returning a dict that maps a
    command name (or a tuple of aliases) to a callable or a sub-command
    mapping.

    Args:
        ctx: Shared CommandContext.
    """

    def __init__(self, ctx: CommandContext):
        self.ctx = ctx

    @abstractmethod
    def get_commands(self) -> Dict[Union[str, Tuple[str, ...]], HandlerSpec]:
        """Return {command_name_or_aliases: handler} mapping."""
        ...
