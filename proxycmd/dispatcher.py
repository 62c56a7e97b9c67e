"""Command dispatcher.

Runs one trigger string through the tokenizer and the command registry
and latches a user-facing error message when that fails. The latch is
read later by a low-priority listener (see hooks.py) so that other
listeners on the same event get the chance to claim the command first.

Key classes:
    DispatchOutcome: Result of one handling attempt.
    CommandDispatcher: Owns the registry, the error latch and the reply
        helper for one host connection.
"""

from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

import structlog

from .commands.base import CommandRegistry, HandlerSpec, Names, UNBOUND, normalize_name
from .config import DEFAULT_PRIVATE_CHANNEL_ID
from .models import S_PRIVATE_CHAT, PrivateChat
from .tokenizer import tokenize

logger = structlog.get_logger("proxycmd.dispatch")

SendFn = Callable[[str, Any], None]


class DispatchOutcome(str, Enum):
    """Result of CommandDispatcher.handle()."""

    HANDLED = "handled"
    FAILED = "failed"
    UNKNOWN = "unknown"
    SYNTAX_ERROR = "syntax_error"
    EMPTY = "empty"

    @property
    def intercepted(self) -> bool:
        """Whether the trigger was an attempt at a command."""
        return self is not DispatchOutcome.EMPTY


class CommandDispatcher:
    """Command registry plus the error latch for one connection.

    The latch holds at most one message: the failure of the most recent
    handling attempt. Each attempt overwrites it and a successful one
    clears it.

    Args:
        send: Host callback ``send(packet_name, packet)`` used for replies.
        registry: Registry to dispatch against (a new one by default).
        channel_id: Private channel id replies are shown in.
    """

    def __init__(
        self,
        send: SendFn,
        registry: Optional[CommandRegistry] = None,
        channel_id: int = DEFAULT_PRIVATE_CHANNEL_ID,
    ):
        self._send = send
        self.registry = registry if registry is not None else CommandRegistry()
        self.channel_id = channel_id
        self._pending_error: Optional[str] = None
        self._pending_outcome: Optional[DispatchOutcome] = None

    # --- registry passthrough ---

    def add(self, names: Names, handler: HandlerSpec, context: Any = UNBOUND) -> None:
        self.registry.add(names, handler, context)

    def remove(self, names: Names) -> None:
        self.registry.remove(names)

    def execute(self, command: Union[str, Sequence[str]]) -> bool:
        return self.registry.execute(command)

    # --- error latch ---

    @property
    def pending_error(self) -> Optional[str]:
        """The latched error message, if any."""
        return self._pending_error

    @property
    def pending_outcome(self) -> Optional[DispatchOutcome]:
        """The outcome that latched the pending error, if any."""
        return self._pending_outcome

    def take_error(self) -> Optional[str]:
        """Return the latched error and clear it."""
        error = self._pending_error
        self._latch(None, None)
        return error

    def _latch(self, outcome: Optional[DispatchOutcome], error: Optional[str]) -> None:
        self._pending_outcome = outcome
        self._pending_error = error

    # --- handling protocol ---

    def handle(self, raw: str) -> DispatchOutcome:
        """Tokenize and execute one trigger string.

        Never raises for user input or handler failures; the outcome
        decides what the caller does with the event, and any failure
        message is left in the latch.
        """
        result = tokenize(raw)
        if not result.ok:
            self._latch(DispatchOutcome.SYNTAX_ERROR, f"Syntax error: {result.error}")
            logger.debug("command_syntax_error", error=result.error)
            return DispatchOutcome.SYNTAX_ERROR

        args = result.tokens
        if not args:
            return DispatchOutcome.EMPTY

        name = normalize_name(args[0])
        try:
            handled = self.execute(args)
        except Exception:
            self._latch(DispatchOutcome.FAILED, f'Error running callback for command "{name}".')
            logger.exception("command_callback_error", command=name, argc=len(args) - 1)
            return DispatchOutcome.FAILED

        if not handled:
            self._latch(DispatchOutcome.UNKNOWN, f'Unknown command "{name}".')
            logger.debug("command_unknown", command=name)
            return DispatchOutcome.UNKNOWN

        self._latch(None, None)
        logger.debug("command_handled", command=name, argc=len(args) - 1)
        return DispatchOutcome.HANDLED

    # --- replies ---

    def message(self, text: str) -> None:
        """Show ``text`` to the user in the private channel, from the system."""
        self._send(
            S_PRIVATE_CHAT,
            PrivateChat(channel=self.channel_id, author_id=0, author_name="", message=text),
        )
