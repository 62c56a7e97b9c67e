"""Trigger sources for the command dispatcher.

Wires a CommandDispatcher into the host bus. Every trigger packet gets
two hooks:

    order -10   primary: strip the chat markup, run the command, and
                silence the packet if a handler ran (even one that
                raised).
    order  10   trailing (runs even for silenced packets): report the
                latched error unless another listener silenced the
                packet in between, then silence it. A handler failure
                is reported regardless.

Running the report last lets any other listener that understands the
same text claim it before an "Unknown command" complaint is shown.

Trigger sources:
    C_OP_COMMAND   the whole command text.
    C_CHAT         the private channel's chat verbatim; any other
                   channel only if it matches the public pattern.
    C_WHISPER      only if it matches the public pattern.
"""

from typing import TYPE_CHECKING, Callable, Optional

import structlog

from .dispatcher import CommandDispatcher, DispatchOutcome
from .models import (
    C_CHAT,
    C_OP_COMMAND,
    C_WHISPER,
    PRIVATE_CHANNEL_BASE,
    Chat,
    OpCommand,
    Packet,
    Whisper,
)
from .tokenizer import strip_outer_html

if TYPE_CHECKING:
    from .bus import MessageBus
    from .config import Config

logger = structlog.get_logger("proxycmd.hooks")

PRIMARY_ORDER = -10
TRAILING_ORDER = 10


class CommandHooks:
    """Installs the dispatcher's listeners on a bus.

    Args:
        bus: Host bus to hook.
        dispatcher: Dispatcher that runs the commands.
        config: Source of the private channel index and public pattern.
    """

    def __init__(self, bus: "MessageBus", dispatcher: CommandDispatcher, config: "Config"):
        self.bus = bus
        self.dispatcher = dispatcher
        self.config = config
        self.chat_channel = PRIVATE_CHANNEL_BASE + config.private_channel_index

    def install(self) -> None:
        self._hook_override(C_OP_COMMAND, self._on_op_command)
        self._hook_override(C_CHAT, self._on_chat)
        if self.config.public_commands_enabled:
            self._hook_override(C_WHISPER, self._on_whisper)
        logger.info(
            "command_hooks_installed",
            session=self.bus.session_id,
            public=self.config.public_commands_enabled,
        )

    def _hook_override(self, name: str, callback: Callable[[Packet], Optional[bool]]) -> None:
        self.bus.hook(name, callback, order=PRIMARY_ORDER)
        self.bus.hook(name, self._report_error, order=TRAILING_ORDER, silenced=None)

    def _report_error(self, packet: Packet) -> Optional[bool]:
        # A handler that ran and crashed is always reported.
        failed = self.dispatcher.pending_outcome is DispatchOutcome.FAILED
        error = self.dispatcher.take_error()
        if error is None:
            return None
        if failed or not packet.silenced:
            self.dispatcher.message(error)
        else:
            logger.debug("command_error_suppressed", error=error)
        return False

    def _handle(self, command: str) -> DispatchOutcome:
        return self.dispatcher.handle(strip_outer_html(command))

    def _claim(self, command: str) -> Optional[bool]:
        return _silence_if_ran(self._handle(command))

    def _match_public(self, message: str) -> Optional[str]:
        if not self.config.public_commands_enabled:
            return None
        match = self.config.public_command_pattern.match(strip_outer_html(message))
        return match.group(1) if match else None

    def _on_op_command(self, packet: OpCommand) -> Optional[bool]:
        return self._claim(packet.command)

    def _on_chat(self, packet: Chat) -> Optional[bool]:
        if packet.channel == self.chat_channel:
            # The proxy channel only exists on the client; never forward it.
            # Unknown and syntax errors are silenced by the trailing listener.
            outcome = self._handle(packet.message)
            if outcome is DispatchOutcome.EMPTY:
                logger.debug("command_empty", channel=packet.channel)
                return False
            return _silence_if_ran(outcome)
        command = self._match_public(packet.message)
        if command is not None:
            return self._claim(command)
        return None

    def _on_whisper(self, packet: Whisper) -> Optional[bool]:
        command = self._match_public(packet.message)
        if command is not None:
            return self._claim(command)
        return None


def _silence_if_ran(outcome: DispatchOutcome) -> Optional[bool]:
    """Primary-pass verdict: claim the packet once a handler has run."""
    if outcome in (DispatchOutcome.HANDLED, DispatchOutcome.FAILED):
        return False
    return None
