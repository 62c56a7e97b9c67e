"""One dispatcher per host connection.

The composition root owns a SessionRegistry and asks it for the
dispatcher of each bus it wires up. The first request for a session
builds the dispatcher and installs its hooks and private channel on
that bus; later requests (from other modules on the same connection)
get the same instance.
"""

from typing import TYPE_CHECKING, Dict, Iterator, Optional

import structlog

from .channel import PrivateChannel
from .commands.base import CommandContext
from .commands.core import ProxyCommandHandler
from .dispatcher import CommandDispatcher
from .hooks import CommandHooks

if TYPE_CHECKING:
    from .bus import MessageBus
    from .config import Config

logger = structlog.get_logger("proxycmd.hooks")


class SessionRegistry:
    """Maps a connection's session id to its CommandDispatcher.

    Args:
        config: Configuration shared by every session.
        builtin_commands: Register the ``proxy`` command group in each
            new dispatcher.
    """

    def __init__(self, config: "Config", builtin_commands: bool = True):
        self.config = config
        self.builtin_commands = builtin_commands
        self._dispatchers: Dict[str, CommandDispatcher] = {}

    def get(self, bus: "MessageBus") -> CommandDispatcher:
        """Return the dispatcher for ``bus``, creating it on first use."""
        dispatcher = self._dispatchers.get(bus.session_id)
        if dispatcher is not None:
            return dispatcher

        dispatcher = CommandDispatcher(
            send=bus.to_client,
            channel_id=self.config.private_channel_id,
        )
        PrivateChannel(bus, self.config, dispatcher.message).install()
        CommandHooks(bus, dispatcher, self.config).install()

        if self.builtin_commands:
            ctx = CommandContext(
                config=self.config,
                registry=dispatcher.registry,
                message=dispatcher.message,
                protocol_version=bus.protocol_version,
            )
            dispatcher.registry.register(ProxyCommandHandler(ctx))

        self._dispatchers[bus.session_id] = dispatcher
        logger.info("session_dispatcher_created", session=bus.session_id)
        return dispatcher

    def find(self, session_id: str) -> Optional[CommandDispatcher]:
        return self._dispatchers.get(session_id)

    def close(self, session_id: str) -> None:
        """Forget a session. Its hooks die with the host connection."""
        if self._dispatchers.pop(session_id, None) is not None:
            logger.info("session_dispatcher_closed", session=session_id)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._dispatchers))

    def __len__(self) -> int:
        return len(self._dispatchers)
