"""Host message bus.

proxycmd does not own the connection it runs on. It only needs a bus it
can hook packets on and send packets to the client through; MessageBus
describes that surface. LocalBus is an in-process implementation used
by the console entry point and the tests.

Hook semantics:
    - Hooks on a packet name run in ascending ``order``; hooks with
      the same order run in registration order.
    - A hook returning ``False`` silences the packet: it will not be
      delivered, and later hooks see ``packet.silenced == True``.
    - The ``silenced`` filter picks which hooks run: ``False`` (default)
      skips silenced packets, ``None`` always runs, ``True`` runs only
      for silenced packets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import structlog

from .models import Packet

logger = structlog.get_logger("proxycmd.hooks")

HookFn = Callable[[Any], Optional[bool]]


class MessageBus(Protocol):
    """The part of the host bus proxycmd depends on."""

    session_id: str
    protocol_version: Optional[int]

    def hook(
        self,
        name: str,
        callback: HookFn,
        *,
        order: int = 0,
        silenced: Optional[bool] = False,
    ) -> Any:
        ...

    def to_client(self, name: str, packet: Packet) -> None:
        ...

    def defer(self, callback: Callable[[], None]) -> None:
        ...


@dataclass(order=True)
class _Hook:
    order: int
    seq: int
    callback: HookFn = field(compare=False)
    silenced: Optional[bool] = field(compare=False, default=False)

    def accepts(self, packet: Packet) -> bool:
        return self.silenced is None or self.silenced == packet.silenced


class LocalBus:
    """In-process MessageBus.

    Args:
        session_id: Identity of the connection this bus belongs to.
        protocol_version: Reported in the login message.
        on_send: Optional callback for every packet sent to the client.
    """

    def __init__(
        self,
        session_id: str = "local",
        protocol_version: Optional[int] = None,
        on_send: Optional[Callable[[str, Packet], None]] = None,
    ):
        self.session_id = session_id
        self.protocol_version = protocol_version
        self._on_send = on_send
        self._hooks: Dict[str, List[_Hook]] = {}
        self._seq = count()
        self._deferred: List[Callable[[], None]] = []
        self._depth = 0
        self.sent: List[Tuple[str, Packet]] = []

    def hook(
        self,
        name: str,
        callback: HookFn,
        *,
        order: int = 0,
        silenced: Optional[bool] = False,
    ) -> _Hook:
        """Register ``callback`` for packets named ``name``."""
        entry = _Hook(order, next(self._seq), callback, silenced)
        hooks = self._hooks.setdefault(name, [])
        hooks.append(entry)
        hooks.sort()
        return entry

    def unhook(self, name: str, entry: _Hook) -> None:
        hooks = self._hooks.get(name, [])
        if entry in hooks:
            hooks.remove(entry)

    def emit(self, name: str, packet: Packet) -> bool:
        """Run all hooks for a packet.

        Returns:
            True if the packet should be delivered (nobody silenced it).
        """
        self._depth += 1
        try:
            for entry in list(self._hooks.get(name, ())):
                if not entry.accepts(packet):
                    continue
                try:
                    result = entry.callback(packet)
                except Exception as e:
                    logger.error(
                        "hook_error",
                        packet=name,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    continue
                if result is False:
                    packet.silenced = True
        finally:
            self._depth -= 1

        if self._depth == 0:
            self._run_deferred()
        return not packet.silenced

    def to_client(self, name: str, packet: Packet) -> None:
        """Send a packet to the client."""
        self.sent.append((name, packet))
        if self._on_send is not None:
            self._on_send(name, packet)

    def defer(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the packet currently being emitted is done."""
        self._deferred.append(callback)
        if self._depth == 0:
            self._run_deferred()

    def _run_deferred(self) -> None:
        while self._deferred:
            callback = self._deferred.pop(0)
            try:
                callback()
            except Exception as e:
                logger.error(
                    "deferred_callback_error",
                    error=str(e),
                    error_type=type(e).__name__,
                )
