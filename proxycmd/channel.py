"""Virtual private channel.

Gives the user a chat tab for talking to the proxy. The channel only
exists on the client: it is joined after login, the server's own join
for that slot is hidden, and leave/info requests for it are answered
locally instead of reaching the server.
"""

from typing import TYPE_CHECKING, Callable, Optional

import structlog

from .models import (
    C_LEAVE_PRIVATE_CHANNEL,
    C_REQUEST_PRIVATE_CHANNEL_INFO,
    S_JOIN_PRIVATE_CHANNEL,
    S_LOAD_CLIENT_USER_SETTING,
    S_LOGIN,
    S_REQUEST_PRIVATE_CHANNEL_INFO,
    JoinPrivateChannel,
    LeavePrivateChannel,
    PrivateChannelInfo,
    RequestPrivateChannelInfo,
)

if TYPE_CHECKING:
    from .bus import MessageBus
    from .config import Config

logger = structlog.get_logger("proxycmd.channel")


class PrivateChannel:
    """Client-side bookkeeping for the proxy's private channel.

    Args:
        bus: Host bus to hook.
        config: Channel index, id, name and login message switch.
        message: Reply helper used for the login message.
    """

    def __init__(
        self,
        bus: "MessageBus",
        config: "Config",
        message: Callable[[str], None],
    ):
        self.bus = bus
        self.index = config.private_channel_index
        self.channel_id = config.private_channel_id
        self.name = config.private_channel_name
        self.login_message = config.login_message_enabled
        self._message = message
        self.loaded = False

    def install(self) -> None:
        self.bus.hook(S_LOGIN, self._on_login)
        self.bus.hook(S_LOAD_CLIENT_USER_SETTING, self._on_load_settings)
        self.bus.hook(S_JOIN_PRIVATE_CHANNEL, self._on_join)
        self.bus.hook(C_LEAVE_PRIVATE_CHANNEL, self._on_leave)
        self.bus.hook(C_REQUEST_PRIVATE_CHANNEL_INFO, self._on_info_request)

    def _on_login(self, packet) -> None:
        self.loaded = False

    def _on_load_settings(self, packet) -> None:
        # Only the first settings push after a login joins the channel.
        if self.loaded:
            return
        self.loaded = True
        self.bus.defer(self._join)

    def _join(self) -> None:
        self.bus.to_client(
            S_JOIN_PRIVATE_CHANNEL,
            JoinPrivateChannel(index=self.index, id=self.channel_id, unk=[], name=self.name),
        )
        logger.info("private_channel_joined", session=self.bus.session_id, name=self.name)
        if self.login_message:
            self._message(f"Proxy enabled. Client version: {self.bus.protocol_version}")

    def _on_join(self, packet: JoinPrivateChannel) -> Optional[bool]:
        if packet.index == self.index:
            return False
        return None

    def _on_leave(self, packet: LeavePrivateChannel) -> Optional[bool]:
        if packet.index == self.index:
            return False
        return None

    def _on_info_request(self, packet: RequestPrivateChannelInfo) -> Optional[bool]:
        if packet.channel_id != self.channel_id:
            return None
        self.bus.to_client(
            S_REQUEST_PRIVATE_CHANNEL_INFO,
            PrivateChannelInfo(owner=1, password=0, members=[], friends=[]),
        )
        return False
