"""Pydantic models for the packets proxycmd reads and writes.

Inbound (client -> server, observed by hooks):
    OpCommand, Chat, Whisper, LeavePrivateChannel,
    RequestPrivateChannelInfo

Inbound (server -> client, observed by hooks):
    Login, LoadClientUserSetting, JoinPrivateChannel

Outbound (sent to the client by proxycmd):
    PrivateChat, JoinPrivateChannel, PrivateChannelInfo

Every packet carries a ``silenced`` flag. The host bus sets it once a
hook has blocked the packet; it is never serialized.
"""

from typing import List

from pydantic import BaseModel, Field

# Packet names as used on the bus
C_OP_COMMAND = "C_OP_COMMAND"
C_CHAT = "C_CHAT"
C_WHISPER = "C_WHISPER"
C_LEAVE_PRIVATE_CHANNEL = "C_LEAVE_PRIVATE_CHANNEL"
C_REQUEST_PRIVATE_CHANNEL_INFO = "C_REQUEST_PRIVATE_CHANNEL_INFO"
S_LOGIN = "S_LOGIN"
S_LOAD_CLIENT_USER_SETTING = "S_LOAD_CLIENT_USER_SETTING"
S_JOIN_PRIVATE_CHANNEL = "S_JOIN_PRIVATE_CHANNEL"
S_PRIVATE_CHAT = "S_PRIVATE_CHAT"
S_REQUEST_PRIVATE_CHANNEL_INFO = "S_REQUEST_PRIVATE_CHANNEL_INFO"

# Chat channel numbers for private channels start here
PRIVATE_CHANNEL_BASE = 11


class Packet(BaseModel):
    """Base for all bus packets."""

    silenced: bool = Field(default=False, exclude=True)


class OpCommand(Packet):
    """Explicit operator command typed by the user."""

    command: str


class Chat(Packet):
    """Chat message sent by the user on some channel."""

    channel: int = 0
    message: str


class Whisper(Packet):
    """Whisper sent by the user to another player."""

    target: str = ""
    message: str


class Login(Packet):
    """Server confirms a character login."""

    name: str = ""


class LoadClientUserSetting(Packet):
    """Server pushes the client's stored settings (sent after login)."""


class JoinPrivateChannel(Packet):
    """Client joins a private channel slot."""

    index: int
    id: int
    unk: List[int] = Field(default_factory=list)
    name: str


class LeavePrivateChannel(Packet):
    """Client asks to leave a private channel slot."""

    index: int


class RequestPrivateChannelInfo(Packet):
    """Client asks for a private channel's member list."""

    channel_id: int


class PrivateChannelInfo(Packet):
    """Reply to RequestPrivateChannelInfo."""

    owner: int = 1
    password: int = 0
    members: List[str] = Field(default_factory=list)
    friends: List[str] = Field(default_factory=list)


class PrivateChat(Packet):
    """Message shown to the client in a private channel."""

    channel: int
    author_id: int = 0
    author_name: str = ""
    message: str
