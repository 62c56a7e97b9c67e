"""Tests for the virtual private channel."""

from unittest.mock import MagicMock

from proxycmd.bus import LocalBus
from proxycmd.channel import PrivateChannel
from proxycmd.config import Config
from proxycmd.models import (
    C_LEAVE_PRIVATE_CHANNEL,
    C_REQUEST_PRIVATE_CHANNEL_INFO,
    S_JOIN_PRIVATE_CHANNEL,
    S_LOAD_CLIENT_USER_SETTING,
    S_LOGIN,
    S_REQUEST_PRIVATE_CHANNEL_INFO,
    JoinPrivateChannel,
    LeavePrivateChannel,
    LoadClientUserSetting,
    Login,
    PrivateChannelInfo,
    RequestPrivateChannelInfo,
)


def _setup(settings=None):
    bus = LocalBus(session_id="test", protocol_version=1234)
    message = MagicMock()
    config = Config(config_dir=None, settings=settings or {})
    channel = PrivateChannel(bus, config, message)
    channel.install()
    return bus, channel, message


def _joins(bus):
    return [p for name, p in bus.sent if name == S_JOIN_PRIVATE_CHANNEL]


def test_joins_once_after_login():
    bus, channel, message = _setup()
    bus.emit(S_LOGIN, Login())
    bus.emit(S_LOAD_CLIENT_USER_SETTING, LoadClientUserSetting())
    bus.emit(S_LOAD_CLIENT_USER_SETTING, LoadClientUserSetting())

    joins = _joins(bus)
    assert len(joins) == 1
    assert joins[0].index == 7
    assert joins[0].id == 0xFFFFFFFE
    assert joins[0].name == "Proxy"
    message.assert_called_once_with("Proxy enabled. Client version: 1234")


def test_rejoins_after_new_login():
    bus, _, _ = _setup()
    for _ in range(2):
        bus.emit(S_LOGIN, Login())
        bus.emit(S_LOAD_CLIENT_USER_SETTING, LoadClientUserSetting())
    assert len(_joins(bus)) == 2


def test_login_message_disabled():
    bus, _, message = _setup({"login_message": False})
    bus.emit(S_LOAD_CLIENT_USER_SETTING, LoadClientUserSetting())
    assert len(_joins(bus)) == 1
    message.assert_not_called()


def test_custom_channel_settings():
    bus, _, _ = _setup({"private_channel": {"index": 3, "id": 99, "name": "Cmd"}})
    bus.emit(S_LOAD_CLIENT_USER_SETTING, LoadClientUserSetting())
    join = _joins(bus)[0]
    assert (join.index, join.id, join.name) == (3, 99, "Cmd")


def test_server_join_for_virtual_slot_is_hidden():
    bus, _, _ = _setup()
    assert bus.emit(S_JOIN_PRIVATE_CHANNEL, JoinPrivateChannel(index=7, id=5, name="x")) is False
    assert bus.emit(S_JOIN_PRIVATE_CHANNEL, JoinPrivateChannel(index=2, id=5, name="x")) is True


def test_leave_for_virtual_slot_is_blocked():
    bus, _, _ = _setup()
    assert bus.emit(C_LEAVE_PRIVATE_CHANNEL, LeavePrivateChannel(index=7)) is False
    assert bus.emit(C_LEAVE_PRIVATE_CHANNEL, LeavePrivateChannel(index=1)) is True


def test_info_request_answered_locally():
    bus, _, _ = _setup()
    delivered = bus.emit(
        C_REQUEST_PRIVATE_CHANNEL_INFO, RequestPrivateChannelInfo(channel_id=0xFFFFFFFE)
    )
    assert delivered is False
    name, packet = bus.sent[-1]
    assert name == S_REQUEST_PRIVATE_CHANNEL_INFO
    assert packet == PrivateChannelInfo(owner=1, password=0, members=[], friends=[])


def test_info_request_for_other_channel_passes():
    bus, _, _ = _setup()
    assert bus.emit(
        C_REQUEST_PRIVATE_CHANNEL_INFO, RequestPrivateChannelInfo(channel_id=42)
    ) is True
    assert bus.sent == []
