"""Tests for the built-in proxy command group."""

from unittest.mock import MagicMock

import pytest

from proxycmd.commands.base import CommandContext, CommandRegistry
from proxycmd.commands.core import ProxyCommandHandler
from proxycmd.config import Config


@pytest.fixture
def ctx(tmp_path, monkeypatch):
    monkeypatch.delenv("PROXYCMD_PUBLIC_COMMANDS", raising=False)
    registry = CommandRegistry()
    ctx = CommandContext(
        config=Config(config_dir=tmp_path),
        registry=registry,
        message=MagicMock(),
        protocol_version=321,
    )
    registry.register(ProxyCommandHandler(ctx))
    return ctx


def test_status_without_arguments(ctx):
    ctx.registry.execute(["proxy"])
    ctx.message.assert_called_once_with(
        "Proxy running. 1 command(s) registered, public commands on."
    )


def test_help_lists_commands(ctx):
    ctx.registry.add(["heal", "h"], MagicMock())
    ctx.registry.execute("proxy help")
    ctx.message.assert_called_once_with("Commands: h, heal, proxy")


def test_commands_alias(ctx):
    ctx.registry.execute("PROXY Commands")
    ctx.message.assert_called_once_with("Commands: proxy")


def test_version(ctx):
    ctx.registry.execute("proxy version")
    ctx.message.assert_called_once_with("Client version: 321")


def test_unknown_subcommand_shows_usage(ctx):
    assert ctx.registry.execute("proxy frobnicate now") is True
    ctx.message.assert_called_once_with("Usage: proxy [help|version]")
