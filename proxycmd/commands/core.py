"""Built-in command group for proxycmd.

Handles: proxy (status), proxy help, proxy version.
"""

from __future__ import annotations

import structlog

from .base import BaseCommandHandler

logger = structlog.get_logger("proxycmd.dispatch")


class ProxyCommandHandler(BaseCommandHandler):
    """The ``proxy`` command and its sub-commands."""

    def get_commands(self):
        return {
            "proxy": {
                "$none": self.handle_status,
                "help": self.handle_help,
                "commands": self.handle_help,
                "version": self.handle_version,
                "$default": self.handle_usage,
            },
        }

    def handle_status(self):
        count = len(self.ctx.registry)
        public = "on" if self.ctx.config.public_commands_enabled else "off"
        self.ctx.message(f"Proxy running. {count} command(s) registered, public commands {public}.")

    def handle_help(self, sub, *args):
        names = sorted(self.ctx.registry.command_names)
        self.ctx.message("Commands: " + ", ".join(names))

    def handle_version(self, sub, *args):
        self.ctx.message(f"Client version: {self.ctx.protocol_version}")

    def handle_usage(self, sub=None, *args):
        if sub is not None:
            logger.debug("proxy_subcommand_unknown", sub=sub)
        self.ctx.message("Usage: proxy [help|version]")
