"""Custom exception hierarchy for proxycmd.

Separates the failures the dispatcher catches and reports to the user
(syntax errors) from programmer errors that must stop startup of the
offending module (bad registrations, broken configuration).
"""

from typing import Any, Optional


class ProxyCommandError(Exception):
    """Base exception for all proxycmd errors.

    Attributes:
        message: Human-readable error description.
        module: Originating module name (e.g. "tokenizer").
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.module = module
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return f"{cls}({self.message!r}, module={self.module!r})"


# ---------------------------------------------------------------------------
# Tokenizer exceptions
# ---------------------------------------------------------------------------

class CommandSyntaxError(ProxyCommandError):
    """Malformed command string (unterminated quote, dangling escape,
    unterminated markup span).

    ``str()`` is the bare reason so it can be shown to the user as is.

    Attributes:
        reason: Short description, e.g. "Unexpected end of line".
    """

    def __init__(
        self,
        reason: str,
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.reason = reason
        super().__init__(reason, module=module or "tokenizer", **context)

    def __str__(self) -> str:
        return self.reason


# ---------------------------------------------------------------------------
# Registry exceptions
# ---------------------------------------------------------------------------

class RegistrationError(ProxyCommandError):
    """Invalid add/remove call: duplicate name, empty name, or a handler
    that is neither callable nor a mapping.

    Never caught inside proxycmd.

    Attributes:
        command: The offending command name (if known).
    """

    def __init__(
        self,
        message: str = "",
        *,
        command: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command = command
        super().__init__(message, module=module or "commands", **context)


# ---------------------------------------------------------------------------
# Configuration exceptions
# ---------------------------------------------------------------------------

class ConfigurationError(ProxyCommandError):
    """Invalid or missing configuration."""

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(message, module=module or "config", **context)
