"""Logging configuration for proxycmd.

Provides subsystem-level log file routing, chat-text scrubbing, and
structlog + stdlib integration.

Subsystem hierarchy (stdlib dotted names, structlog wraps them):
    root              → ConsoleHandler (terminal)
      └─ proxycmd     → RotatingFileHandler → proxycmd.log (combined)
           ├─ proxycmd.dispatch → RFH → dispatch.log
           ├─ proxycmd.hooks    → RFH → hooks.log
           └─ proxycmd.channel  → RFH → channel.log
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Any, Dict

import structlog

# Subsystem names — each gets its own RotatingFileHandler
SUBSYSTEMS = ("dispatch", "hooks", "channel")

# stdlib logger name prefix for hierarchy-based propagation
LOGGER_PREFIX = "proxycmd"

# ---------------------------------------------------------------------------
# Secret sanitization
# ---------------------------------------------------------------------------

# key=value / key: value pairs for credential-like keys
_SECRET_PATTERN = re.compile(
    r"(?i)\b(password|passwd|token|secret|ticket)(\s*[=:]\s*)(\S+)"
)

_REDACTED = "***REDACTED***"


def _scrub_value(value: str) -> str:
    return _SECRET_PATTERN.sub(lambda m: m.group(1) + m.group(2) + _REDACTED, value)


def sanitize_secrets(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor that masks credentials typed into commands.

    Users type things like ``!login password=hunter2``; walks all string
    values (and strings inside lists, tuples and dicts) in the event
    dict and replaces the value part with a placeholder.
    """
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = _scrub_value(value)
        elif isinstance(value, (list, tuple)):
            event_dict[key] = type(value)(
                _scrub_value(v) if isinstance(v, str) else v
                for v in value
            )
        elif isinstance(value, dict):
            event_dict[key] = {
                k: _scrub_value(v) if isinstance(v, str) else v
                for k, v in value.items()
            }
    return event_dict


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

_FILE_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
    structlog.dev.ConsoleRenderer(colors=False),
]


def _level(name: str, default: int) -> int:
    return getattr(logging, name.upper(), default) if name else default


def _reset(name: str, level: int) -> logging.Logger:
    log = logging.getLogger(name)
    log.setLevel(level)
    log.handlers.clear()
    log.propagate = True
    return log


def setup_logging(config=None) -> None:
    """Route structlog through stdlib loggers, one file per subsystem.

    Events from ``proxycmd.<subsystem>`` land in ``<subsystem>.log``,
    the combined ``proxycmd.log`` and stderr. Called once with no config
    at startup (loggers not cached) and again once the config is loaded.
    """
    if config is not None:
        log_dir = config.log_dir
        level = _level(config.logging_level, logging.INFO)
        overrides = config.logging_subsystem_levels
        max_bytes = config.logging_max_file_size_mb * 1024 * 1024
        backups = config.logging_backup_count
    else:
        log_dir = Path(__file__).parent.parent / "logs"
        level, overrides = logging.INFO, {}
        max_bytes, backups = 10 * 1024 * 1024, 5

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        log_dir = None
        print(f"WARNING: cannot create log directory: {exc}; logging to console only", file=sys.stderr)

    formatter = structlog.stdlib.ProcessorFormatter(processors=_FILE_PROCESSORS)

    def attach_file(log: logging.Logger, filename: str, file_level: int) -> None:
        if log_dir is None:
            return
        handler = logging.handlers.RotatingFileHandler(
            log_dir / filename, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
        )
        handler.setLevel(file_level)
        handler.setFormatter(formatter)
        log.addHandler(handler)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    root.addHandler(console)

    attach_file(_reset(LOGGER_PREFIX, logging.DEBUG), f"{LOGGER_PREFIX}.log", level)
    for subsystem in SUBSYSTEMS:
        sub_level = _level(overrides.get(subsystem, ""), level)
        attach_file(_reset(f"{LOGGER_PREFIX}.{subsystem}", sub_level), f"{subsystem}.log", sub_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            sanitize_secrets,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=config is not None,
    )
