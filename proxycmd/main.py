"""Console entry point for proxycmd.

Runs a LocalBus as a stand-in for a game connection: each line typed on
stdin is delivered as a chat message (or, with a leading ``/``, as an
operator command), and packets the proxy sends to the client are
printed.

Key functions:
    main: Sets up logging and config, wires the session, runs the loop.
    run: Console-script wrapper around main().
"""

import sys
from typing import Optional, TextIO

import structlog

from .logging_config import setup_logging


def _print_packet(name, packet) -> None:
    message = getattr(packet, "message", None)
    if message is not None:
        print(f"  [proxy] {message}")
    else:
        print(f"  [{name}] {packet.model_dump()}")


def main(stdin: Optional[TextIO] = None) -> int:
    """Main entry point."""
    # Phase 1: defaults, cache_logger_on_first_use=False
    setup_logging()
    logger = structlog.get_logger("proxycmd")

    from . import __version__
    from .bus import LocalBus
    from .config import get_config
    from .models import (
        C_CHAT,
        C_OP_COMMAND,
        S_LOAD_CLIENT_USER_SETTING,
        S_LOGIN,
        Chat,
        LoadClientUserSetting,
        Login,
        OpCommand,
    )
    from .sessions import SessionRegistry

    logger.info("proxycmd_starting", version=__version__)

    config = get_config()
    config.validate()

    # Phase 2: reconfigure with real config, cache_logger_on_first_use=True
    setup_logging(config)

    bus = LocalBus(session_id="console", protocol_version=0, on_send=_print_packet)
    sessions = SessionRegistry(config)
    sessions.get(bus)

    bus.emit(S_LOGIN, Login(name="console"))
    bus.emit(S_LOAD_CLIENT_USER_SETTING, LoadClientUserSetting())

    stream = stdin or sys.stdin
    for line in stream:
        line = line.rstrip("\n")
        if not line.strip():
            continue
        if line.startswith("/"):
            delivered = bus.emit(C_OP_COMMAND, OpCommand(command=line[1:]))
        else:
            delivered = bus.emit(C_CHAT, Chat(channel=0, message=line))
        if delivered:
            print(f"  [chat] {line}")

    sessions.close(bus.session_id)
    logger.info("proxycmd_stopped")
    return 0


def run():
    """Synchronous entry point for the ``proxycmd`` console script."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
