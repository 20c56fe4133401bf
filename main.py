#!/usr/bin/env python3
"""
Headless entry point: connect one session and log everything it receives
"""

import asyncio
import logging
import sys
from collections.abc import Mapping

from ircflow.config import load_session_config
from ircflow.errors import ConfigurationError
from ircflow.irc import ConnectionState, IRCMessage, IRCSession
from ircflow.logging_config import LoggerConfigurator
from ircflow.logs import logger


class LoggingSink:
    """Message sink that writes every session callback to the event log."""

    def __init__(self) -> None:
        self.disconnected = asyncio.Event()

    def on_message(self, message: IRCMessage) -> None:
        logger.log_event(
            "app",
            "message",
            human=f"<{message.sender.name or '*'}> {message.command} {' '.join(message.parameters)}",
            message_type=message.type.name,
            valid=message.is_valid(),
        )

    def on_connection_state_changed(self, state: ConnectionState) -> None:
        logger.log_event("app", "state", new_state=state.name)
        if state is ConnectionState.DISCONNECTED:
            self.disconnected.set()

    def on_session_info_updated(self, info: Mapping[str, str]) -> None:
        logger.log_event("app", "session_info", keys=len(info))

    def on_socket_error(self, kind: str) -> None:
        logger.log_event("app", "socket_error", level=logging.ERROR, kind=kind)
        self.disconnected.set()

    def on_nick_name_changed(self, nick: str) -> None:
        logger.log_event("app", "nick", nick=nick)


async def main():
    """Main function"""
    config = load_session_config()
    sink = LoggingSink()
    session = IRCSession.from_config(config, sink)
    logger.log_event("app", "start", nick=config.nick_name, host=config.host)
    if not await session.open():
        sys.exit(1)
    try:
        await sink.disconnected.wait()
    finally:
        await session.close()
        logger.log_event("app", "shutdown")


if __name__ == "__main__":
    LoggerConfigurator().configure()

    if len(sys.argv) > 1 and sys.argv[1] == "--check-config":
        try:
            cfg = load_session_config()
            logger.log_event("app", "config_ok", nick=cfg.nick_name, host=cfg.host)
            sys.exit(0)
        except ConfigurationError as e:
            logger.log_event("app", "config_invalid", level=logging.ERROR, error=str(e))
            sys.exit(1)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted")
        sys.exit(0)
    except ConfigurationError as e:
        logger.log_event("app", "config_invalid", level=logging.ERROR, error=str(e))
        sys.exit(1)
