"""Inbound stream buffering and per-line dispatch."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..logs.logger import logger
from .decoder import decode

if TYPE_CHECKING:  # pragma: no cover
    from .session import IRCSession


def split_lines(buffer: bytes, new_data: bytes) -> tuple[list[bytes], bytes]:
    """Return the complete lines in ``buffer + new_data`` and the leftover.

    Lines end with LF; a preceding CR is dropped. Empty lines are skipped.
    """
    buffer += new_data
    *complete, rest = buffer.split(b"\n")
    lines = [line.rstrip(b"\r") for line in complete]
    return [line for line in lines if line.strip()], rest


class IRCDispatcher:
    def __init__(self, session: IRCSession):
        self.session = session

    async def process_incoming_data(self, buffer: bytes, new_data: bytes) -> bytes:
        lines, buffer = split_lines(buffer, new_data)
        for line in lines:
            await self._handle_line(line)
        return buffer

    async def _handle_line(self, line: bytes) -> None:
        session = self.session
        logger.log_event(
            "irc",
            "raw_in",
            level=logging.DEBUG,
            nick=session.nick_name,
            host=session.host,
            raw=line,
        )
        record = decode(line, session.encoding)
        if not record.valid:
            logger.log_event(
                "irc",
                "decode_dropped",
                level=logging.DEBUG,
                nick=session.nick_name,
                host=session.host,
                raw=line[:200],
            )
            return
        await session.process_record(record)
