"""Typed IRC messages.

Every decoded line becomes one :class:`IRCMessage`. The message keeps the
frozen :class:`~ircflow.irc.decoder.RawMessage` it came from and a
:class:`~ircflow.irc.models.MessageType` discriminant picked from
``COMMAND_TYPES``; the variant specific accessors (``channel``, ``nick``,
``reason`` ...) are positional lookups described by ``_FIELDS``. Asking a
variant for a field it does not have raises ``AttributeError``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from ..constants import IRC_DEFAULT_ENCODING
from ..errors import MessageValidationError
from ..logs.logger import logger
from .decoder import RawMessage, Sender, decode_text, default_encoding, normalize_encoding
from .models import IDENTIFY_MSG_CAPABILITY, MessageFlags, MessageType
from .protocols import FlagContext

COMMAND_TYPES: dict[str, MessageType] = {
    "NICK": MessageType.NICK,
    "QUIT": MessageType.QUIT,
    "JOIN": MessageType.JOIN,
    "PART": MessageType.PART,
    "TOPIC": MessageType.TOPIC,
    "INVITE": MessageType.INVITE,
    "KICK": MessageType.KICK,
    "MODE": MessageType.MODE,
    "PRIVMSG": MessageType.PRIVATE,
    "NOTICE": MessageType.NOTICE,
    "PING": MessageType.PING,
    "PONG": MessageType.PONG,
    "ERROR": MessageType.ERROR,
    "CAP": MessageType.CAPABILITY,
}

# Parameter index of each named field, per variant.
_FIELDS: dict[MessageType, dict[str, int]] = {
    MessageType.NICK: {"nick": 0},
    MessageType.QUIT: {"reason": 0},
    MessageType.JOIN: {"channel": 0},
    MessageType.PART: {"channel": 0, "reason": 1},
    MessageType.TOPIC: {"channel": 0, "topic": 1},
    MessageType.INVITE: {"user": 0, "channel": 1},
    MessageType.KICK: {"channel": 0, "user": 1, "reason": 2},
    MessageType.MODE: {"target": 0, "mode": 1, "argument": 2},
    MessageType.PRIVATE: {"target": 0},
    MessageType.NOTICE: {"target": 0},
    MessageType.PING: {"argument": 0},
    MessageType.PONG: {"argument": 1},
    MessageType.ERROR: {"error": 0},
    MessageType.CAPABILITY: {"sub_command": 1},
}

_REQUIRED: dict[MessageType, tuple[str, ...]] = {
    MessageType.NICK: ("nick",),
    MessageType.JOIN: ("channel",),
    MessageType.PART: ("channel",),
    MessageType.TOPIC: ("channel",),
    MessageType.INVITE: ("user", "channel"),
    MessageType.KICK: ("channel", "user"),
    MessageType.MODE: ("target", "mode"),
    MessageType.PRIVATE: ("target", "message"),
    MessageType.NOTICE: ("target", "message"),
    MessageType.ERROR: ("error",),
}

_BODY_TYPES = (MessageType.PRIVATE, MessageType.NOTICE)
_MARKER_FLAGS = MessageFlags.IDENTIFIED | MessageFlags.UNIDENTIFIED

CTCP_DELIMITER = "\x01"
_ACTION_PREFIX = "\x01ACTION "


def _parse_int(text: str | None) -> int | None:
    if not text or not text.isascii():
        return None
    digits = text[1:] if text[0] in "+-" else text
    if not digits.isdigit():
        return None
    return int(text)


def message_type_for(command: str | None) -> MessageType:
    """Map a command token to its message type.

    Named commands win over the numeric rule; any other integer command is
    NUMERIC and everything else UNKNOWN.
    """
    if not command:
        return MessageType.UNKNOWN
    known = COMMAND_TYPES.get(command.upper())
    if known is not None:
        return known
    if _parse_int(command) is not None:
        return MessageType.NUMERIC
    return MessageType.UNKNOWN


class IRCMessage:
    """A classified IRC message.

    ``context`` is the session side view (``nick_name`` and
    ``active_capabilities``) used to resolve :attr:`flags`. A message without
    a context is never valid.
    """

    def __init__(
        self,
        record: RawMessage,
        context: FlagContext | None = None,
        *,
        encoding: str = IRC_DEFAULT_ENCODING,
        timestamp: datetime | None = None,
    ) -> None:
        self.record = record
        self.type = message_type_for(record.command)
        self.context = context
        self.timestamp = timestamp or datetime.now(UTC)
        self._encoding = normalize_encoding(encoding) or default_encoding()
        self._flags: MessageFlags | None = None

    @classmethod
    def from_parameters(
        cls,
        sender: str,
        command: str,
        parameters: Iterable[str],
        context: FlagContext | None = None,
    ) -> IRCMessage:
        """Build a message from text parts instead of wire bytes."""
        record = RawMessage(
            data=b"",
            prefix=sender or None,
            command=command or None,
            params=tuple(p.encode("utf-8") for p in parameters),
        )
        return cls(record, context)

    # -- shared accessors -------------------------------------------------

    @property
    def command(self) -> str:
        return self.record.command or ""

    @property
    def sender(self) -> Sender:
        return self.record.sender

    @property
    def tags(self) -> dict[str, str]:
        return dict(self.record.tags)

    @property
    def encoding(self) -> str:
        return self._encoding

    @encoding.setter
    def encoding(self, value: str) -> None:
        normalized = normalize_encoding(value)
        if normalized is None:
            logger.log_event(
                "irc", "unsupported_encoding", level=logging.WARNING, encoding=value
            )
            return
        self._encoding = normalized

    def param(self, index: int) -> str:
        params = self.record.params
        if index < 0 or index >= len(params):
            return ""
        return decode_text(params[index], self._encoding)

    @property
    def parameters(self) -> list[str]:
        return [decode_text(p, self._encoding) for p in self.record.params]

    def to_data(self) -> bytes:
        return self.record.data

    def is_valid(self) -> bool:
        if self.context is None or not self.record.valid:
            return False
        if not self.sender.is_valid():
            return False
        if self.type is MessageType.NUMERIC:
            return self.code >= 0
        return all(self._required_value(name) for name in _REQUIRED.get(self.type, ()))

    def require_valid(self) -> IRCMessage:
        if not self.is_valid():
            raise MessageValidationError(
                f"invalid {self.type.name} message",
                data={"command": self.command, "params": self.parameters},
            )
        return self

    # -- flags --------------------------------------------------------------

    @property
    def flags(self) -> MessageFlags:
        """Flags resolved against the context on first access, then cached."""
        if self._flags is None:
            self._flags = self._resolve_flags()
        return self._flags

    def _resolve_flags(self) -> MessageFlags:
        flags = MessageFlags.NONE
        context = self.context
        if context is None:
            return flags
        sender = self.sender
        if sender.is_valid() and sender.name == context.nick_name:
            flags |= MessageFlags.OWN
        if (
            self.type in _BODY_TYPES
            and IDENTIFY_MSG_CAPABILITY in context.active_capabilities
        ):
            body = self.param(1)
            if body.startswith("+"):
                flags |= MessageFlags.IDENTIFIED
            elif body.startswith("-"):
                flags |= MessageFlags.UNIDENTIFIED
        return flags

    # -- variant fields ---------------------------------------------------

    def _field(self, name: str) -> str:
        index = _FIELDS.get(self.type, {}).get(name)
        if index is None:
            raise AttributeError(f"{self.type.name} message has no field {name!r}")
        return self.param(index)

    def _required_value(self, name: str) -> str:
        return self.message if name == "message" else self._field(name)

    @property
    def nick(self) -> str:
        return self._field("nick")

    @property
    def reason(self) -> str:
        return self._field("reason")

    @property
    def channel(self) -> str:
        return self._field("channel")

    @property
    def topic(self) -> str:
        return self._field("topic")

    @property
    def user(self) -> str:
        return self._field("user")

    @property
    def target(self) -> str:
        return self._field("target")

    @property
    def mode(self) -> str:
        return self._field("mode")

    @property
    def argument(self) -> str:
        return self._field("argument")

    @property
    def error(self) -> str:
        return self._field("error")

    @property
    def sub_command(self) -> str:
        return self._field("sub_command")

    @property
    def code(self) -> int:
        if self.type is not MessageType.NUMERIC:
            raise AttributeError(f"{self.type.name} message has no field 'code'")
        number = _parse_int(self.record.command)
        return number if number is not None and number >= 0 else -1

    @property
    def capabilities(self) -> list[str]:
        if self.type is not MessageType.CAPABILITY:
            raise AttributeError(
                f"{self.type.name} message has no field 'capabilities'"
            )
        params = self.parameters
        # Terse ACK/NAK replies carry no list.
        if len(params) > 2:
            return params[-1].split()
        return []

    # -- private / notice body ------------------------------------------

    def _body(self) -> str:
        if self.type not in _BODY_TYPES:
            raise AttributeError(f"{self.type.name} message has no message body")
        body = self.param(1)
        # identify-msg marker precedes any CTCP framing
        if self.flags & _MARKER_FLAGS:
            body = body[1:]
        return body

    @staticmethod
    def _is_framed(body: str) -> bool:
        return (
            len(body) >= 2
            and body.startswith(CTCP_DELIMITER)
            and body.endswith(CTCP_DELIMITER)
        )

    def is_action(self) -> bool:
        if self.type is not MessageType.PRIVATE:
            return False
        body = self._body()
        return body.startswith(_ACTION_PREFIX) and len(body) > len(
            _ACTION_PREFIX
        ) and body.endswith(CTCP_DELIMITER)

    def is_request(self) -> bool:
        if self.type is not MessageType.PRIVATE:
            return False
        return self._is_framed(self._body()) and not self.is_action()

    def is_reply(self) -> bool:
        if self.type is not MessageType.NOTICE:
            return False
        return self._is_framed(self._body())

    @property
    def message(self) -> str:
        body = self._body()
        if self.type is MessageType.PRIVATE:
            if self.is_action():
                return body[len(_ACTION_PREFIX) : -1]
            if self.is_request():
                return body[1:-1]
            return body
        if self.is_reply():
            return body[1:-1]
        return body

    def __repr__(self) -> str:
        parts = [f"type={self.type.name}", f"flags={self.flags!r}"]
        if self.sender.is_valid():
            parts.append(f"sender={self.sender.name}")
        if self.command:
            parts.append(f"command={self.command}")
        if self.record.params:
            parts.append(f"params={self.parameters!r}")
        return f"IRCMessage({', '.join(parts)})"


def classify(
    record: RawMessage,
    context: FlagContext | None = None,
    *,
    encoding: str = IRC_DEFAULT_ENCODING,
    timestamp: datetime | None = None,
) -> IRCMessage:
    return IRCMessage(record, context, encoding=encoding, timestamp=timestamp)


__all__ = [
    "COMMAND_TYPES",
    "CTCP_DELIMITER",
    "IRCMessage",
    "classify",
    "message_type_for",
]
