"""Shared IRC data models."""

from __future__ import annotations

from enum import Enum, IntFlag, auto


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    REGISTERING = auto()
    CONNECTED = auto()


class MessageType(Enum):
    UNKNOWN = auto()
    NICK = auto()
    QUIT = auto()
    JOIN = auto()
    PART = auto()
    TOPIC = auto()
    INVITE = auto()
    KICK = auto()
    MODE = auto()
    PRIVATE = auto()
    NOTICE = auto()
    PING = auto()
    PONG = auto()
    ERROR = auto()
    NUMERIC = auto()
    CAPABILITY = auto()


class MessageFlags(IntFlag):
    NONE = 0
    OWN = 1
    IDENTIFIED = 2
    UNIDENTIFIED = 4


# Numeric replies the session itself reacts to.
RPL_WELCOME = 1
RPL_ISUPPORT = 5

IDENTIFY_MSG_CAPABILITY = "identify-msg"
