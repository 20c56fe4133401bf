"""IRC subsystem package.

Contains line decoding, message classification, capability and ISUPPORT
handling, the pure session state machine and the asyncio session that
drives it.
"""

from .capabilities import CapabilitySet  # noqa: F401
from .decoder import (  # noqa: F401
    SUPPORTED_ENCODINGS,
    RawMessage,
    Sender,
    decode,
    decode_text,
    is_supported_encoding,
)
from .dispatcher import IRCDispatcher  # noqa: F401
from .isupport import SessionInfo  # noqa: F401
from .messages import IRCMessage, classify, message_type_for  # noqa: F401
from .models import ConnectionState, MessageFlags, MessageType  # noqa: F401
from .protocols import MessageSink  # noqa: F401
from .session import IRCSession  # noqa: F401
from .state_machine import SessionState, Transition  # noqa: F401

__all__ = [
    "SUPPORTED_ENCODINGS",
    "CapabilitySet",
    "ConnectionState",
    "IRCDispatcher",
    "IRCMessage",
    "IRCSession",
    "MessageFlags",
    "MessageSink",
    "MessageType",
    "RawMessage",
    "Sender",
    "SessionInfo",
    "SessionState",
    "Transition",
    "classify",
    "decode",
    "decode_text",
    "is_supported_encoding",
    "message_type_for",
]
