"""Pure session transitions.

Every function here takes the current :class:`SessionState` plus an input
(a socket event or a classified message) and returns a :class:`Transition`:
the next state, the raw lines to send and the events to report. Nothing in
this module performs I/O, which keeps the registration handshake testable
without a socket.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Collection
from dataclasses import dataclass, field

from ..constants import IRC_DEFAULT_PORT
from . import commands
from .capabilities import CapabilitySet
from .ctcp import default_ctcp_reply
from .decoder import default_encoding
from .isupport import SessionInfo, merge_isupport
from .messages import IRCMessage
from .models import (
    RPL_ISUPPORT,
    RPL_WELCOME,
    ConnectionState,
    MessageFlags,
    MessageType,
)
from .protocols import CapabilitySupplier, CtcpResponder


@dataclass(frozen=True)
class SessionState:
    host: str = ""
    port: int = IRC_DEFAULT_PORT
    user_name: str = ""
    nick_name: str = ""
    real_name: str = ""
    encoding: str = field(default_factory=default_encoding)
    secure: bool = False
    connection: ConnectionState = ConnectionState.DISCONNECTED
    connected: bool = False
    active_caps: CapabilitySet = field(default_factory=CapabilitySet)
    available_caps: CapabilitySet = field(default_factory=CapabilitySet)
    info: SessionInfo = field(default_factory=SessionInfo)

    @property
    def active(self) -> bool:
        return self.connection is not ConnectionState.DISCONNECTED

    @property
    def active_capabilities(self) -> CapabilitySet:
        return self.active_caps

    @property
    def available_capabilities(self) -> CapabilitySet:
        return self.available_caps

    def replace(self, **changes: object) -> SessionState:
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]


@dataclass(frozen=True)
class StateChanged:
    state: ConnectionState


@dataclass(frozen=True)
class NickChanged:
    nick: str


@dataclass(frozen=True)
class SessionInfoUpdated:
    info: SessionInfo


@dataclass(frozen=True)
class SocketError:
    kind: str


SessionEvent = StateChanged | NickChanged | SessionInfoUpdated | SocketError


@dataclass(frozen=True)
class Transition:
    state: SessionState
    commands: tuple[str, ...] = ()
    events: tuple[SessionEvent, ...] = ()


@dataclass(frozen=True)
class Collaborators:
    """Callbacks a transition may consult while handling a message."""

    request_capabilities: CapabilitySupplier | None = None
    ctcp_reply: CtcpResponder = default_ctcp_reply


def first_token(name: str) -> str:
    words = name.split()
    return words[0].strip() if words else ""


def _move(
    state: SessionState, connection: ConnectionState, **changes: object
) -> tuple[SessionState, tuple[SessionEvent, ...]]:
    new_state = state.replace(connection=connection, **changes)
    if new_state.connection is state.connection:
        return new_state, ()
    return new_state, (StateChanged(connection),)


# -- socket events --------------------------------------------------------


def begin_connect(state: SessionState) -> Transition:
    new_state, events = _move(state, ConnectionState.CONNECTING, connected=False)
    return Transition(new_state, events=events)


def on_socket_connected(state: SessionState, password: str | None) -> Transition:
    """Start registration: clear capabilities and send PASS/CAP LS/NICK/USER."""
    new_state, events = _move(
        state,
        ConnectionState.REGISTERING,
        connected=False,
        active_caps=CapabilitySet(),
        available_caps=CapabilitySet(),
    )
    lines: list[str] = []
    if password:
        lines.append(commands.password(password))
    lines.append(commands.cap_ls())
    lines.append(commands.nick(state.nick_name))
    lines.append(commands.user(state.user_name, state.real_name))
    return Transition(new_state, tuple(lines), events)


def on_disconnected(state: SessionState) -> Transition:
    new_state, events = _move(state, ConnectionState.DISCONNECTED, connected=False)
    return Transition(new_state, events=events)


def on_socket_error(state: SessionState, kind: str) -> Transition:
    new_state, events = _move(state, ConnectionState.DISCONNECTED, connected=False)
    return Transition(new_state, events=(*events, SocketError(kind)))


def request_nick(state: SessionState, name: str) -> Transition:
    """Change the local nick while inactive, ask the server otherwise."""
    nick = first_token(name)
    if not nick or nick == state.nick_name:
        return Transition(state)
    if state.active:
        return Transition(state, (commands.nick(nick),))
    return Transition(state.replace(nick_name=nick), events=(NickChanged(nick),))


# -- inbound messages -----------------------------------------------------


def handle_message(
    state: SessionState,
    message: IRCMessage,
    collaborators: Collaborators | None = None,
) -> Transition:
    handler = _HANDLERS.get(message.type)
    if handler is None:
        return Transition(state)
    return handler(state, message, collaborators or Collaborators())


def _set_nick(state: SessionState, nick: str) -> tuple[SessionState, tuple[SessionEvent, ...]]:
    if not nick or nick == state.nick_name:
        return state, ()
    return state.replace(nick_name=nick), (NickChanged(nick),)


def _handle_numeric(
    state: SessionState, message: IRCMessage, _collaborators: Collaborators
) -> Transition:
    code = message.code
    if code == RPL_WELCOME:
        state, nick_events = _set_nick(state, message.param(0))
        state, events = _move(state, ConnectionState.CONNECTED, connected=True)
        return Transition(state, events=(*nick_events, *events))
    if code == RPL_ISUPPORT:
        info = SessionInfo(merge_isupport(state.info, message.parameters[1:]))
        return Transition(state.replace(info=info), events=(SessionInfoUpdated(info),))
    return Transition(state)


def _handle_ping(
    state: SessionState, message: IRCMessage, _collaborators: Collaborators
) -> Transition:
    return Transition(state, (commands.pong(message.argument),))


def _handle_private(
    state: SessionState, message: IRCMessage, collaborators: Collaborators
) -> Transition:
    sender = message.sender
    if not message.is_request() or not sender.is_valid():
        return Transition(state)
    body = collaborators.ctcp_reply(message)
    if not body:
        return Transition(state)
    return Transition(state, (commands.ctcp_reply(sender.name or "", body),))


def _handle_nick(
    state: SessionState, message: IRCMessage, _collaborators: Collaborators
) -> Transition:
    if not message.flags & MessageFlags.OWN:
        return Transition(state)
    state, events = _set_nick(state, message.nick)
    return Transition(state, events=events)


def _is_ls_continuation(params: list[str]) -> bool:
    # CAP * LS * :caps (3.2 multiline) or a bare trailing '*'
    if params and params[-1] == "*":
        return True
    return len(params) > 3 and params[2] == "*"


def _requested_capabilities(
    available: CapabilitySet, supplier: CapabilitySupplier | None
) -> list[str]:
    if supplier is None:
        return []
    requested: Collection[str] = supplier(available.to_list()) or ()
    return [cap for cap in requested if cap]


def _handle_capability(
    state: SessionState, message: IRCMessage, collaborators: Collaborators
) -> Transition:
    sub_command = message.sub_command.upper()
    lines: tuple[str, ...] = ()
    if sub_command == "LS":
        state = state.replace(
            available_caps=state.available_caps.merged(message.capabilities)
        )
        if not state.connected and not _is_ls_continuation(message.parameters):
            requested = _requested_capabilities(
                state.available_caps, collaborators.request_capabilities
            )
            lines = (
                (commands.cap_request(requested),) if requested else (commands.cap_end(),)
            )
    elif sub_command in ("ACK", "NAK"):
        if sub_command == "ACK":
            state = state.replace(
                active_caps=state.active_caps.merged(message.capabilities)
            )
        if not state.connected:
            lines = (commands.cap_end(),)
    return Transition(state, lines)


_Handler = Callable[[SessionState, IRCMessage, Collaborators], Transition]

_HANDLERS: dict[MessageType, _Handler] = {
    MessageType.NUMERIC: _handle_numeric,
    MessageType.PING: _handle_ping,
    MessageType.PRIVATE: _handle_private,
    MessageType.NICK: _handle_nick,
    MessageType.CAPABILITY: _handle_capability,
}


__all__ = [
    "Collaborators",
    "NickChanged",
    "SessionEvent",
    "SessionInfoUpdated",
    "SessionState",
    "SocketError",
    "StateChanged",
    "Transition",
    "begin_connect",
    "first_token",
    "handle_message",
    "on_disconnected",
    "on_socket_connected",
    "on_socket_error",
    "request_nick",
]
