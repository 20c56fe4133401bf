"""Protocol definitions for session collaborators.

The session core never imports UI or persistence code; everything it talks
to is described here with ``typing.Protocol`` so any object with the right
shape can be plugged in.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from .messages import IRCMessage
    from .models import ConnectionState


class FlagContext(Protocol):
    """Session side view used to resolve message flags."""

    @property
    def nick_name(self) -> str:
        """Current nick of the session."""
        ...

    @property
    def active_capabilities(self) -> Collection[str]:
        """Capabilities acknowledged by the server."""
        ...


class MessageSink(Protocol):
    """Receiver of everything the session decodes or changes."""

    def on_message(self, message: IRCMessage) -> None:
        """Receive one classified message, after the session handled it."""
        ...

    def on_connection_state_changed(self, state: ConnectionState) -> None:
        """Receive the new connection state."""
        ...

    def on_session_info_updated(self, info: Mapping[str, str]) -> None:
        """Receive a snapshot of the ISUPPORT map."""
        ...

    def on_socket_error(self, kind: str) -> None:
        """Receive a transport failure category."""
        ...

    def on_nick_name_changed(self, nick: str) -> None:
        """Receive the nick the session now uses."""
        ...


PasswordSupplier = Callable[[], "str | None"]
CapabilitySupplier = Callable[[list[str]], "Collection[str]"]
CtcpResponder = Callable[["IRCMessage"], "str | None"]

__all__ = [
    "FlagContext",
    "MessageSink",
    "PasswordSupplier",
    "CapabilitySupplier",
    "CtcpResponder",
]
