"""
Test doubles for the IRC session core
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from ircflow.constants import IRC_DEFAULT_ENCODING
from ircflow.irc import CapabilitySet, IRCMessage, IRCSession, decode
from ircflow.irc.models import ConnectionState


@dataclass
class FakeContext:
    """Stand-in for the session view used to resolve message flags."""

    nick_name: str = "myself"
    active_capabilities: CapabilitySet = field(default_factory=CapabilitySet)

    @classmethod
    def with_caps(cls, *caps: str, nick_name: str = "myself") -> FakeContext:
        return cls(nick_name=nick_name, active_capabilities=CapabilitySet.of(caps))


def make_message(
    line: str | bytes,
    context: FakeContext | None = None,
    encoding: str = IRC_DEFAULT_ENCODING,
) -> IRCMessage:
    data = line.encode("utf-8") if isinstance(line, str) else line
    return IRCMessage(decode(data, encoding), context or FakeContext(), encoding=encoding)


class RecordingSink:
    """Message sink remembering every callback it received."""

    def __init__(self) -> None:
        self.messages: list[IRCMessage] = []
        self.states: list[ConnectionState] = []
        self.infos: list[Mapping[str, str]] = []
        self.errors: list[str] = []
        self.nicks: list[str] = []

    def on_message(self, message: IRCMessage) -> None:
        self.messages.append(message)

    def on_connection_state_changed(self, state: ConnectionState) -> None:
        self.states.append(state)

    def on_session_info_updated(self, info: Mapping[str, str]) -> None:
        self.infos.append(info)

    def on_socket_error(self, kind: str) -> None:
        self.errors.append(kind)

    def on_nick_name_changed(self, nick: str) -> None:
        self.nicks.append(nick)


class ExplodingSink(RecordingSink):
    """Sink whose message callback always raises."""

    def on_message(self, message: IRCMessage) -> None:
        super().on_message(message)
        raise RuntimeError("sink exploded")


class DummySession(IRCSession):
    """Session capturing outgoing lines instead of writing to a socket."""

    def __init__(self, *args, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(*args, **kwargs)
        self.sent: list[str] = []

    async def _send_line(self, line: str) -> bool:  # capture instead of network
        self.sent.append(line)
        return True


def configured_session(session_cls=DummySession, **kwargs) -> IRCSession:  # type: ignore[no-untyped-def]
    """Inactive session with every setting ``open()`` requires."""
    session = session_cls(**kwargs)
    session.host = "irc.example.org"
    session.user_name = "user"
    session.real_name = "Real Name"
    session.state = session.state.replace(nick_name="myself")
    return session


class FakeTransport:
    def __init__(self) -> None:
        self.aborted = False

    def abort(self) -> None:
        self.aborted = True


class FakeWriter:
    """Minimal asyncio.StreamWriter replacement recording written bytes."""

    def __init__(self, fail_with: BaseException | None = None) -> None:
        self.data = bytearray()
        self.transport = FakeTransport()
        self.fail_with = fail_with

    def write(self, data: bytes) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.data.extend(data)

    async def drain(self) -> None:
        return None

    @property
    def lines(self) -> list[str]:
        return [line for line in self.data.decode("utf-8").split("\r\n") if line]
