"""Async IRC session: socket owner driving the pure state machine."""

from __future__ import annotations

import asyncio
import logging
import socket
import ssl
from collections.abc import Collection
from typing import TYPE_CHECKING, Any

from ..constants import IRC_CONNECT_TIMEOUT, IRC_READ_CHUNK_SIZE
from ..errors import ConfigurationError, NetworkError
from ..logs.logger import logger
from .capabilities import CapabilitySet
from .ctcp import default_ctcp_reply
from .decoder import RawMessage, normalize_encoding
from .dispatcher import IRCDispatcher
from .isupport import SessionInfo
from .messages import IRCMessage, classify
from .models import ConnectionState
from .protocols import CapabilitySupplier, CtcpResponder, MessageSink, PasswordSupplier
from .state_machine import (
    Collaborators,
    NickChanged,
    SessionEvent,
    SessionInfoUpdated,
    SessionState,
    SocketError,
    StateChanged,
    Transition,
    begin_connect,
    first_token,
    handle_message,
    on_disconnected,
    on_socket_connected,
    on_socket_error,
    request_nick,
)

if TYPE_CHECKING:  # pragma: no cover
    from ..config.model import SessionConfig


def to_network_error(exc: BaseException) -> NetworkError:
    """Wrap a transport exception with a short failure category."""
    if isinstance(exc, TimeoutError):
        kind = "timeout"
    elif isinstance(exc, ConnectionRefusedError):
        kind = "connection_refused"
    elif isinstance(exc, ConnectionResetError):
        kind = "connection_reset"
    elif isinstance(exc, socket.gaierror):
        kind = "host_not_found"
    elif isinstance(exc, ssl.SSLError):
        kind = "ssl_handshake_failed"
    else:
        kind = "network"
    return NetworkError(str(exc) or type(exc).__name__, kind=kind)


class IRCSession:  # pylint: disable=too-many-instance-attributes
    """One IRC connection.

    Inbound bytes are split into lines by :class:`IRCDispatcher`, decoded,
    classified and fed through :func:`handle_message` while holding the
    session lock, so state changes for one session never interleave. The
    resulting lines are written, events and the message itself go to the
    sink.
    """

    def __init__(
        self,
        sink: MessageSink | None = None,
        *,
        password_supplier: PasswordSupplier | None = None,
        capability_supplier: CapabilitySupplier | None = None,
        ctcp_responder: CtcpResponder | None = None,
    ) -> None:
        self.state = SessionState()
        self.sink = sink
        self.password_supplier = password_supplier
        self.capability_supplier = capability_supplier
        self.ctcp_responder = ctcp_responder or default_ctcp_reply
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self.message_buffer = b""
        self._lock = asyncio.Lock()
        self._reader_task: asyncio.Task[None] | None = None
        self._generation = 0
        self.dispatcher = IRCDispatcher(self)

    @classmethod
    def from_config(
        cls, config: SessionConfig, sink: MessageSink | None = None, **kwargs: Any
    ) -> IRCSession:
        """Create a session from a validated config model.

        A configured password or capability list is used unless explicit
        suppliers are passed.
        """
        if config.password and "password_supplier" not in kwargs:
            secret = config.password
            kwargs["password_supplier"] = lambda: secret
        if config.capabilities and "capability_supplier" not in kwargs:
            wanted = list(config.capabilities)
            kwargs["capability_supplier"] = lambda available: [
                cap for cap in wanted if cap in available
            ]
        session = cls(sink, **kwargs)
        session.state = session.state.replace(
            host=config.host,
            port=config.port,
            user_name=config.user_name,
            nick_name=config.nick_name,
            real_name=config.real_name,
            encoding=config.encoding,
            secure=config.secure,
        )
        return session

    # -- public state -----------------------------------------------------

    @property
    def connection_state(self) -> ConnectionState:
        return self.state.connection

    @property
    def active(self) -> bool:
        return self.state.active

    @property
    def connected(self) -> bool:
        return self.state.connected

    @property
    def nick_name(self) -> str:
        return self.state.nick_name

    @property
    def active_capabilities(self) -> CapabilitySet:
        return self.state.active_caps

    @property
    def available_capabilities(self) -> CapabilitySet:
        return self.state.available_caps

    @property
    def info(self) -> SessionInfo:
        return self.state.info

    def _warn_if_active(self, setting: str) -> None:
        if self.active:
            logger.log_event(
                "session",
                "setting_deferred",
                level=logging.WARNING,
                nick=self.nick_name,
                host=self.host,
                setting=setting,
            )

    @property
    def host(self) -> str:
        return self.state.host

    @host.setter
    def host(self, value: str) -> None:
        self._warn_if_active("host")
        self.state = self.state.replace(host=value)

    @property
    def port(self) -> int:
        return self.state.port

    @port.setter
    def port(self, value: int) -> None:
        self._warn_if_active("port")
        self.state = self.state.replace(port=value)

    @property
    def user_name(self) -> str:
        return self.state.user_name

    @user_name.setter
    def user_name(self, value: str) -> None:
        self._warn_if_active("user_name")
        self.state = self.state.replace(user_name=first_token(value))

    @property
    def real_name(self) -> str:
        return self.state.real_name

    @real_name.setter
    def real_name(self, value: str) -> None:
        self._warn_if_active("real_name")
        self.state = self.state.replace(real_name=value)

    @property
    def secure(self) -> bool:
        return self.state.secure

    @secure.setter
    def secure(self, value: bool) -> None:
        self._warn_if_active("secure")
        self.state = self.state.replace(secure=value)

    @property
    def encoding(self) -> str:
        return self.state.encoding

    @encoding.setter
    def encoding(self, value: str) -> None:
        self.set_encoding(value)

    def set_encoding(self, value: str) -> bool:
        """Set the fallback codec; unsupported names are reported and ignored."""
        normalized = normalize_encoding(value)
        if normalized is None:
            logger.log_event(
                "session",
                "unsupported_encoding",
                level=logging.WARNING,
                nick=self.nick_name,
                host=self.host,
                encoding=value,
            )
            return False
        self.state = self.state.replace(encoding=normalized)
        return True

    async def set_nick_name(self, name: str) -> None:
        """Change the nick locally while inactive, request it from the server otherwise."""
        async with self._lock:
            await self._apply(request_nick(self.state, name))

    def get_session_snapshot(self) -> dict[str, Any]:
        state = self.state
        return {
            "host": state.host,
            "port": state.port,
            "nick_name": state.nick_name,
            "user_name": state.user_name,
            "state": state.connection.name,
            "active": state.active,
            "connected": state.connected,
            "secure": state.secure,
            "encoding": state.encoding,
            "active_capabilities": state.active_caps.to_list(),
            "available_capabilities": state.available_caps.to_list(),
            "info": state.info.to_dict(),
            "has_streams": self.reader is not None and self.writer is not None,
        }

    # -- connection lifecycle ---------------------------------------------

    def _validate_for_open(self) -> None:
        state = self.state
        missing = [
            name
            for name, value in (
                ("host", state.host),
                ("user_name", state.user_name),
                ("nick_name", state.nick_name),
                ("real_name", state.real_name),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"cannot open session, missing {', '.join(missing)}",
                data={"missing": missing},
            )

    async def open(self) -> bool:
        try:
            self._validate_for_open()
        except ConfigurationError as e:
            logger.log_event(
                "session",
                "open_rejected",
                level=logging.ERROR,
                nick=self.nick_name,
                host=self.host,
                error=str(e),
                missing=e.data.get("missing"),
            )
            return False
        if self.active:
            logger.log_event(
                "session",
                "already_active",
                level=logging.WARNING,
                nick=self.nick_name,
                host=self.host,
            )
            return False

        async with self._lock:
            await self._apply(begin_connect(self.state))
            generation = self._generation
        logger.log_event(
            "session",
            "connect_start",
            nick=self.nick_name,
            host=self.host,
            port=self.port,
            secure=self.secure,
        )
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(
                    self.host,
                    self.port,
                    ssl=ssl.create_default_context() if self.secure else None,
                ),
                timeout=IRC_CONNECT_TIMEOUT,
            )
        except (TimeoutError, OSError) as e:
            if generation == self._generation:
                await self._handle_socket_error(e)
            return False

        async with self._lock:
            if (
                generation != self._generation
                or self.state.connection is not ConnectionState.CONNECTING
            ):
                writer.transport.abort()
                logger.log_event(
                    "session",
                    "connect_cancelled",
                    level=logging.DEBUG,
                    nick=self.nick_name,
                    host=self.host,
                )
                return False
            try:
                password = self.password_supplier() if self.password_supplier else None
            except Exception as e:  # noqa: BLE001
                self._collaborator_failed("password_supplier", e)
                writer.transport.abort()
                await self._apply(on_disconnected(self.state))
                return False
            self.reader, self.writer = reader, writer
            self.message_buffer = b""
            await self._apply(on_socket_connected(self.state, password))
            self._reader_task = asyncio.create_task(self._read_loop())
        logger.log_event(
            "session", "registration_sent", nick=self.nick_name, host=self.host
        )
        return True

    async def close(self) -> None:
        """Stop reading and writing immediately; pending writes may be lost.

        A connect still in flight is abandoned: its transport is aborted as
        soon as it completes and nothing is sent on it.
        """
        self._generation += 1
        task = self._reader_task
        self._reader_task = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._drop_streams()
        async with self._lock:
            await self._apply(on_disconnected(self.state))
        logger.log_event(
            "session", "closed", level=logging.DEBUG, nick=self.nick_name, host=self.host
        )

    def _drop_streams(self) -> None:
        writer = self.writer
        self.writer = None
        self.reader = None
        self.message_buffer = b""
        if writer is not None:
            writer.transport.abort()

    async def _read_loop(self) -> None:
        reader = self.reader
        if reader is None:
            return
        try:
            while True:
                data = await reader.read(IRC_READ_CHUNK_SIZE)
                if not data:
                    break
                self.message_buffer = await self.dispatcher.process_incoming_data(
                    self.message_buffer, data
                )
        except (TimeoutError, OSError) as e:
            self._reader_task = None
            await self._handle_socket_error(e)
            return
        self._reader_task = None
        self._drop_streams()
        async with self._lock:
            await self._apply(on_disconnected(self.state))
        logger.log_event(
            "session", "disconnected", level=logging.WARNING, nick=self.nick_name, host=self.host
        )

    async def _handle_socket_error(self, exc: BaseException) -> None:
        error = to_network_error(exc)
        logger.log_event(
            "session",
            "socket_error",
            level=logging.ERROR,
            nick=self.nick_name,
            host=self.host,
            kind=error.kind,
            error=str(error),
        )
        self._drop_streams()
        async with self._lock:
            await self._apply(on_socket_error(self.state, error.kind))

    # -- message processing -------------------------------------------------

    async def process_record(self, record: RawMessage) -> IRCMessage:
        """Classify one decoded record, run its transition and deliver it."""
        async with self._lock:
            message = classify(record, self, encoding=self.state.encoding)
            collaborators = Collaborators(
                request_capabilities=(
                    self._request_capabilities if self.capability_supplier else None
                ),
                ctcp_reply=self._ctcp_reply,
            )
            await self._apply(handle_message(self.state, message, collaborators))
            self._notify("on_message", message)
            return message

    def _request_capabilities(self, available: list[str]) -> Collection[str]:
        supplier = self.capability_supplier
        if supplier is None:
            return ()
        try:
            return supplier(available)
        except Exception as e:  # noqa: BLE001
            self._collaborator_failed("capability_supplier", e)
            return ()

    def _ctcp_reply(self, message: IRCMessage) -> str | None:
        try:
            return self.ctcp_responder(message)
        except Exception as e:  # noqa: BLE001
            self._collaborator_failed("ctcp_responder", e)
            return None

    def _collaborator_failed(self, callback: str, exc: Exception) -> None:
        logger.log_event(
            "session",
            "collaborator_error",
            level=logging.ERROR,
            nick=self.nick_name,
            host=self.host,
            callback=callback,
            error=str(exc),
            error_type=type(exc).__name__,
        )

    async def _apply(self, transition: Transition) -> None:
        self.state = transition.state
        for line in transition.commands:
            await self._send_line(line)
        for event in transition.events:
            self._emit(event)

    def _emit(self, event: SessionEvent) -> None:
        if isinstance(event, StateChanged):
            logger.log_event(
                "session",
                "state_change",
                level=logging.DEBUG,
                nick=self.nick_name,
                host=self.host,
                new_state=event.state.name,
            )
            self._notify("on_connection_state_changed", event.state)
        elif isinstance(event, SessionInfoUpdated):
            self._notify("on_session_info_updated", event.info.to_dict())
        elif isinstance(event, SocketError):
            self._notify("on_socket_error", event.kind)
        elif isinstance(event, NickChanged):
            logger.log_event(
                "session", "nick_changed", nick=event.nick, host=self.host
            )
            self._notify("on_nick_name_changed", event.nick)

    def _notify(self, method: str, payload: object) -> None:
        sink = self.sink
        if sink is None:
            return
        try:
            getattr(sink, method)(payload)
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "session",
                "sink_error",
                level=logging.ERROR,
                nick=self.nick_name,
                host=self.host,
                callback=method,
                error=str(e),
                error_type=type(e).__name__,
            )

    # -- outgoing -------------------------------------------------------------

    async def _send_line(self, line: str) -> bool:
        return await self.send_data(f"{line}\r\n".encode())

    async def send_raw(self, message: str) -> bool:
        """Send one raw line, UTF-8 encoded; CR/LF are appended."""
        return await self._send_line(message.rstrip("\r\n"))

    async def send_data(self, data: bytes) -> bool:
        writer = self.writer
        if writer is None:
            return False
        logger.log_event(
            "irc",
            "raw_out",
            level=logging.DEBUG,
            nick=self.nick_name,
            host=self.host,
            raw=data.rstrip(b"\r\n"),
        )
        try:
            writer.write(data)
            await writer.drain()
        except (ConnectionError, OSError) as e:
            logger.log_event(
                "irc",
                "write_failed",
                level=logging.WARNING,
                nick=self.nick_name,
                host=self.host,
                error=str(e),
            )
            return False
        return True


__all__ = ["IRCSession", "to_network_error"]
